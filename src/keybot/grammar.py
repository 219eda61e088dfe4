# grammar.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

FLAG = "flag"
POSITIONAL = "positional"

STRING = "string"
BOOL = "bool"
INT = "int"

VALUE_TYPES = (STRING, BOOL, INT)


@dataclass(frozen=True)
class ParameterSpec:
    """A positional argument or a `--name value` flag of a leaf command."""
    name: str
    kind: str
    value_type: str = STRING
    required: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        if self.kind not in (FLAG, POSITIONAL):
            raise ValueError(f"Parameter {self.name!r}: unknown kind {self.kind!r}")
        if self.value_type not in VALUE_TYPES:
            raise ValueError(f"Parameter {self.name!r}: unknown value type {self.value_type!r}")

    @property
    def is_flag(self) -> bool:
        return self.kind == FLAG


@dataclass(frozen=True)
class CommandSpec:
    """
    A node in the command tree.

    A node without children is a leaf and is executable once its parameters
    are bound. A node with children is a group (e.g. "build").
    """
    name: str
    help: str = ""
    children: Tuple["CommandSpec", ...] = field(default_factory=tuple)
    parameters: Tuple[ParameterSpec, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))
        object.__setattr__(self, "parameters", tuple(self.parameters))

        child_names = [c.name for c in self.children]
        if len(set(child_names)) != len(child_names):
            dupes = sorted({n for n in child_names if child_names.count(n) > 1})
            raise ValueError(f"Command {self.name!r} has duplicate subcommands: {dupes}")

        param_names = [p.name for p in self.parameters]
        if len(set(param_names)) != len(param_names):
            dupes = sorted({n for n in param_names if param_names.count(n) > 1})
            raise ValueError(f"Command {self.name!r} has duplicate parameters: {dupes}")

        if self.children and self.parameters:
            raise ValueError(f"Group command {self.name!r} cannot declare parameters")

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def find_child(self, name: str) -> Optional["CommandSpec"]:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def flags(self) -> list[ParameterSpec]:
        return [p for p in self.parameters if p.is_flag]

    def positionals(self) -> list[ParameterSpec]:
        return [p for p in self.parameters if not p.is_flag]

    def required_parameters(self) -> list[ParameterSpec]:
        return [p for p in self.parameters if p.required]

    def walk(self, prefix: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], "CommandSpec"]]:
        """Yield (command_path, leaf) for every leaf below this node, in declared order."""
        for child in self.children:
            path = prefix + (child.name,)
            if child.is_leaf:
                yield path, child
            else:
                yield from child.walk(path)


# ---------------------------------------------------------------------
# Declaration helpers
# ---------------------------------------------------------------------

def flag(
    name: str,
    description: str = "",
    *,
    value_type: str = STRING,
    required: bool = False,
) -> ParameterSpec:
    return ParameterSpec(
        name=name,
        kind=FLAG,
        value_type=value_type,
        required=required,
        description=description,
    )


def arg(
    name: str,
    description: str = "",
    *,
    value_type: str = STRING,
    required: bool = False,
) -> ParameterSpec:
    return ParameterSpec(
        name=name,
        kind=POSITIONAL,
        value_type=value_type,
        required=required,
        description=description,
    )


def command(name: str, help: str = "", *parameters: ParameterSpec) -> CommandSpec:
    """Declare a leaf command: command("cancel", "Cancel", arg("label", required=True))"""
    return CommandSpec(name=name, help=help, parameters=parameters)


def group(name: str, help: str = "", *children: CommandSpec) -> CommandSpec:
    """Declare a group whose children are subcommands."""
    if not children:
        raise ValueError(f"group({name!r}) must have at least one subcommand")
    return CommandSpec(name=name, help=help, children=children)


# ---------------------------------------------------------------------
# The keybot command tree
# ---------------------------------------------------------------------

APP_NAME = "keybot"
APP_HELP = "Job command parser for keybot"

KEYBOT = CommandSpec(
    name=APP_NAME,
    help=APP_HELP,
    children=(
        group(
            "build", "Build things",
            command("android", "Start an android build"),
            command(
                "ios", "Start an ios build",
                flag("client-commit", "Build a specific client commit hash"),
                flag("kbfs-commit", "Build a specific kbfs commit hash"),
            ),
        ),
        command(
            "cancel", "Cancel",
            arg("label", "Launchd job label", required=True),
        ),
        group(
            "release", "Release things",
            command(
                "promote", "Promote a release to public",
                arg("release-to-promote", "Promote a specific release to public immediately"),
            ),
            command(
                "broken", "Mark a release as broken",
                arg("version", "Mark a release as broken", required=True),
            ),
        ),
        command(
            "smoketest", "Set the smoke testing status of a build",
            flag("build-a", "The first of the two IDs comprising the new build", required=True),
            flag("platform", "The build's platform (darwin, linux, windows)", required=True),
            flag("enable", "Whether smoketesting should be enabled", value_type=BOOL, required=True),
            flag("max-testers", "Max number of testers for this build", value_type=INT, required=True),
        ),
        command(
            "dumplog", "Show the log file",
            arg("label", "Launchd job label", required=True),
        ),
        command(
            "upgrade", "Upgrade package",
            arg("name", "Package name (yarn, go, fastlane, etc)", required=True),
        ),
    ),
)
