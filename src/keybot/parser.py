# parser.py
from __future__ import annotations

import re
import shlex
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from .errors import ParseError
from .grammar import BOOL, INT, STRING, CommandSpec, ParameterSpec

HELP_FLAG = "--help"
END_OF_FLAGS = "--"

_INT_RE = re.compile(r"[+-]?[0-9]+")

# range of a 64-bit signed int
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1

# value bound to an optional parameter the command line left out
_ZERO_VALUES = {STRING: "", BOOL: False, INT: 0}


@dataclass(frozen=True)
class ParsedCommand:
    """
    A leaf command matched against the grammar, with its bound values.

    `values` is read-only and holds an entry for every parameter of the
    matched leaf.
    """
    command_path: Tuple[str, ...]
    values: Mapping[str, Any]

    @property
    def name(self) -> str:
        return " ".join(self.command_path)


@dataclass(frozen=True)
class UsageText:
    """Help text returned instead of a command. Not an error."""
    text: str


ParseResult = Union[ParsedCommand, UsageText]


# ---------------------------------------------------------------------
# Usage
# ---------------------------------------------------------------------

def _flag_placeholder(spec: ParameterSpec) -> str:
    if spec.value_type == BOOL:
        return f"--{spec.name}=true|false"
    return f"--{spec.name}={spec.name.upper()}"


def _signature(path: Sequence[str], leaf: CommandSpec) -> str:
    parts = list(path)
    for spec in leaf.flags():
        if spec.required:
            parts.append(_flag_placeholder(spec))
    if any(not spec.required for spec in leaf.flags()):
        parts.append("[<flags>]")
    for spec in leaf.positionals():
        parts.append(f"<{spec.name}>" if spec.required else f"[<{spec.name}>]")
    return " ".join(parts)


def render_usage(grammar: CommandSpec) -> str:
    """Render the usage text of the whole grammar."""
    lines = [
        f"usage: {grammar.name} <command> [<flags>] [<args> ...]",
        "",
    ]
    if grammar.help:
        lines += [grammar.help, ""]
    lines.append("Commands:")
    for path, leaf in grammar.walk():
        lines.append(f"  {_signature(path, leaf)}")
        if leaf.help:
            lines.append(f"    {leaf.help}")
        if leaf.parameters:
            lines.append("")
        for spec in leaf.flags():
            lines.append(f"    {_flag_placeholder(spec)}")
            if spec.description:
                lines.append(f"      {spec.description}")
        for spec in leaf.positionals():
            lines.append(f"    <{spec.name}>")
            if spec.description:
                lines.append(f"      {spec.description}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


# ---------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------

def convert_value(spec: ParameterSpec, raw: str, usage: str = "") -> Any:
    """Convert a raw token to the parameter's type, or raise ParseError."""
    if spec.value_type == BOOL:
        if raw == "true":
            return True
        if raw == "false":
            return False
    elif spec.value_type == INT:
        if _INT_RE.fullmatch(raw):
            try:
                value = int(raw)
            except ValueError:
                # longer than the interpreter's int conversion limit
                value = None
            if value is not None and INT_MIN <= value <= INT_MAX:
                return value
    else:
        return raw

    what = f"flag '--{spec.name}'" if spec.is_flag else f"argument '{spec.name}'"
    expected = "true or false" if spec.value_type == BOOL else "an integer"
    raise ParseError(f"{what} expected {expected}, got {raw!r}", usage)


def format_value(value: Any) -> str:
    """Render a bound value the way it is written into a job's environment."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ---------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------

def split_command_line(text: str, usage: str = "") -> list[str]:
    """Split a chat line into tokens, honouring shell-style quoting."""
    try:
        return shlex.split(text)
    except ValueError as e:
        raise ParseError(f"could not split command line: {e}", usage) from e


def _bind(leaf: CommandSpec, tokens: Sequence[str], usage: str) -> Optional[dict[str, Any]]:
    """Bind tokens to the leaf's parameters. Returns None when `--help` is given as a flag."""
    flags = {spec.name: spec for spec in leaf.flags()}
    positionals = leaf.positionals()
    bound: dict[str, Any] = {}
    next_positional = 0
    flags_done = False

    i = 0
    while i < len(tokens):
        token = tokens[i]

        if not flags_done and token == END_OF_FLAGS:
            flags_done = True
        elif not flags_done and token == HELP_FLAG:
            return None
        elif not flags_done and token.startswith("--"):
            name, has_inline, inline = token[2:].partition("=")
            spec = flags.get(name)
            if spec is None:
                raise ParseError(f"unknown flag '--{name}'", usage)
            if name in bound:
                raise ParseError(f"flag '--{name}' cannot be repeated", usage)
            if has_inline:
                raw = inline
            else:
                if i + 1 >= len(tokens):
                    raise ParseError(f"expected a value for flag '--{name}'", usage)
                i += 1
                raw = tokens[i]
            bound[name] = convert_value(spec, raw, usage)
        else:
            if next_positional >= len(positionals):
                raise ParseError(f"unexpected argument {token!r}", usage)
            spec = positionals[next_positional]
            next_positional += 1
            bound[spec.name] = convert_value(spec, token, usage)
        i += 1

    return bound


def parse(grammar: CommandSpec, args: Sequence[str]) -> ParseResult:
    """
    Match `args` against `grammar`.

    Returns a ParsedCommand, or UsageText when the command line asks for
    help: empty args, a bare group, `--help`, or a missing required
    parameter. Malformed input raises ParseError carrying the usage text.
    """
    usage = render_usage(grammar)
    tokens = list(args)

    node = grammar
    path: list[str] = []
    i = 0
    while not node.is_leaf:
        if i >= len(tokens) or tokens[i] == HELP_FLAG:
            return UsageText(usage)
        child = node.find_child(tokens[i])
        if child is None:
            raise ParseError(f"unknown command {tokens[i]!r}", usage)
        path.append(child.name)
        node = child
        i += 1

    bound = _bind(node, tokens[i:], usage)
    if bound is None:
        return UsageText(usage)
    if any(spec.name not in bound for spec in node.required_parameters()):
        return UsageText(usage)

    values = {
        spec.name: bound.get(spec.name, _ZERO_VALUES[spec.value_type])
        for spec in node.parameters
    }
    return ParsedCommand(command_path=tuple(path), values=MappingProxyType(values))


def describe(grammar: CommandSpec, parsed: ParsedCommand) -> str:
    """Render a parsed command back as a single command line."""
    node = grammar
    for name in parsed.command_path:
        child = node.find_child(name)
        if child is None:
            raise ValueError(f"{parsed.name!r} is not part of the grammar")
        node = child

    parts = list(parsed.command_path)
    for spec in node.flags():
        parts.append(f"--{spec.name}={shlex.quote(format_value(parsed.values[spec.name]))}")
    for spec in node.positionals():
        parts.append(shlex.quote(format_value(parsed.values[spec.name])))
    return " ".join(parts)
