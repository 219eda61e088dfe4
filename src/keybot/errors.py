# errors.py
from __future__ import annotations

from dataclasses import dataclass


class KeybotError(Exception):
    """Base class for every failure a single invocation can report."""


@dataclass
class ParseError(KeybotError):
    """
    The command line could not be matched against the grammar.

    `usage` carries the usage text of the whole grammar so the caller can
    show it next to the error.
    """
    message: str
    usage: str = ""

    def __str__(self) -> str:
        return self.message


class BuildError(KeybotError):
    """No job descriptor can be built for the matched command."""


class ResolutionError(KeybotError):
    """A lookup the job depends on failed (e.g. a log path)."""


@dataclass
class LogPathNotFound(ResolutionError):
    label: str

    def __str__(self) -> str:
        return f"No log path known for label: {self.label}"


class RunnerError(KeybotError):
    """The job runner reported a failure. The message is passed on as-is."""
