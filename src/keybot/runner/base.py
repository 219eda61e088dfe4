# runner/base.py
from __future__ import annotations

from typing import Protocol

from keybot.model import JobDescriptor


class JobRunner(Protocol):
    """
    The three calls keybot makes to whatever runs background jobs.

    Failures raise RunnerError; an unknown label in log_path_for_label
    raises LogPathNotFound.
    """

    def start(self, descriptor: JobDescriptor) -> str:
        ...

    def stop(self, label: str) -> str:
        ...

    def log_path_for_label(self, label: str) -> str:
        ...
