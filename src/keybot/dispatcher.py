# dispatcher.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from loguru import logger

from .builders import build
from .env import resolve, resolve_from_environ
from .errors import KeybotError, ParseError, RunnerError
from .grammar import KEYBOT, CommandSpec
from .parser import ParsedCommand, UsageText, describe, parse, render_usage, split_command_line
from .runner.base import JobRunner

CANCEL_PATH = ("cancel",)


@dataclass(frozen=True)
class Reply:
    """
    What a single invocation hands back to the chat transport.

    `text` is usage, an echo or the runner's message. `error` is set when
    the invocation failed.
    """
    text: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Dispatcher:
    """Routes parsed commands to the job runner, or echoes them in dry-run mode."""

    def __init__(
        self,
        runner: Optional[JobRunner],
        *,
        dry_run: bool = False,
        home_dir: Optional[str] = None,
        grammar: CommandSpec = KEYBOT,
    ):
        """
        Args:
            runner: Job runner used in live mode (may be None for dry runs)
            dry_run: Echo matched commands instead of running them
            home_dir: Home directory for job environments (defaults to $HOME)
            grammar: Command tree to parse against
        """
        self.runner = runner
        self.dry_run = dry_run
        self.home_dir = home_dir
        self.grammar = grammar

    def help(self) -> str:
        return render_usage(self.grammar)

    def run_line(self, text: str, *, dry_run: Optional[bool] = None) -> Reply:
        """Tokenize a chat line and run it."""
        try:
            args = split_command_line(text, render_usage(self.grammar))
        except ParseError as e:
            return Reply(text=e.usage, error=str(e))
        return self.run(args, dry_run=dry_run)

    def run(self, args: Sequence[str], *, dry_run: Optional[bool] = None) -> Reply:
        """
        Handle one invocation. Never raises: every failure comes back as a
        Reply with `error` set.
        """
        logger.debug("dispatch: {}", list(args))
        try:
            result = parse(self.grammar, args)
        except ParseError as e:
            logger.debug("parse error: {}", e)
            return Reply(text=e.usage, error=str(e))

        if isinstance(result, UsageText):
            return Reply(text=result.text)

        if dry_run is None:
            dry_run = self.dry_run
        if dry_run:
            return Reply(text=f"I would have run: `{describe(self.grammar, result)}`")

        try:
            return Reply(text=self._run_live(result))
        except KeybotError as e:
            logger.warning("{} failed: {}", result.name, e)
            return Reply(text="", error=str(e))
        except Exception as e:
            logger.exception("{} failed unexpectedly", result.name)
            return Reply(text="", error=f"Unexpected error: {e}")

    def _run_live(self, parsed: ParsedCommand) -> str:
        if self.runner is None:
            raise RunnerError("No job runner configured")

        if parsed.command_path == CANCEL_PATH:
            label = parsed.values["label"]
            logger.info("stopping job {}", label)
            return self.runner.stop(label)

        env = resolve(self.home_dir) if self.home_dir is not None else resolve_from_environ()
        descriptor = build(parsed, env, log_path_for_label=self.runner.log_path_for_label)
        logger.info("starting job {} ({})", descriptor.label, descriptor.script_path)
        return self.runner.start(descriptor)
