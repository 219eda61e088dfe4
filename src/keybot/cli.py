# cli.py
from __future__ import annotations

import sys

import click
from loguru import logger
from pydantic import ValidationError

from keybot.config import BotConfig
from keybot.dispatcher import Dispatcher
from keybot.grammar import KEYBOT
from keybot.parser import render_usage
from keybot.runner import RunnerClient
from keybot.ui.console import Console, get_console, set_console


def _configure_logging(debug: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "WARNING")


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """keybot: turns chat commands into background job requests."""
    console = Console(debug=debug)
    set_console(console)
    _configure_logging(debug)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.option(
    "--dry-run/--live",
    default=None,
    help="Echo the matched command instead of running it (defaults to $KEYBOT_DRY_RUN)",
)
@click.option("--runner-url", default=None, help="Job runner base URL (defaults to $KEYBOT_RUNNER_URL)")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run(ctx, dry_run, runner_url, args):
    """Run a keybot command, e.g. `keybot run build ios --client-commit abc123`."""
    console = get_console()
    try:
        config = BotConfig.from_env()
    except ValidationError as e:
        console.print_error(
            "Invalid configuration",
            "Could not read keybot settings from the environment.",
            details=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
            suggestion="Set KEYBOT_DRY_RUN to true or false, or pass --dry-run/--live.",
        )
        sys.exit(1)

    if dry_run is None:
        dry_run = config.dry_run
    runner_url = runner_url or config.runner_url
    runner = RunnerClient(runner_url) if runner_url else None
    console.print_debug(f"dry_run={dry_run} runner={runner_url}")

    dispatcher = Dispatcher(runner, dry_run=dry_run, home_dir=config.home_dir)
    reply = dispatcher.run(list(args))

    if reply.ok:
        console.print_reply(reply.text)
        return

    suggestion = None
    if runner is None and not dry_run and not reply.text:
        suggestion = "Pass --runner-url, set KEYBOT_RUNNER_URL, or use --dry-run."
    elif reply.text:
        suggestion = reply.text.rstrip("\n")
    console.print_error("Command failed", reply.error, suggestion=suggestion)
    sys.exit(1)


@cli.command(name="help")
def help_():
    """Show the usage of every keybot command."""
    get_console().print_reply(render_usage(KEYBOT))


@cli.command()
def commands():
    """List every runnable command."""
    get_console().print_commands(
        (" ".join(path), leaf.help) for path, leaf in KEYBOT.walk()
    )


if __name__ == "__main__":
    cli()
