"""Tests for routing parsed commands to the job runner."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from keybot.dispatcher import Dispatcher, Reply
from keybot.errors import LogPathNotFound, RunnerError
from keybot.model import EnvVar
from keybot.parser import render_usage
from keybot.grammar import KEYBOT

SMOKETEST = [
    "smoketest",
    "--build-a", "A123",
    "--platform", "darwin",
    "--enable", "true",
    "--max-testers", "50",
]


@pytest.fixture
def live(runner):
    return Dispatcher(runner, dry_run=False, home_dir="/home/bot")


@pytest.fixture
def dry(runner):
    return Dispatcher(runner, dry_run=True, home_dir="/home/bot")


class TestLive:
    def test_smoketest_starts_job(self, live, runner):
        reply = live.run(SMOKETEST)
        assert reply == Reply(text="started")
        descriptor = runner.start.call_args[0][0]
        assert descriptor.label == "keybase.smoketest"
        assert descriptor.platform == "darwin"
        assert descriptor.env_vars == (
            EnvVar("SMOKETEST_BUILD_A", "A123"),
            EnvVar("SMOKETEST_MAX_TESTERS", "50"),
            EnvVar("SMOKETEST_ENABLE", "true"),
        )
        assert descriptor.environment.home_dir == "/home/bot"
        runner.stop.assert_not_called()

    def test_cancel_stops_by_label(self, live, runner):
        reply = live.run(["cancel", "keybase.build.android"])
        assert reply.ok
        assert reply.text == "stopped"
        runner.stop.assert_called_once_with("keybase.build.android")
        runner.start.assert_not_called()

    def test_cancel_never_builds(self, live, runner):
        with patch("keybot.dispatcher.build") as build:
            live.run(["cancel", "anything.at.all"])
        build.assert_not_called()
        runner.stop.assert_called_once_with("anything.at.all")

    def test_dumplog_uses_runner_log_path(self, live, runner):
        reply = live.run(["dumplog", "keybase.build.ios"])
        assert reply.ok
        runner.log_path_for_label.assert_called_once_with("keybase.build.ios")
        descriptor = runner.start.call_args[0][0]
        assert descriptor.env_dict() == {
            "READ_PATH": "/home/bot/Library/Logs/keybase.build.ios.log",
            "NOLOG": "true",
        }

    def test_dumplog_unknown_label(self, live, runner):
        runner.log_path_for_label.side_effect = LogPathNotFound("keybase.nope")
        reply = live.run(["dumplog", "keybase.nope"])
        assert reply.error == "No log path known for label: keybase.nope"
        runner.start.assert_not_called()

    def test_runner_error_passed_through(self, live, runner):
        runner.start.side_effect = RunnerError("job keybase.build.ios is already running")
        reply = live.run(["build", "ios"])
        assert reply == Reply(text="", error="job keybase.build.ios is already running")

    def test_unexpected_runner_failure_does_not_raise(self, live, runner):
        runner.stop.side_effect = OSError("launchctl missing")
        reply = live.run(["cancel", "keybase.build.ios"])
        assert reply.error == "Unexpected error: launchctl missing"

    def test_no_runner(self):
        reply = Dispatcher(None, home_dir="/home/bot").run(["upgrade", "yarn"])
        assert reply.error == "No job runner configured"

    def test_home_from_environ(self, runner, monkeypatch):
        monkeypatch.setenv("HOME", "/Users/keybase")
        Dispatcher(runner).run(["build", "android"])
        descriptor = runner.start.call_args[0][0]
        assert descriptor.tool_path_override == "/Users/keybase/go-android"

    def test_same_command_twice_is_not_serialized(self, live, runner):
        live.run(["build", "android"])
        live.run(["build", "android"])
        first, second = (c[0][0] for c in runner.start.call_args_list)
        assert first == second
        assert runner.start.call_count == 2


class TestParseFailures:
    @pytest.mark.parametrize("dry_run", [True, False])
    def test_unknown_command(self, runner, dry_run):
        reply = Dispatcher(runner, dry_run=dry_run).run(["bogus"])
        assert "unknown command" in reply.error
        assert reply.text == render_usage(KEYBOT)
        assert runner.method_calls == []

    @pytest.mark.parametrize("dry_run", [True, False])
    def test_oversized_int_is_reported(self, runner, dry_run):
        args = list(SMOKETEST)
        args[args.index("--max-testers") + 1] = "1" * 5000
        reply = Dispatcher(runner, dry_run=dry_run).run(args)
        assert "'--max-testers' expected an integer" in reply.error
        assert runner.method_calls == []

    @pytest.mark.parametrize("dry_run", [True, False])
    def test_usage_is_not_an_error(self, runner, dry_run):
        reply = Dispatcher(runner, dry_run=dry_run).run(["dumplog"])
        assert reply.ok
        assert reply.text.startswith("usage: keybot")
        assert runner.method_calls == []

    def test_help(self, live):
        assert live.help() == live.run([]).text


class TestDryRun:
    def test_echo(self, dry, runner):
        reply = dry.run(SMOKETEST)
        assert reply.text == (
            "I would have run: "
            "`smoketest --build-a=A123 --platform=darwin --enable=true --max-testers=50`"
        )
        assert runner.method_calls == []

    @pytest.mark.parametrize("args", [
        ["build", "android"],
        ["build", "ios", "--client-commit", "abc"],
        ["cancel", "keybase.build.ios"],
        ["release", "promote"],
        ["release", "broken", "1.0.8"],
        SMOKETEST,
        ["dumplog", "keybase.build.ios"],
        ["upgrade", "yarn"],
    ])
    def test_never_resolves_builds_or_runs(self, dry, runner, args):
        with patch("keybot.dispatcher.build") as build, \
                patch("keybot.dispatcher.resolve") as resolve, \
                patch("keybot.dispatcher.resolve_from_environ") as resolve_from_environ:
            reply = dry.run(args)
        assert reply.ok
        assert reply.text.startswith("I would have run: `")
        build.assert_not_called()
        resolve.assert_not_called()
        resolve_from_environ.assert_not_called()
        assert runner.method_calls == []

    def test_per_invocation_override(self, live, runner):
        reply = live.run(["upgrade", "yarn"], dry_run=True)
        assert reply.text == "I would have run: `upgrade yarn`"
        runner.start.assert_not_called()


class TestRunLine:
    def test_quoted_arguments(self, live, runner):
        reply = live.run_line('release broken "1.0.9 rc"')
        assert reply.ok
        descriptor = runner.start.call_args[0][0]
        assert descriptor.env_dict() == {"BROKEN_RELEASE": "1.0.9 rc"}

    def test_unbalanced_quotes(self, live, runner):
        reply = live.run_line('upgrade "yarn')
        assert "could not split" in reply.error
        assert reply.text.startswith("usage: keybot")
        assert runner.method_calls == []
