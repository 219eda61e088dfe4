# builders.py
from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple

from .env import (
    ANDROID_GO_PATH,
    IOS_GO_PATH,
    ExecutionEnvironment,
    path_from_home,
    with_go_path,
)
from .errors import BuildError, ResolutionError
from .model import EnvVar, JobDescriptor
from .parser import ParsedCommand, format_value

PRERELEASE_BUCKET = "prerelease.keybase.io"
ANDROID_SDK_HOME = "/usr/local/opt/android-sdk"

CLIENT_PACKAGING = "github.com/keybase/client/packaging"
SLACKBOT_SCRIPTS = "github.com/keybase/slackbot/scripts"

LogPathLookup = Callable[[str], str]
Builder = Callable[[ParsedCommand, ExecutionEnvironment, Optional[LogPathLookup]], JobDescriptor]


# ---------------------------------------------------------------------
# Per-command builders
# ---------------------------------------------------------------------

def _build_android(parsed, env, log_path_for_label) -> JobDescriptor:
    # own Go path so an android build never shares a module cache with an ios build
    return JobDescriptor(
        label="keybase.build.android",
        script_path=f"{CLIENT_PACKAGING}/android/build_and_publish.sh",
        environment=with_go_path(env, path_from_home(env, ANDROID_GO_PATH)),
        bucket_name=PRERELEASE_BUCKET,
        env_vars=(EnvVar("ANDROID_HOME", ANDROID_SDK_HOME),),
    )


def _build_ios(parsed, env, log_path_for_label) -> JobDescriptor:
    return JobDescriptor(
        label="keybase.build.ios",
        script_path=f"{CLIENT_PACKAGING}/ios/build_and_publish.sh",
        environment=with_go_path(env, path_from_home(env, IOS_GO_PATH)),
        bucket_name=PRERELEASE_BUCKET,
        env_vars=(
            EnvVar("CLIENT_COMMIT", parsed.values["client-commit"]),
            EnvVar("KBFS_COMMIT", parsed.values["kbfs-commit"]),
        ),
    )


def _build_release_promote(parsed, env, log_path_for_label) -> JobDescriptor:
    return JobDescriptor(
        label="keybase.release.promote",
        script_path=f"{SLACKBOT_SCRIPTS}/release.promote.sh",
        environment=env,
        bucket_name=PRERELEASE_BUCKET,
        platform="darwin",
        env_vars=(EnvVar("RELEASE_TO_PROMOTE", parsed.values["release-to-promote"]),),
    )


def _build_release_broken(parsed, env, log_path_for_label) -> JobDescriptor:
    return JobDescriptor(
        label="keybase.release.broken",
        script_path=f"{SLACKBOT_SCRIPTS}/release.broken.sh",
        environment=env,
        bucket_name=PRERELEASE_BUCKET,
        platform="darwin",
        env_vars=(EnvVar("BROKEN_RELEASE", parsed.values["version"]),),
    )


def _build_smoketest(parsed, env, log_path_for_label) -> JobDescriptor:
    values = parsed.values
    return JobDescriptor(
        label="keybase.smoketest",
        script_path=f"{SLACKBOT_SCRIPTS}/smoketest.sh",
        environment=env,
        bucket_name=PRERELEASE_BUCKET,
        platform=values["platform"],
        env_vars=(
            EnvVar("SMOKETEST_BUILD_A", values["build-a"]),
            EnvVar("SMOKETEST_MAX_TESTERS", format_value(values["max-testers"])),
            EnvVar("SMOKETEST_ENABLE", format_value(values["enable"])),
        ),
    )


def _build_dumplog(parsed, env, log_path_for_label) -> JobDescriptor:
    label = parsed.values["label"]
    if log_path_for_label is None:
        raise ResolutionError(f"Cannot resolve a log path for {label!r}: no job runner available")
    read_path = log_path_for_label(label)
    return JobDescriptor(
        label="keybase.dumplog",
        script_path=f"{SLACKBOT_SCRIPTS}/dumplog.sh",
        environment=env,
        bucket_name=PRERELEASE_BUCKET,
        env_vars=(
            EnvVar("READ_PATH", read_path),
            EnvVar("NOLOG", format_value(True)),
        ),
    )


def _build_upgrade(parsed, env, log_path_for_label) -> JobDescriptor:
    return JobDescriptor(
        label="keybase.update",
        script_path=f"{SLACKBOT_SCRIPTS}/update.sh",
        environment=env,
        env_vars=(EnvVar("NAME", parsed.values["name"]),),
    )


BUILDERS: Dict[Tuple[str, ...], Builder] = {
    ("build", "android"): _build_android,
    ("build", "ios"): _build_ios,
    ("release", "promote"): _build_release_promote,
    ("release", "broken"): _build_release_broken,
    ("smoketest",): _build_smoketest,
    ("dumplog",): _build_dumplog,
    ("upgrade",): _build_upgrade,
}


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

def build(
    parsed: ParsedCommand,
    env: ExecutionEnvironment,
    *,
    log_path_for_label: Optional[LogPathLookup] = None,
) -> JobDescriptor:
    """
    Build the job descriptor for a parsed command.

    `env` is never modified; builders that need a different Go path get a
    copy. `log_path_for_label` is only consulted by dumplog and may raise
    ResolutionError.

    Raises:
        BuildError: the command has no job (e.g. cancel)
        ResolutionError: a dependent lookup failed
    """
    builder = BUILDERS.get(parsed.command_path)
    if builder is None:
        raise BuildError(f"{parsed.name!r} does not build a job descriptor")
    return builder(parsed, env, log_path_for_label)
