# env.py
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

SYSTEM_PATH = ("/sbin", "/usr/sbin", "/bin", "/usr/bin", "/usr/local/bin")

# rbenv shims live under the home dir and come last in the search path
SHIMS_DIR = ".rbenv/shims"

ANDROID_GO_PATH = "go-android"
IOS_GO_PATH = "go-ios"


@dataclass(frozen=True)
class ExecutionEnvironment:
    """Home dir, search path and optional Go path a job runs with."""
    home_dir: str
    search_path: str
    go_path_override: Optional[str] = None


def resolve(home_dir: str) -> ExecutionEnvironment:
    shims = os.path.join(home_dir, SHIMS_DIR)
    search_path = ":".join(SYSTEM_PATH + (shims,))
    return ExecutionEnvironment(home_dir=home_dir, search_path=search_path)


def resolve_from_environ(environ: Mapping[str, str] | None = None) -> ExecutionEnvironment:
    """Resolve the environment from HOME, the only variable read."""
    if environ is None:
        environ = os.environ
    return resolve(environ.get("HOME", ""))


def path_from_home(env: ExecutionEnvironment, sub: str) -> str:
    return os.path.join(env.home_dir, sub)


def with_go_path(env: ExecutionEnvironment, go_path: str) -> ExecutionEnvironment:
    """Return a copy of `env` with its own Go path. `env` is left untouched."""
    return replace(env, go_path_override=go_path)
