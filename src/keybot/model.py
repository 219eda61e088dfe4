# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .env import ExecutionEnvironment


@dataclass(frozen=True)
class EnvVar:
    """A single environment variable written into a job."""
    key: str
    value: str


@dataclass(frozen=True)
class JobDescriptor:
    """
    Everything a job runner needs to launch a background job.

    `label` identifies the job for start/stop/log lookups. Env var keys are
    unique and keep their insertion order.
    """
    label: str
    script_path: str
    environment: ExecutionEnvironment
    bucket_name: Optional[str] = None
    platform: Optional[str] = None
    env_vars: Tuple[EnvVar, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # accept lists from callers, store an immutable tuple
        object.__setattr__(self, "env_vars", tuple(self.env_vars))
        seen: set[str] = set()
        for var in self.env_vars:
            if var.key in seen:
                raise ValueError(f"Duplicate env var {var.key!r} in job {self.label!r}")
            seen.add(var.key)

    @property
    def tool_path_override(self) -> Optional[str]:
        return self.environment.go_path_override

    def env_dict(self) -> dict[str, str]:
        return {var.key: var.value for var in self.env_vars}


def descriptor_to_dict(descriptor: JobDescriptor) -> dict:
    """
    Convert a JobDescriptor to the dictionary sent to the job runner.

    Optional fields are only included when set.
    """
    env = descriptor.environment
    data = {
        "label": descriptor.label,
        "script_path": descriptor.script_path,
        "env_vars": [{"key": v.key, "value": v.value} for v in descriptor.env_vars],
        "home": env.home_dir,
        "path": env.search_path,
    }
    if descriptor.bucket_name is not None:
        data["bucket_name"] = descriptor.bucket_name
    if descriptor.platform is not None:
        data["platform"] = descriptor.platform
    if descriptor.tool_path_override is not None:
        data["go_path"] = descriptor.tool_path_override
    return data
