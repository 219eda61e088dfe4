# config.py
from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict

DRY_RUN_VAR = "KEYBOT_DRY_RUN"
RUNNER_URL_VAR = "KEYBOT_RUNNER_URL"


class BotConfig(BaseModel):
    """Settings a keybot invocation runs with."""
    model_config = ConfigDict(frozen=True)

    dry_run: bool = False
    runner_url: Optional[str] = None
    home_dir: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BotConfig":
        """
        Read KEYBOT_DRY_RUN, KEYBOT_RUNNER_URL and HOME.

        KEYBOT_DRY_RUN accepts the usual boolean spellings (1/0, true/false,
        yes/no, on/off); unset or empty means live.
        """
        if environ is None:
            environ = os.environ
        return cls(
            dry_run=environ.get(DRY_RUN_VAR) or False,
            runner_url=environ.get(RUNNER_URL_VAR) or None,
            home_dir=environ.get("HOME"),
        )
