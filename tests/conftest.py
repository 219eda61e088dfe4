from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from loguru import logger

from keybot.env import resolve


@pytest.fixture(autouse=True)
def _reset_loguru():
    # the CLI installs a sink on a stream that CliRunner closes afterwards
    yield
    logger.remove()


@pytest.fixture
def env():
    return resolve("/home/bot")


@pytest.fixture
def runner():
    runner = MagicMock(spec=["start", "stop", "log_path_for_label"])
    runner.start.return_value = "started"
    runner.stop.return_value = "stopped"
    runner.log_path_for_label.return_value = "/home/bot/Library/Logs/keybase.build.ios.log"
    return runner
