from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from crunchy_cli import credentials
from crunchy_cli.log import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def config_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    path = tmp_path / "config"
    monkeypatch.setattr(credentials, "default_config_dir", lambda: path)
    return path
