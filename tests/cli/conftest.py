"""Shared fixtures for CLI tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_logging() -> Iterator[None]:
    """Drop the handlers ``configure_logging`` attaches during a command."""
    yield
    logger = logging.getLogger("bba")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(
        f"log_file: {tmp_path / 'logs' / 'agent.log'}\n"
        f"sessions_dir: {tmp_path / 'sessions'}\n"
        "blackboard_max_tokens: 100\n"
        "max_iterations: 10\n"
    )
    return path
