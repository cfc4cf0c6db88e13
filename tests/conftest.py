# tests/conftest.py

"""Shared pytest fixtures for the bike_tracker test suite."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from bike_tracker.config.settings import Settings


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep globally so retry loops run instantly."""
    with patch("time.sleep"):
        yield


@pytest.fixture(autouse=True)
def isolated_output(tmp_path: Path) -> Generator[None, None, None]:
    """Keep CSV runs and the default database out of the working tree."""
    with patch.object(Settings, "RUNS_DIR", tmp_path / "runs"), \
            patch.object(Settings, "DB_PATH", tmp_path / "listings.db"):
        yield
