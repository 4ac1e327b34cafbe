"""Global pytest configuration and fixtures."""

import logging
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from dbmanager import setup_test_logging
from dbmanager.implementations.sqlite import SQLiteDriver


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Setup test logging for all tests."""
    setup_test_logging()


@pytest.fixture
def mock_logger() -> MagicMock:
    """Provide a logger double recording log calls."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def memory_driver() -> Generator[SQLiteDriver, None, None]:
    """Create a driver on an in-memory SQLite database."""
    driver = SQLiteDriver({"location": SQLiteDriver.LOCATION_MEMORY})
    yield driver
    driver.close()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path using pytest's tmp_path."""
    return tmp_path / "test.sq3"


@pytest.fixture
def file_driver(temp_db_path: Path) -> Generator[SQLiteDriver, None, None]:
    """Create a driver on a temporary SQLite file."""
    driver = SQLiteDriver({"location": "file", "path": str(temp_db_path)})
    yield driver
    driver.close()
