"""Unit tests for dbmanager logging functionality."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from dbmanager import (
    Environment,
    Settings,
    get_logger,
    parse_level,
    setup_logging,
    setup_logging_from_settings,
    setup_test_logging,
)


def test_setup_logging_defaults() -> None:
    """Test setup_logging with default parameters."""
    setup_logging()
    root_logger = logging.getLogger()
    assert root_logger.level == logging.INFO


def test_setup_logging_custom_level() -> None:
    """Test setup_logging with custom level."""
    setup_logging(level=logging.DEBUG)
    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG


def test_setup_logging_to_file(tmp_path: Path) -> None:
    """Test file logging in a test environment."""
    setup_logging(
        level=logging.WARNING,
        use_colors=False,
        enable_file_logging=True,
        log_dir=tmp_path,
        is_test_env=True,
    )
    root_logger = logging.getLogger()

    assert root_logger.level == logging.WARNING
    assert len(root_logger.handlers) == 2
    assert (tmp_path / "test.log").exists()

    setup_test_logging()


def test_get_logger() -> None:
    """Test get_logger returns a logger instance."""
    logger = get_logger("test_logger")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "test_logger"


def test_parse_level() -> None:
    """Test converting level names."""
    assert parse_level("debug") == logging.DEBUG
    assert parse_level(" WARNING ") == logging.WARNING
    assert parse_level(logging.ERROR) == logging.ERROR

    with pytest.raises(ValueError):
        parse_level("verbose")


def test_setup_logging_from_settings() -> None:
    """Test the environment selects the logging setup."""
    with patch("dbmanager.log.setup_production_logging") as production:
        setup_logging_from_settings(
            Settings(environment=Environment.PRODUCTION, log_level="WARNING")
        )
    production.assert_called_once_with(logging.WARNING)

    with patch("dbmanager.log.setup_logging") as setup:
        setup_logging_from_settings(Settings(log_level="ERROR"))
    setup.assert_called_once_with(level=logging.ERROR)

    setup_test_logging()
