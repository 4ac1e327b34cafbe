"""Logging configuration for dbmanager."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import colorlog

from .types import Environment

if TYPE_CHECKING:
    from .config import Settings

DATE_FORMAT = "%m-%d %H:%M:%S"

# Base format string for log messages (without colors)
BASE_LOG_FORMAT = (
    "%(asctime)s %(levelname)8s %(message)s (%(name)s@%(filename)s:%(lineno)d)"
)

COLOR_LOG_FORMAT = (
    "%(asctime)s %(log_color)s%(levelname)8s%(reset)s %(message)s "
    "\033[90m(%(name)s@%(filename)s:%(lineno)d)\033[0m"
)

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

LOG_FILE_NAME = "dbmanager.log"
TEST_LOG_FILE_NAME = "test.log"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 4


def setup_logging(
    level: int = logging.INFO,
    format_string: str | None = None,
    use_colors: bool = True,
    enable_file_logging: bool = False,
    log_dir: Path | None = None,
    is_test_env: bool = False,
) -> None:
    """Configure the root logger for dbmanager.

    Args:
        level: Logging level to use
        format_string: Custom format string for console messages
        use_colors: Whether to use colored output for console
        enable_file_logging: Whether to also write to a log file
        log_dir: Directory for log files (defaults to ./logs or ./logs/test)
        is_test_env: Whether this is a test environment
    """
    handlers = [_console_handler(format_string, use_colors)]

    if enable_file_logging:
        log_dir = log_dir or _default_log_dir(is_test_env)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(_file_handler(log_dir, is_test_env))

    logging.basicConfig(level=level, handlers=handlers, force=True)


def _default_log_dir(is_test_env: bool) -> Path:
    log_dir = Path("logs")
    return log_dir / "test" if is_test_env else log_dir


def _console_handler(format_string: str | None, use_colors: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)

    formatter: logging.Formatter
    if use_colors:
        formatter = colorlog.ColoredFormatter(
            format_string or COLOR_LOG_FORMAT,
            datefmt=DATE_FORMAT,
            log_colors=LOG_COLORS,
            style="%",
        )
    else:
        formatter = logging.Formatter(
            format_string or BASE_LOG_FORMAT, datefmt=DATE_FORMAT
        )

    handler.setFormatter(formatter)
    return handler


def _file_handler(log_dir: Path, is_test_env: bool) -> logging.Handler:
    handler: logging.Handler
    if is_test_env:
        # Each test session starts with a fresh file
        handler = logging.FileHandler(log_dir / TEST_LOG_FILE_NAME, mode="w")
    else:
        handler = logging.handlers.RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )

    handler.setFormatter(logging.Formatter(BASE_LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def parse_level(name: str | int) -> int:
    """Convert a level name such as "debug" into a logging level.

    Raises:
        ValueError: If the name is not a known level
    """
    if isinstance(name, int):
        return name
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def setup_production_logging(level: int = logging.INFO) -> None:
    """Setup logging with file rotation."""
    setup_logging(level=level, enable_file_logging=True, is_test_env=False)


def setup_test_logging(level: int = logging.DEBUG) -> None:
    """Setup logging for tests, overwriting the test log file."""
    setup_logging(level=level, enable_file_logging=True, is_test_env=True)


def setup_logging_from_settings(settings: "Settings") -> None:
    """Pick the logging setup matching the configured environment."""
    level = parse_level(settings.log_level)
    if settings.environment == Environment.PRODUCTION:
        setup_production_logging(level)
    elif settings.environment == Environment.TESTING:
        setup_test_logging(level)
    else:
        setup_logging(level=level)
