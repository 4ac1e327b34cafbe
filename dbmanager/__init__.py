"""Lightweight database access: pluggable drivers, a manager and repositories."""

from .config import Settings, load_settings
from .entity import Entity
from .exceptions import (
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseError,
    DatabaseTimeoutError,
    DbManagerError,
    ManagerError,
    TransactionError,
)
from .implementations import MySQLDriver, SQLiteDriver
from .interfaces import Driver, Repository
from .log import (
    get_logger,
    parse_level,
    setup_logging,
    setup_logging_from_settings,
    setup_production_logging,
    setup_test_logging,
)
from .manager import DEFAULT_DRIVERS, DbManager
from .repository import AbstractRepository, EntityRepository
from .types import Environment, SQLiteLocation

__all__ = [
    "DbManager",
    "DEFAULT_DRIVERS",
    "Driver",
    "MySQLDriver",
    "SQLiteDriver",
    "Repository",
    "AbstractRepository",
    "EntityRepository",
    "Entity",
    "Environment",
    "SQLiteLocation",
    "Settings",
    "load_settings",
    "DbManagerError",
    "ConfigurationError",
    "ManagerError",
    "DatabaseConnectionError",
    "DatabaseError",
    "DatabaseTimeoutError",
    "TransactionError",
    "get_logger",
    "setup_logging",
    "setup_logging_from_settings",
    "parse_level",
    "setup_production_logging",
    "setup_test_logging",
]
