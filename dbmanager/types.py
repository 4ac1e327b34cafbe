"""Common type definitions for dbmanager."""

from enum import Enum
from typing import Any, TypeAlias

DatabaseParamType: TypeAlias = dict[str, Any] | list[Any] | tuple[Any, ...] | None
RowType: TypeAlias = dict[str, Any]


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class SQLiteLocation(str, Enum):
    """Where a SQLite database lives."""

    FILE = "file"
    MEMORY = "memory"
