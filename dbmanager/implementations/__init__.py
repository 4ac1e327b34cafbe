"""Database driver implementations package."""

from .base import ConnectionDriver, PreparedStatement
from .mysql import MySQLDriver, MySQLOptions
from .sqlite import SQLiteDriver, SQLiteOptions

__all__ = [
    "ConnectionDriver",
    "PreparedStatement",
    "MySQLDriver",
    "MySQLOptions",
    "SQLiteDriver",
    "SQLiteOptions",
]
