"""SQLite database implementation package."""

from .sqlite_driver import SQLiteDriver, SQLiteOptions

__all__ = [
    "SQLiteDriver",
    "SQLiteOptions",
]
