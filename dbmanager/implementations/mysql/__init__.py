"""MySQL database implementation package."""

from .mysql_driver import MySQLDriver, MySQLOptions

__all__ = [
    "MySQLDriver",
    "MySQLOptions",
]
