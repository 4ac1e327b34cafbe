"""Database interfaces module."""

from .aware import DbManagerAware, LoggerAware
from .driver import Driver
from .repository import Repository

__all__ = [
    "Driver",
    "Repository",
    "LoggerAware",
    "DbManagerAware",
]
