"""Repository package."""

from .base import AbstractRepository, EntityRepository

__all__ = [
    "AbstractRepository",
    "EntityRepository",
]
