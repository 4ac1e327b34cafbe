"""Repository interface."""

from abc import ABC


class Repository(ABC):
    """Marker base for objects a DbManager can hand out as repositories."""

    pass
