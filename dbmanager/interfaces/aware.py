"""Mixins for objects that accept injected collaborators."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dbmanager.manager import DbManager


class LoggerAware:
    """Object that reports events to an optional injected logger."""

    logger: logging.Logger | None = None

    def set_logger(self, logger: logging.Logger) -> None:
        """Attach a logger."""
        self.logger = logger

    def log(self, message: str, level: int = logging.INFO) -> None:
        """Send a message to the attached logger, if any.

        Messages are prefixed with the class name of the sender.
        """
        if self.logger is not None:
            self.logger.log(level, f"{type(self).__name__} / {message}")


class DbManagerAware:
    """Object holding a back-reference to its DbManager."""

    _db_manager: "DbManager | None" = None

    def set_db_manager(self, db_manager: "DbManager") -> None:
        """Attach the owning manager."""
        self._db_manager = db_manager

    def get_db_manager(self) -> "DbManager | None":
        """Get the owning manager."""
        return self._db_manager
