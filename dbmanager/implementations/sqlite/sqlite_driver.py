"""SQLite database driver implementation."""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from sqlalchemy import event
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.exc import DBAPIError

from dbmanager.implementations.base import ConnectionDriver
from dbmanager.log import get_logger
from dbmanager.types import SQLiteLocation

logger = get_logger(__name__)

_TIMEOUT_ERROR_NAMES = frozenset({"SQLITE_BUSY", "SQLITE_LOCKED"})


class SQLiteOptions(BaseModel):
    """SQLite connection options."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    driver: str = "sqlite"
    location: SQLiteLocation = SQLiteLocation.FILE
    path: str | None = None
    encoding: str | None = None
    timeout: float = 5.0

    @model_validator(mode="after")
    def check_path(self) -> "SQLiteOptions":
        """A file database needs a path."""
        if self.location == SQLiteLocation.FILE and not self.path:
            raise ValueError("path is required for a file database")
        return self


class SQLiteDriver(ConnectionDriver):
    """SQLite database driver.

    The database encoding is read from the connection the first time it is
    needed. SQLite has no charset introducers, so protected strings are never
    prefixed; text holding NUL characters is protected as a ``char(0)``
    concatenation. Transactions start with an explicit ``BEGIN``, which makes
    DDL transactional as well.
    """

    options_model = SQLiteOptions
    options: SQLiteOptions

    LOCATION_FILE = SQLiteLocation.FILE
    LOCATION_MEMORY = SQLiteLocation.MEMORY

    def __init__(
        self,
        options: Mapping[str, Any] | SQLiteOptions | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._encoding: str | None = None
        super().__init__(options, logger)

    @classmethod
    def build_url(cls, options: SQLiteOptions) -> URL:
        if options.location == SQLiteLocation.MEMORY:
            return URL.create(options.driver, database=":memory:")
        return URL.create(options.driver, database=options.path)

    def _engine_arguments(self) -> dict[str, Any]:
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": self.options.timeout,
            }
        }

    def _configure_engine(self, engine: Engine) -> None:
        @event.listens_for(engine, "connect")
        def on_connect(dbapi_connection: Any, connection_record: Any) -> None:
            # Transactions are started explicitly by the "begin" listener
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def on_begin(connection: Connection) -> None:
            connection.exec_driver_sql("BEGIN")

    def _quote(self, value: str) -> str:
        if "\x00" not in value:
            return super()._quote(value)
        # quote() stops at the first NUL character
        quote = super()._quote
        return " || char(0) || ".join(quote(part) for part in value.split("\x00"))

    def _native_error_code(self, exc: BaseException) -> int | str | None:
        native = exc.orig if isinstance(exc, DBAPIError) else exc
        return getattr(native, "sqlite_errorcode", None)

    def _is_timeout(self, exc: BaseException, code: int | str | None) -> bool:
        name = getattr(exc, "sqlite_errorname", None)
        if name is not None:
            return name in _TIMEOUT_ERROR_NAMES
        return "database is locked" in str(exc)

    def get_table_names(self) -> list[str]:
        """Get the table names stored in sqlite_master.

        Includes ``sqlite_sequence`` once a table uses AUTOINCREMENT.
        """
        rows = self.query("SELECT name FROM sqlite_master WHERE type = 'table'")
        return [row["name"] for row in rows]

    def get_encoding(self) -> str:
        if self._encoding is None:
            row = self.fetch_one("PRAGMA encoding")
            if row is not None:
                self._encoding = str(row["encoding"])
                logger.debug(f"SQLite encoding: {self._encoding}")
        return self._encoding or "UTF-8"
