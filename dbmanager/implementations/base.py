"""Shared driver implementation on top of a SQLAlchemy connection."""

import logging
from collections.abc import Callable, Mapping
from typing import Any, ClassVar, TypeVar
from urllib.parse import unquote

from pydantic import BaseModel, ValidationError
from sqlalchemy import text
from sqlalchemy.engine import URL, Connection, Engine, RootTransaction
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlmodel import create_engine

from dbmanager.encoding import (
    convert_character_encoding,
    decode_text,
    encoding_to_charset,
    is_numeric,
)
from dbmanager.encoding import strip_tags as remove_tags
from dbmanager.exceptions import (
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseError,
    DatabaseTimeoutError,
    TransactionError,
)
from dbmanager.interfaces import Driver, LoggerAware
from dbmanager.log import get_logger
from dbmanager.types import DatabaseParamType, RowType

logger = get_logger(__name__)

R = TypeVar("R")


class PreparedStatement:
    """Statement bound to a driver for repeated execution."""

    def __init__(self, driver: "ConnectionDriver", statement: str) -> None:
        self.driver = driver
        self.statement = statement

    def execute(self, params: DatabaseParamType = None) -> int:
        """Execute the statement and return the number of affected rows."""
        return self.driver.exec(self.statement, params)

    def fetch_all(self, params: DatabaseParamType = None) -> list[RowType]:
        """Execute the statement and return all rows."""
        return self.driver.query(self.statement, params)

    def fetch_one(self, params: DatabaseParamType = None) -> RowType | None:
        """Execute the statement and return the first row."""
        return self.driver.fetch_one(self.statement, params)


class ConnectionDriver(Driver, LoggerAware):
    """Driver owning one SQLAlchemy connection.

    Subclasses provide the options model, the connection URL and the
    dialect-specific introspection and error classification.
    """

    options_model: ClassVar[type[BaseModel]]
    supports_charset_introducer: ClassVar[bool] = False

    def __init__(
        self,
        options: Mapping[str, Any] | BaseModel | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the driver and connect.

        Args:
            options: Connection options, merged over the driver defaults
            logger: Optional logger receiving connection and query events

        Raises:
            ConfigurationError: If the options are invalid
            DatabaseConnectionError: If the connection cannot be established
        """
        self.logger = logger
        self.options = self._build_options(options)
        self._engine: Engine | None = None
        self._connection: Connection | None = None
        self._transaction: RootTransaction | None = None
        self._transaction_started = False
        self._transaction_depth = 0
        self._query_count = 0
        self._last_insert_id: int | None = None
        self._url = self.build_url(self.options)
        self._connect()

    @classmethod
    def _build_options(cls, options: Mapping[str, Any] | BaseModel | None) -> Any:
        if isinstance(options, cls.options_model):
            return options
        if isinstance(options, BaseModel):
            options = options.model_dump(exclude_unset=True)
        if options is not None and not isinstance(options, Mapping):
            raise ConfigurationError(
                f"Options for {cls.__name__} must be a mapping, "
                f"got {type(options).__name__}"
            )
        try:
            return cls.options_model.model_validate(dict(options or {}))
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid options for {cls.__name__}: {exc}"
            ) from exc

    @classmethod
    def build_url(cls, options: Any) -> URL:
        """Build the connection URL for the given options."""
        raise NotImplementedError

    def _engine_arguments(self) -> dict[str, Any]:
        return {}

    def _configure_engine(self, engine: Engine) -> None:
        """Attach dialect-specific event listeners before connecting."""
        pass

    def _connect(self) -> None:
        try:
            self._engine = create_engine(self._url, **self._engine_arguments())
            self._configure_engine(self._engine)
            # Statements without parameters are passed to the DBAPI as-is
            self._connection = self._engine.connect().execution_options(
                no_parameters=True
            )
        except Exception as exc:
            self.log(f"Connection failed to {self.connection_string}", logging.CRITICAL)
            logger.error(f"Failed to connect to {self.connection_string}: {exc}")
            self._connection = None
            if self._engine is not None:
                self._engine.dispose()
            code = self._native_error_code(exc) or 0
            raise DatabaseConnectionError(
                f"Connection failed to {self.connection_string} (#{code} - {exc})",
                connection_string=self.connection_string,
            ) from exc

        self.log(f"Connection to {self.connection_string}")

    @property
    def connection_string(self) -> str:
        """Connection URL with the password hidden, for display."""
        return unquote(self._url.render_as_string(hide_password=True))

    @property
    def connection(self) -> Connection:
        """Underlying SQLAlchemy connection."""
        if self._connection is None:
            raise DatabaseError("Database not connected")
        return self._connection

    @property
    def is_connected(self) -> bool:
        """Check if the connection is open."""
        return self._connection is not None

    @property
    def query_count(self) -> int:
        """Number of statements forwarded to the connection."""
        return self._query_count

    @property
    def transaction_depth(self) -> int:
        return self._transaction_depth

    def close(self) -> None:
        if self._connection is None:
            return
        try:
            self._connection.close()
        finally:
            self._connection = None
            self._transaction = None
            self._transaction_started = False
            self._transaction_depth = 0
            if self._engine is not None:
                self._engine.dispose()
            self.log(f"Disconnection from {self.connection_string}")

    def __del__(self) -> None:
        if getattr(self, "_connection", None) is not None:
            self.close()

    # Error handling

    def _native_error_code(self, exc: BaseException) -> int | str | None:
        """Extract the native error code from a DBAPI error."""
        return None

    def _is_timeout(self, exc: BaseException, code: int | str | None) -> bool:
        """Check whether a native error is a timeout-class failure."""
        return False

    def _translate_error(self, exc: SQLAlchemyError) -> DatabaseError:
        native = exc.orig if isinstance(exc, DBAPIError) else exc
        code = self._native_error_code(exc)
        message = str(native)
        if isinstance(exc, PoolTimeoutError) or self._is_timeout(native, code):
            return DatabaseTimeoutError(message, code)
        return DatabaseError(message, code)

    def _call(self, operation: Callable[[Connection], R]) -> R:
        """Run an operation on the connection.

        Outside of a transaction the implicit one is committed right away.
        """
        connection = self.connection
        try:
            result = operation(connection)
            if not self._transaction_started and connection.in_transaction():
                connection.commit()
            return result
        except SQLAlchemyError as exc:
            if not self._transaction_started and connection.in_transaction():
                connection.rollback()
            raise self._translate_error(exc) from exc

    def _forward(
        self, name: str, statement: str, operation: Callable[[Connection], R]
    ) -> R:
        self._query_count += 1
        try:
            return self._call(operation)
        finally:
            self.log(f'{name} "{statement}"')

    # Passthrough operations

    def exec(self, statement: str, params: DatabaseParamType = None) -> int:
        def run(connection: Connection) -> int:
            result = connection.exec_driver_sql(statement, params)
            rowcount = result.rowcount
            if result.returns_rows:
                result.close()
            else:
                self._last_insert_id = result.lastrowid
            return rowcount

        return self._forward("Exec", statement, run)

    def query(
        self, statement: str, params: DatabaseParamType = None
    ) -> list[RowType]:
        def run(connection: Connection) -> list[RowType]:
            result = connection.exec_driver_sql(statement, params)
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings()]

        return self._forward("Query", statement, run)

    def fetch_one(
        self, statement: str, params: DatabaseParamType = None
    ) -> RowType | None:
        def run(connection: Connection) -> RowType | None:
            result = connection.exec_driver_sql(statement, params)
            if not result.returns_rows:
                return None
            row = result.mappings().first()
            return dict(row) if row is not None else None

        return self._forward("Query", statement, run)

    def prepare(self, statement: str) -> PreparedStatement:
        self.log(f'Prepare "{statement}"')
        return PreparedStatement(self, statement)

    def last_insert_id(self) -> int | None:
        return self._last_insert_id

    # Transactions

    def in_transaction(self) -> bool:
        return self._transaction_started

    def begin_transaction(self) -> None:
        if not self._transaction_started:
            self._begin_physical()
            self._transaction_started = True

        self._transaction_depth += 1

    def commit(self) -> None:
        if self._transaction_depth <= 0:
            raise TransactionError("Commit called without a matching begin_transaction()")

        self._transaction_depth -= 1

        if self._transaction_started and self._transaction_depth == 0:
            self._commit_physical()
            self._transaction_started = False

    def roll_back(self) -> None:
        try:
            if self._transaction_started:
                self._rollback_physical()
        finally:
            self._transaction_started = False
            self._transaction_depth = 0

    def _begin_physical(self) -> None:
        try:
            self._transaction = self.connection.begin()
        except SQLAlchemyError as exc:
            raise self._translate_error(exc) from exc

    def _commit_physical(self) -> None:
        if self._transaction is None:
            return
        try:
            self._transaction.commit()
        except SQLAlchemyError as exc:
            raise self._translate_error(exc) from exc
        self._transaction = None

    def _rollback_physical(self) -> None:
        transaction, self._transaction = self._transaction, None
        if transaction is None:
            return
        try:
            transaction.rollback()
        except SQLAlchemyError as exc:
            raise self._translate_error(exc) from exc

    # Protection

    def charset(self) -> str | None:
        """Charset introducer token for the current encoding, if supported."""
        if not self.supports_charset_introducer:
            return None
        return encoding_to_charset(self.get_encoding())

    def _quote(self, value: str) -> str:
        """Quote a string with the engine's own quote() function."""
        try:
            quoted = self._call(
                lambda connection: connection.execute(
                    text("SELECT quote(:value)"), {"value": value}
                ).scalar()
            )
        except DatabaseError as exc:
            raise DatabaseError(f'Unable to protect data "{value}"', exc.code) from exc

        if quoted is None:
            raise DatabaseError(f'Unable to protect data "{value}"')
        if isinstance(quoted, bytes):
            quoted = quoted.decode(self.get_encoding(), errors="replace")
        return str(quoted)

    def protect_data(
        self, text: Any, force_quote: bool = False, strip_tags: bool = True
    ) -> str:
        if text is None:
            return "NULL"
        if isinstance(text, bool):
            return "1" if text else "0"
        if is_numeric(text) and not force_quote:
            return str(text)

        value = decode_text(text) if isinstance(text, (str, bytes)) else str(text)
        if strip_tags:
            value = remove_tags(value)
        value = convert_character_encoding(value, self.get_encoding())

        if not value:
            return "''"

        quoted = self._quote(value)
        charset = self.charset()
        return f"_{charset}{quoted}" if charset else quoted
