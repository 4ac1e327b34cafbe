"""MySQL database driver implementation."""

import sys
from typing import Any

from pydantic import BaseModel, ConfigDict
from sqlalchemy.engine import URL
from sqlalchemy.exc import DBAPIError

from dbmanager.encoding import encoding_to_charset
from dbmanager.exceptions import DatabaseError
from dbmanager.implementations.base import ConnectionDriver
from dbmanager.log import get_logger

logger = get_logger(__name__)

# Lock wait timeout, lost connection during query, max execution time exceeded
TIMEOUT_ERROR_CODES = frozenset({1205, 2013, 3024})


class MySQLOptions(BaseModel):
    """MySQL connection options."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    driver: str = "mysql+pymysql"
    unix_socket: str | None = None
    host: str | None = None
    port: int = 3306
    encoding: str | None = None
    timeout: int = 5
    dbname: str | None = None
    username: str | None = None
    password: str | None = None


def _resolve_encoding(options: MySQLOptions) -> str:
    return options.encoding or sys.getdefaultencoding()


class MySQLDriver(ConnectionDriver):
    """MySQL database driver.

    Protected strings carry a charset introducer (e.g. ``_utf8'abc'``) when
    the configured encoding maps onto a MySQL charset.
    """

    options_model = MySQLOptions
    options: MySQLOptions
    supports_charset_introducer = True

    @classmethod
    def build_url(cls, options: MySQLOptions) -> URL:
        query: dict[str, str] = {}
        host: str | None = None
        port: int | None = None

        if options.unix_socket:
            query["unix_socket"] = options.unix_socket
        else:
            host = options.host
            port = options.port

        charset = encoding_to_charset(_resolve_encoding(options))
        if charset is not None:
            query["charset"] = charset

        return URL.create(
            options.driver,
            username=options.username,
            password=options.password,
            host=host,
            port=port,
            database=options.dbname or None,
            query=query,
        )

    def _engine_arguments(self) -> dict[str, Any]:
        return {"connect_args": {"connect_timeout": self.options.timeout}}

    def _native_error_code(self, exc: BaseException) -> int | str | None:
        native = exc.orig if isinstance(exc, DBAPIError) else exc
        args = getattr(native, "args", ())
        if args and isinstance(args[0], int):
            return args[0]
        return None

    def _is_timeout(self, exc: BaseException, code: int | str | None) -> bool:
        return code in TIMEOUT_ERROR_CODES

    def get_db_name(self) -> str:
        """Get the default database name."""
        return self.options.dbname or ""

    def get_encoding(self) -> str:
        return _resolve_encoding(self.options)

    def get_table_names(self) -> list[str]:
        rows = self.query("SHOW TABLES")
        return [str(next(iter(row.values()))) for row in rows]

    def next_auto_increment(self, table: str, database: str | None = None) -> int:
        """Get the next auto increment value of a table.

        Args:
            table: Table name
            database: Database name (default database when empty)

        Returns:
            Next auto increment value

        Raises:
            DatabaseError: If the table status cannot be read
        """
        database = database or self.get_db_name()
        pattern = table.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        statement = (
            f"SHOW TABLE STATUS FROM `{database.replace('`', '``')}` "
            f"LIKE {self._quote(pattern)}"
        )

        row = self.fetch_one(statement)
        if row is None or row.get("Auto_increment") is None:
            raise DatabaseError(f'Unable to get next auto increment of table "{table}"')

        logger.debug(f"Next auto increment of {database}.{table}: {row['Auto_increment']}")
        return int(row["Auto_increment"])
