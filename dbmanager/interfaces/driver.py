"""Database driver interface."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType
from typing import Any

from dbmanager.types import DatabaseParamType, RowType


class Driver(ABC):
    """Abstract database driver interface.

    A driver owns a single physical connection. Nested calls to
    ``begin_transaction`` share one physical transaction which is committed
    by the outermost ``commit``; ``roll_back`` always unwinds every level.
    """

    @abstractmethod
    def protect_data(
        self, text: Any, force_quote: bool = False, strip_tags: bool = True
    ) -> str:
        """Protect a value for inline use in statement text.

        Args:
            text: Value to protect
            force_quote: Quote numeric values too
            strip_tags: Remove markup tags before quoting

        Returns:
            SQL literal

        Raises:
            DatabaseError: If the value cannot be quoted
        """
        pass

    @abstractmethod
    def begin_transaction(self) -> None:
        """Begin a transaction, or enter one more nesting level."""
        pass

    @abstractmethod
    def commit(self) -> None:
        """Leave one nesting level, committing when the outermost one ends."""
        pass

    @abstractmethod
    def roll_back(self) -> None:
        """Roll back the transaction and reset the nesting depth."""
        pass

    @abstractmethod
    def in_transaction(self) -> bool:
        """Check if a physical transaction is open."""
        pass

    @property
    @abstractmethod
    def transaction_depth(self) -> int:
        """Current transaction nesting depth."""
        pass

    @abstractmethod
    def get_table_names(self) -> list[str]:
        """Get the names of the tables of the current database."""
        pass

    @abstractmethod
    def get_encoding(self) -> str:
        """Get the character encoding used for text sent to the database."""
        pass

    @abstractmethod
    def exec(self, statement: str, params: DatabaseParamType = None) -> int:
        """Execute a statement and return the number of affected rows."""
        pass

    @abstractmethod
    def query(
        self, statement: str, params: DatabaseParamType = None
    ) -> list[RowType]:
        """Execute a query and return all rows as dictionaries."""
        pass

    @abstractmethod
    def fetch_one(
        self, statement: str, params: DatabaseParamType = None
    ) -> RowType | None:
        """Execute a query and return the first row or None."""
        pass

    @abstractmethod
    def prepare(self, statement: str) -> Any:
        """Prepare a statement for repeated execution."""
        pass

    @abstractmethod
    def last_insert_id(self) -> int | None:
        """Get the row ID generated by the last insert."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the physical connection."""
        pass

    @contextmanager
    def transaction(self) -> Iterator["Driver"]:
        """Run a block inside a (possibly nested) transaction.

        Commits one level on success and rolls everything back on error.
        """
        self.begin_transaction()
        try:
            yield self
        except BaseException:
            self.roll_back()
            raise
        self.commit()

    def __enter__(self) -> "Driver":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
