"""Exceptions raised by dbmanager."""


class DbManagerError(Exception):
    """Base exception for dbmanager errors."""

    pass


class ConfigurationError(DbManagerError):
    """Raised when manager or driver options are invalid."""

    pass


class ManagerError(DbManagerError):
    """Raised when a repository cannot be resolved or has no manager."""

    pass


class DatabaseConnectionError(DbManagerError):
    """Raised when the physical connection cannot be established."""

    def __init__(self, message: str, connection_string: str | None = None) -> None:
        super().__init__(message)
        self.connection_string = connection_string


class DatabaseError(DbManagerError):
    """Raised when a statement, quoting or introspection call fails."""

    def __init__(self, message: str = "", code: int | str | None = None) -> None:
        super().__init__(message)
        self.code = code


class DatabaseTimeoutError(DatabaseError):
    """Raised when the native error is a timeout-class failure."""

    pass


class TransactionError(DatabaseError):
    """Raised when commit is called without a matching begin."""

    pass
