"""Database manager holding the active driver and repositories."""

import logging
from collections.abc import Callable, Mapping
from types import TracebackType
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from dbmanager.config import Settings, load_settings
from dbmanager.exceptions import ConfigurationError, DbManagerError, ManagerError
from dbmanager.implementations import MySQLDriver, SQLiteDriver
from dbmanager.interfaces import DbManagerAware, Driver, LoggerAware, Repository
from dbmanager.log import get_logger
from dbmanager.utils import import_object

logger = get_logger(__name__)

R = TypeVar("R", bound=Repository)

DriverFactory = Callable[..., Driver]

# Drivers shipped with the package
DEFAULT_DRIVERS: dict[str, DriverFactory] = {
    "mysql": MySQLDriver,
    "sqlite": SQLiteDriver,
}


class DriverConfig(BaseModel):
    """Driver descriptor: a registered name or a class, plus arguments."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: str | None = None
    driver_class: Any = Field(default=None, alias="class")
    arguments: list[Any] = Field(default_factory=list)
    keyword_arguments: dict[str, Any] = Field(default_factory=dict)


class ManagerConfig(BaseModel):
    """DbManager configuration."""

    model_config = ConfigDict(extra="forbid")

    driver: str | DriverConfig | None = None


class DbManager(LoggerAware):
    """Manager resolving one active driver and caching repositories."""

    def __init__(
        self,
        config: Mapping[str, Any] | ManagerConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            config: Manager configuration; its ``driver`` entry is a registered
                driver name, an import path, or a mapping with ``name`` or
                ``class`` and optional ``arguments``/``keyword_arguments``
            logger: Logger injected into the driver and repositories

        Raises:
            ConfigurationError: If the driver cannot be resolved or built
            DatabaseConnectionError: If the driver cannot connect
        """
        self.logger = logger
        self._driver: Driver | None = None
        self._repositories: dict[type[Repository], Repository] = {}
        self._drivers: dict[str, DriverFactory] = dict(DEFAULT_DRIVERS)

        manager_config = self._parse_config(config)
        if manager_config.driver is not None:
            self.set_driver(self._create_driver(manager_config.driver))

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, logger: logging.Logger | None = None
    ) -> "DbManager":
        """Create a manager from application settings."""
        settings = settings or load_settings()
        return cls(settings.manager_config(), logger=logger)

    @staticmethod
    def _parse_config(config: Mapping[str, Any] | ManagerConfig | None) -> ManagerConfig:
        if isinstance(config, ManagerConfig):
            return config
        try:
            return ManagerConfig.model_validate(dict(config or {}))
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid manager configuration: {exc}") from exc

    def register_driver(self, name: str, factory: DriverFactory) -> None:
        """Register a driver factory under a short name.

        Args:
            name: Short driver name
            factory: Callable returning a Driver
        """
        self._drivers[name] = factory
        logger.info(f"Registered driver: {name}")

    def _resolve_driver_factory(self, descriptor: str | DriverConfig) -> DriverFactory:
        if isinstance(descriptor, str):
            if descriptor in self._drivers:
                return self._drivers[descriptor]
            return self._import_driver(descriptor)

        if descriptor.name:
            if descriptor.name not in self._drivers:
                raise ConfigurationError(f'Unknown "{descriptor.name}" default driver')
            return self._drivers[descriptor.name]

        if descriptor.driver_class is None:
            raise ConfigurationError('Missing class name in "driver" options')
        if isinstance(descriptor.driver_class, str):
            return self._import_driver(descriptor.driver_class)
        if callable(descriptor.driver_class):
            return descriptor.driver_class

        raise ConfigurationError('"driver" options must be a name or a valid class')

    @staticmethod
    def _import_driver(path: str) -> DriverFactory:
        try:
            factory = import_object(path)
        except (ImportError, AttributeError) as exc:
            raise ConfigurationError(f'Class "{path}" doesn\'t exist') from exc
        if not callable(factory):
            raise ConfigurationError(f'"{path}" is not a driver class')
        return factory

    def _create_driver(self, descriptor: str | DriverConfig) -> Driver:
        factory = self._resolve_driver_factory(descriptor)
        arguments: list[Any] = []
        keyword_arguments: dict[str, Any] = {}
        if isinstance(descriptor, DriverConfig):
            arguments = descriptor.arguments
            keyword_arguments = descriptor.keyword_arguments

        try:
            driver = factory(*arguments, **keyword_arguments)
        except DbManagerError:
            raise
        except Exception as exc:
            raise ConfigurationError(f"Unable to create driver: {exc}") from exc

        if not isinstance(driver, Driver):
            raise ConfigurationError(
                f"Driver class must implement {Driver.__module__}.{Driver.__name__}"
            )

        logger.info(f"Created driver {type(driver).__name__}")
        return driver

    def get_driver(self) -> Driver | None:
        """Get the active driver."""
        return self._driver

    def set_driver(self, driver: Driver) -> "DbManager":
        """Replace the active driver."""
        self._driver = driver
        if (
            self.logger is not None
            and isinstance(driver, LoggerAware)
            and driver.logger is None
        ):
            driver.set_logger(self.logger)
        return self

    def set_logger(self, logger: logging.Logger) -> None:
        super().set_logger(logger)
        if self._driver is not None:
            self.set_driver(self._driver)

    def get_repository(self, identifier: str | type[R]) -> R:
        """Get the repository for an identifier, creating it on first use.

        Args:
            identifier: Repository class or its import path

        Returns:
            Cached repository instance

        Raises:
            ManagerError: If the repository cannot be resolved or created
        """
        repository_class = self._resolve_repository_class(identifier)

        if repository_class in self._repositories:
            return self._repositories[repository_class]  # type: ignore[return-value]

        try:
            repository = repository_class()
        except Exception as exc:
            raise ManagerError(
                f'Unable to get instance of Repository of "{identifier}"'
            ) from exc

        if isinstance(repository, LoggerAware) and self.logger is not None:
            repository.set_logger(self.logger)

        if isinstance(repository, DbManagerAware):
            repository.set_db_manager(self)

        self._repositories[repository_class] = repository
        logger.debug(f"Created repository {repository_class.__name__}")
        return repository  # type: ignore[return-value]

    @staticmethod
    def _resolve_repository_class(identifier: str | type[Repository]) -> type[Repository]:
        repository_class: Any = identifier
        if isinstance(identifier, str):
            try:
                repository_class = import_object(identifier)
            except (ImportError, AttributeError) as exc:
                raise ManagerError(f'Repository "{identifier}" class not found') from exc

        if not isinstance(repository_class, type) or not issubclass(
            repository_class, Repository
        ):
            raise ManagerError(f'"{identifier}" is not a Repository class')
        return repository_class

    def close(self) -> None:
        """Close the active driver."""
        if self._driver is not None:
            self._driver.close()

    def __enter__(self) -> "DbManager":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
