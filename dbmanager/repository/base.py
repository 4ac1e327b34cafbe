"""Base repositories handing rows over to entities."""

from collections.abc import Mapping
from typing import Any, ClassVar, Generic, TypeVar

from dbmanager.entity import Entity
from dbmanager.exceptions import ManagerError
from dbmanager.interfaces import DbManagerAware, Driver, LoggerAware, Repository
from dbmanager.log import get_logger
from dbmanager.types import DatabaseParamType

logger = get_logger(__name__)

E = TypeVar("E", bound=Entity)
T = TypeVar("T", bound=Entity)


class AbstractRepository(Repository, DbManagerAware, LoggerAware):
    """Base repository wired by a DbManager."""

    def get_driver(self) -> Driver | None:
        """Get the driver of the owning manager.

        Raises:
            ManagerError: If no manager is attached
        """
        db_manager = self.get_db_manager()
        if db_manager is None:
            raise ManagerError("Unable to get DbManager from repository")
        return db_manager.get_driver()

    def require_driver(self) -> Driver:
        """Get the driver, failing when the manager has none."""
        driver = self.get_driver()
        if driver is None:
            raise ManagerError(f"{type(self).__name__} has no driver available")
        return driver

    def give_values(self, entity: E, values: Mapping[str, Any]) -> E:
        """Copy values onto an entity.

        Args:
            entity: Target entity
            values: Field names mapped to values

        Returns:
            The same entity
        """
        for name, value in values.items():
            entity.set_field(name, value)
        return entity


class EntityRepository(AbstractRepository, Generic[T]):
    """Repository mapping query results onto one entity class."""

    entity_class: ClassVar[type[Entity]] = Entity

    def create_entity(self, row: Mapping[str, Any]) -> T:
        """Build an entity from a row."""
        return self.entity_class.from_row(row)  # type: ignore[return-value]

    def fetch_entities(
        self, statement: str, params: DatabaseParamType = None
    ) -> list[T]:
        """Run a query and map every row onto an entity."""
        rows = self.require_driver().query(statement, params)
        logger.debug(f"{type(self).__name__} fetched {len(rows)} rows")
        return [self.create_entity(row) for row in rows]

    def fetch_entity(
        self, statement: str, params: DatabaseParamType = None
    ) -> T | None:
        """Run a query and map the first row onto an entity."""
        row = self.require_driver().fetch_one(statement, params)
        if row is None:
            return None
        return self.create_entity(row)
