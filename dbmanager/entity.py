"""Entity base model populated from database rows."""

from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """Record with named fields assigned from database rows.

    Declared fields are validated on assignment; undeclared fields are kept
    as extra attributes.
    """

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        """Create an entity from a row mapping."""
        entity = cls.model_construct()
        for name, value in row.items():
            entity.set_field(name, value)
        return entity

    def set_field(self, name: str, value: Any) -> None:
        """Assign a field by name."""
        if name in type(self).model_fields:
            setattr(self, name, value)
        else:
            self.__pydantic_extra__[name] = value

    def get_field(self, name: str, default: Any = None) -> Any:
        """Read a field by name."""
        return getattr(self, name, default)

    def to_dict(self) -> dict[str, Any]:
        """Get all fields, declared and extra."""
        return self.model_dump()
