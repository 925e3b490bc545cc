from enum import Enum
from typing import ClassVar
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class BaseEntity(BaseModel):
    """Base class for persisted records. `id` is generated by the store."""

    model_config: ClassVar[ConfigDict] = ConfigDict(use_enum_values=True, extra="ignore")
    id: UUID


class SortOrder(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"

    @classmethod
    def _missing_(cls, value):
        aliases = {
            "asc": cls.ASCENDING,
            "1": cls.ASCENDING,
            "desc": cls.DESCENDING,
            "-1": cls.DESCENDING,
        }
        if isinstance(value, str | int):
            key = str(value).strip().lower()
            for member in cls:
                if member.value == key:
                    return member
            return aliases.get(key)
        return None


class DeleteResult(BaseModel):
    """Outcome of a delete: 1 when a row was removed, 0 otherwise"""

    deleted_count: int = Field(serialization_alias="deletedCount")
