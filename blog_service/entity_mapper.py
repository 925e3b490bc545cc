from typing import Any

from pydantic import BaseModel


class EntityMapper[T: BaseModel]:
    """Maps asyncpg records onto entity models"""

    def __init__(self, entity_class: type[T]):
        self.entity_class = entity_class

    def map_row_to_entity(self, row: Any) -> T:
        return self.entity_class(**dict(row))

    def map_rows_to_entities(self, rows: list[Any]) -> list[T]:
        return [self.map_row_to_entity(row) for row in rows]
