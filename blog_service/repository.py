"""Repository class"""

import re
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from blog_service.database_operations import DatabaseOperations
from blog_service.entities import SortOrder
from blog_service.entity_mapper import EntityMapper
from blog_service.features import RepositoryFeature
from blog_service.query_builder import QueryBuilder


class RepositoryConfig(BaseModel):
    """Configuration options for Repository"""

    model_config = {"arbitrary_types_allowed": True}

    db_schema: str | None = Field(default=None, description="Database schema name")
    features: list[RepositoryFeature] = Field(default_factory=list)


def coerce_id(value: UUID | str | None) -> UUID | None:
    """Parse an identifier, returning None when it is not a valid UUID"""
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return UUID(value)
    except ValueError:
        return None


class Repository[T: BaseModel, U: BaseModel]:
    """Async repository over one table.

    Query methods (where, where_contains, sort, ...) return a new repository carrying
    the extended query; `get` and `first` execute it. Conditions
    added this way also scope `update` and `delete`:

        await repo.where("author", author_id).update(post_id, patch)

    Identifiers are generated by the store on insert. Malformed identifiers
    behave as "not found" on every path.

    Type Parameters:
        T: Entity type returned to callers
        U: Update model; only fields explicitly set are written
    """

    def __init__(
        self,
        entity_class: type[T],
        update_class: type[U],
        table_name: str,
        config: RepositoryConfig | None = None,
    ):
        if not table_name:
            raise ValueError("table_name is required")

        self.entity_class = entity_class
        self.update_class = update_class
        self.table_name = table_name
        self.config = config or RepositoryConfig()
        self._qualified_table_name = (
            f"{self.config.db_schema}.{table_name}"
            if self.config.db_schema
            else table_name
        )
        self._query_builder: QueryBuilder | None = None

        self.db_ops = DatabaseOperations()
        self.entity_mapper = EntityMapper(entity_class)

    def _get_or_create_query_builder(self) -> QueryBuilder:
        if self._query_builder is None:
            return QueryBuilder(self._qualified_table_name)
        return self._query_builder

    def _clone_with_query_builder(self, query_builder: QueryBuilder):
        new_repo = self.__class__.__new__(self.__class__)
        new_repo.__dict__.update(self.__dict__)
        new_repo._query_builder = query_builder
        return new_repo

    # Fluent query methods that return a new repository instance
    def where(self, field: str, *args: Any):
        """Add a WHERE condition: where(field, value) or where(field, operator, value)"""
        return self._clone_with_query_builder(
            self._get_or_create_query_builder().where(field, *args)
        )

    def where_in(self, field: str, values: list):
        return self._clone_with_query_builder(
            self._get_or_create_query_builder().where_in(field, values)
        )

    def where_contains(self, field: str, value: Any):
        """Match rows whose array column contains `value`"""
        return self._clone_with_query_builder(
            self._get_or_create_query_builder().where_contains(field, value)
        )

    def sort(self, field: str, order: SortOrder | str = SortOrder.ASCENDING):
        """Order by `field`, breaking ties by id so results are stable"""
        order = SortOrder(order)
        builder = self._get_or_create_query_builder()
        if order is SortOrder.DESCENDING:
            builder = builder.order_by_desc(field).order_by_desc("id")
        else:
            builder = builder.order_by_asc(field).order_by_asc("id")
        return self._clone_with_query_builder(builder)

    # Execution methods for fluent queries
    async def get(self) -> list[T]:
        query, params = self._get_or_create_query_builder().build()
        rows = await self.db_ops.fetch_all(query, params)
        return self.entity_mapper.map_rows_to_entities(rows)

    async def first(self) -> T | None:
        query, params = self._get_or_create_query_builder().limit(1).build()
        row = await self.db_ops.fetch_one(query, params)
        if row is None:
            return None
        return self.entity_mapper.map_row_to_entity(row)

    def to_sql(self) -> str:
        return self._get_or_create_query_builder().to_sql()

    def _scope_clause(self, param_offset: int) -> tuple[str, list[Any]]:
        """Render the fluent WHERE conditions for UPDATE/DELETE.

        Placeholders are shifted by `param_offset` so they follow the
        parameters the statement binds itself.
        """
        if self._query_builder is None or not self._query_builder.where_conditions:
            return "", []

        def shift(match):
            return f"${int(match.group(1)) + param_offset}"

        conditions = [
            re.sub(r"\$(\d+)", shift, condition)
            for condition in self._query_builder.where_conditions
        ]
        return " AND " + " AND ".join(conditions), self._query_builder.params.copy()

    # CRUD operations
    async def find_by_id(self, entity_id: UUID | str) -> T | None:
        parsed_id = coerce_id(entity_id)
        if parsed_id is None:
            return None
        return await self.where("id", parsed_id).first()

    async def create(self, entity: BaseModel | dict[str, Any]) -> T:
        """Insert a row and return it as stored, including generated columns"""
        fields = entity.model_dump() if isinstance(entity, BaseModel) else dict(entity)
        fields.pop("id", None)
        for feature in self.config.features:
            fields = feature.before_create(fields)

        columns = ", ".join(fields.keys())
        values = list(fields.values())
        placeholders = ", ".join(f"${i + 1}" for i in range(len(values)))

        row = await self.db_ops.fetch_one(
            f"INSERT INTO {self._qualified_table_name} ({columns}) "
            f"VALUES ({placeholders}) RETURNING *",
            values,
        )
        return self.entity_mapper.map_row_to_entity(row)

    async def update(self, entity_id: UUID | str, update_data: U) -> T | None:
        """Apply the explicitly set fields of `update_data`.

        Returns the updated entity, or None when no row matches the id
        (and the fluent conditions, if any).
        """
        parsed_id = coerce_id(entity_id)
        if parsed_id is None:
            return None

        update_dict = update_data.model_dump(exclude_unset=True)
        for feature in self.config.features:
            update_dict = feature.before_update(update_dict)

        if not update_dict:
            return await self.find_by_id(parsed_id)

        assignments = []
        for i, column in enumerate(update_dict.keys()):
            placeholder = f"${i + 2}"
            expression = placeholder
            for feature in self.config.features:
                expression = feature.assignment(column, placeholder) or expression
            assignments.append(f"{column} = {expression}")

        values = [parsed_id, *update_dict.values()]
        scope, scope_params = self._scope_clause(len(values))

        row = await self.db_ops.fetch_one(
            f"UPDATE {self._qualified_table_name} SET {', '.join(assignments)} "
            f"WHERE id = $1{scope} RETURNING *",
            values + scope_params,
        )
        if row is None:
            return None
        return self.entity_mapper.map_row_to_entity(row)

    async def delete(self, entity_id: UUID | str) -> int:
        """Delete by id within the fluent conditions; returns the number of rows removed"""
        parsed_id = coerce_id(entity_id)
        if parsed_id is None:
            return 0

        scope, scope_params = self._scope_clause(1)
        result = await self.db_ops.execute_query(
            f"DELETE FROM {self._qualified_table_name} WHERE id = $1{scope}",
            [parsed_id, *scope_params],
        )
        return self.db_ops.affected_rows(result)

