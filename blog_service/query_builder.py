"""
QueryBuilder for the SELECT statements issued by repositories.
It only produces SQL and parameters; execution lives in DatabaseOperations.
"""

from typing import Any


class QueryBuilder:
    """
    Immutable builder for SELECT statements. Every method returns a copy.

    Usage:
        builder = QueryBuilder("posts")
        query, params = builder.where("author", author_id).order_by_desc("created_at").build()
    """

    def __init__(self, table_name: str):
        self.table_name = table_name
        self.where_conditions: list[str] = []
        self.params: list[Any] = []
        self.order_by_parts: list[str] = []
        self.limit_count: int | None = None

    def _clone(self) -> "QueryBuilder":
        new_builder = QueryBuilder(self.table_name)
        new_builder.where_conditions = self.where_conditions.copy()
        new_builder.params = self.params.copy()
        new_builder.order_by_parts = self.order_by_parts.copy()
        new_builder.limit_count = self.limit_count
        return new_builder

    def _next_placeholder(self) -> str:
        return f"${len(self.params) + 1}"

    def _add_condition(self, field: str, value: Any, operator: str) -> "QueryBuilder":
        new_builder = self._clone()

        # None compares with IS NULL / IS NOT NULL
        if value is None and operator == "=":
            condition = f"{field} IS NULL"
        elif value is None and operator in ("!=", "<>"):
            condition = f"{field} IS NOT NULL"
        else:
            condition = f"{field} {operator} {new_builder._next_placeholder()}"
            new_builder.params.append(value)

        new_builder.where_conditions.append(condition)
        return new_builder

    def where(self, field: str, *args: Any) -> "QueryBuilder":
        """Add an AND-ed WHERE condition.

        Supports both of the following call styles:
        - where(field, value) -> operator defaults to '='
        - where(field, operator, value) -> explicit operator in the second place
        """
        if len(args) == 2:
            operator, value = args
            return self._add_condition(field, value, operator)
        if len(args) == 1:
            return self._add_condition(field, args[0], "=")
        raise TypeError("where() expects (field, value) or (field, operator, value)")

    def where_in(self, field: str, values: Any | list[Any]) -> "QueryBuilder":
        """Add a WHERE field IN (...) condition. An empty list matches nothing."""
        if not isinstance(values, list):
            values = [values]
        new_builder = self._clone()
        if not values:
            new_builder.where_conditions.append("FALSE")
            return new_builder
        start_index = len(new_builder.params) + 1
        placeholders = ", ".join(f"${i + start_index}" for i in range(len(values)))
        new_builder.where_conditions.append(f"{field} IN ({placeholders})")
        new_builder.params.extend(values)
        return new_builder

    def where_contains(self, field: str, value: Any) -> "QueryBuilder":
        """Match rows whose array column `field` has `value` as an element"""
        new_builder = self._clone()
        new_builder.where_conditions.append(
            f"{new_builder._next_placeholder()} = ANY({field})"
        )
        new_builder.params.append(value)
        return new_builder

    def order_by_asc(self, field: str) -> "QueryBuilder":
        """Add ORDER BY ... ASC. Chain to add more fields."""
        new_builder = self._clone()
        new_builder.order_by_parts.append(f"{field} ASC")
        return new_builder

    def order_by_desc(self, field: str) -> "QueryBuilder":
        """Add ORDER BY ... DESC. Chain to add more fields."""
        new_builder = self._clone()
        new_builder.order_by_parts.append(f"{field} DESC")
        return new_builder

    def limit(self, count: int) -> "QueryBuilder":
        new_builder = self._clone()
        new_builder.limit_count = count
        return new_builder

    def build(self) -> tuple[str, list[Any]]:
        """Build the final SQL query and parameters"""
        query_parts = [f"SELECT * FROM {self.table_name}"]

        if self.where_conditions:
            query_parts.append(f"WHERE {' AND '.join(self.where_conditions)}")

        if self.order_by_parts:
            query_parts.append(f"ORDER BY {', '.join(self.order_by_parts)}")

        if self.limit_count is not None:
            query_parts.append(f"LIMIT {self.limit_count}")

        return " ".join(query_parts), self.params

    def to_sql(self) -> str:
        query, _ = self.build()
        return query
