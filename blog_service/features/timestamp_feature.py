"""Timestamp feature for automatic timestamp management"""

from datetime import UTC, datetime
from typing import Any

from blog_service.features.base_feature import RepositoryFeature


class TimestampFeature(RepositoryFeature):
    """
    Maintains `created_at` and `updated_at` columns.

    Both are set to the same instant on insert. Every update moves
    `updated_at` forward, even when no other column changes, and never
    leaves it equal to or behind the stored value.
    """

    created_column = "created_at"
    updated_column = "updated_at"

    @staticmethod
    def _get_current_timestamp() -> datetime:
        return datetime.now(UTC)

    def before_create(self, data: dict[str, Any]) -> dict[str, Any]:
        timestamp = self._get_current_timestamp()
        data[self.created_column] = timestamp
        data[self.updated_column] = timestamp
        return data

    def before_update(self, data: dict[str, Any]) -> dict[str, Any]:
        data.pop(self.created_column, None)
        data[self.updated_column] = self._get_current_timestamp()
        return data

    def assignment(self, column: str, placeholder: str) -> str | None:
        if column != self.updated_column:
            return None
        # Clock resolution is one microsecond; two saves inside it must still advance
        return f"GREATEST({placeholder}, {column} + INTERVAL '1 microsecond')"
