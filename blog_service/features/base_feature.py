"""Base feature interface for repository features"""

from typing import Any


class RepositoryFeature:
    """
    Base class for repository features.

    Features hook into the repository's write path to add behaviour such as
    timestamps. A repository applies its features in the order they are
    configured.
    """

    def before_create(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Hook called before inserting a row.

        Args:
            data: Column values about to be inserted

        Returns:
            Modified column values
        """
        return data

    def before_update(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Hook called before updating a row.

        Args:
            data: Column values about to be assigned

        Returns:
            Modified column values
        """
        return data

    def assignment(self, column: str, placeholder: str) -> str | None:
        """
        Hook to override the SQL expression assigned to `column` in UPDATE.

        Args:
            column: Column being assigned
            placeholder: Bound parameter holding the new value, e.g. "$3"

        Returns:
            SQL expression, or None to assign the placeholder as is
        """
        return None
