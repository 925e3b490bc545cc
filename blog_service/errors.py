"""Exceptions raised by the blog service layer"""

from typing import Any

import pydantic


class BlogServiceError(Exception):
    """Base class for errors raised by this package."""


class StoreError(BlogServiceError):
    """The store handle is unusable: unknown pool or no active transaction.

    Driver failures (asyncpg.PostgresError, connection errors) are not wrapped
    and reach callers unchanged.
    """


class ValidationError(BlogServiceError):
    """A record violates a required-field or uniqueness constraint.

    Attributes:
        field: Name of the offending field, or None when not attributable
        kind: One of "missing", "invalid", "duplicate", "unknown"
        message: Human readable description
        details: All individual problems as (field, kind, message) tuples
    """

    KINDS = ("missing", "invalid", "duplicate", "unknown")

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        kind: str = "invalid",
        details: list[tuple[str | None, str, str]] | None = None,
    ):
        if kind not in self.KINDS:
            raise ValueError(f"Unknown validation error kind '{kind}'")
        super().__init__(message)
        self.message = message
        self.field = field
        self.kind = kind
        self.details = details or [(field, kind, message)]

    def __repr__(self) -> str:
        return f"ValidationError(field={self.field!r}, kind={self.kind!r}, message={self.message!r})"

    @classmethod
    def from_pydantic(cls, exc: pydantic.ValidationError) -> "ValidationError":
        """Build from a pydantic error, keeping the first problem as the headline"""
        details = [_describe(error) for error in exc.errors()]
        field, kind, message = details[0]
        return cls(message, field=field, kind=kind, details=details)

    @classmethod
    def duplicate(cls, field: str, value: Any) -> "ValidationError":
        return cls(f"{field} '{value}' is already taken", field=field, kind="duplicate")


def _describe(error: dict[str, Any]) -> tuple[str | None, str, str]:
    loc = error.get("loc") or ()
    field = str(loc[0]) if loc else None
    error_type = error.get("type", "")
    if error_type == "missing":
        kind = "missing"
        message = f"{field} is required"
    elif error_type == "extra_forbidden":
        kind = "unknown"
        message = f"{field} is not a recognized field"
    else:
        kind = "invalid"
        message = error.get("msg", "invalid value")
    return field, kind, message
