from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from blog_service.entities import BaseEntity, SortOrder

SortField = Literal["created_at", "updated_at", "title"]

_CAMEL_CASE_FIELDS = {"createdAt": "created_at", "updatedAt": "updated_at"}


def _require_title(value):
    if isinstance(value, str):
        value = value.strip()
    # A title made of whitespace counts as absent
    if value is None or value == "":
        raise PydanticCustomError("missing", "title is required")
    return value


def _tags_or_empty(value):
    return [] if value is None else value


class Post(BaseEntity):
    title: str
    author: UUID
    contents: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PostCreate(BaseModel):
    """Fields accepted when creating a post.

    Unknown keys are dropped, including `author`: the author always comes from
    the caller creating the post.
    """

    model_config = ConfigDict(extra="ignore")

    title: str
    contents: str | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def title_not_blank(cls, value):
        return _require_title(value)

    @field_validator("tags", mode="before")
    @classmethod
    def tags_not_null(cls, value):
        return _tags_or_empty(value)


class PostUpdate(BaseModel):
    """Partial update. Only fields explicitly present are written.

    Setting `author` hands the post over to another user.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    author: UUID | None = None
    contents: str | None = None
    tags: list[str] | None = None

    @field_validator("title", mode="before")
    @classmethod
    def title_not_blank(cls, value):
        return _require_title(value)

    @field_validator("author", mode="before")
    @classmethod
    def author_not_null(cls, value):
        if value is None:
            raise PydanticCustomError("missing", "author is required")
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def tags_not_null(cls, value):
        return _tags_or_empty(value)


class PostListOptions(BaseModel):
    """Sorting for post listings; camelCase keys from API clients are accepted"""

    model_config = ConfigDict(extra="forbid")

    sort_by: SortField = Field(
        default="created_at", validation_alias=AliasChoices("sort_by", "sortBy")
    )
    sort_order: SortOrder = Field(
        default=SortOrder.DESCENDING,
        validation_alias=AliasChoices("sort_order", "sortOrder"),
    )

    @field_validator("sort_by", mode="before")
    @classmethod
    def normalize_sort_field(cls, value):
        if isinstance(value, str):
            return _CAMEL_CASE_FIELDS.get(value, value)
        return value

    @field_validator("sort_order", mode="before")
    @classmethod
    def normalize_sort_order(cls, value):
        if isinstance(value, str | int) and not isinstance(value, SortOrder):
            try:
                return SortOrder(value)
            except ValueError:
                raise PydanticCustomError(
                    "sort_order", "sort order must be 'ascending' or 'descending'"
                ) from None
        return value
