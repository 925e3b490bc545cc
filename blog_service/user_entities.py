from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_core import PydanticCustomError

from blog_service.entities import BaseEntity


class User(BaseEntity):
    username: str
    # passlib hash, never the plain text
    password: str
    created_at: datetime
    updated_at: datetime


class UserInfo(BaseModel):
    """Public view of a user"""

    id: UUID
    username: str


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: str
    password: str

    @field_validator("username", mode="before")
    @classmethod
    def username_not_blank(cls, value):
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            raise PydanticCustomError("missing", "username is required")
        return value

    @field_validator("password", mode="before")
    @classmethod
    def password_not_empty(cls, value):
        if value is None or value == "":
            raise PydanticCustomError("missing", "password is required")
        return value


class UserUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    password: str | None = None
