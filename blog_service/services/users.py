"""User service: registration and lookups referenced by posts"""

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

import asyncpg

from blog_service.db_context import DatabaseManager
from blog_service.errors import ValidationError
from blog_service.security import get_password_hash, verify_password
from blog_service.services._validation import parse
from blog_service.user_entities import User, UserCreate, UserInfo
from blog_service.user_repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, users: UserRepository | None = None, db_name: str = "default"):
        self.users = users or UserRepository()
        self.db_name = db_name

    async def create_user(self, credentials: UserCreate | Mapping[str, Any]) -> User:
        """Register a user, storing a hash of the password.

        Raises:
            ValidationError: blank username or password, or the username is taken
        """
        data = parse(UserCreate, credentials)
        try:
            async with DatabaseManager.transaction(self.db_name):
                user = await self.users.create(
                    {"username": data.username, "password": get_password_hash(data.password)}
                )
        except asyncpg.UniqueViolationError as exc:
            logger.warning("Rejected user: username '%s' is taken", data.username)
            raise ValidationError.duplicate("username", data.username) from exc

        logger.info("Created user %s (%s)", user.id, user.username)
        return user

    async def get_user_by_id(self, user_id: UUID | str) -> User | None:
        async with DatabaseManager.transaction(self.db_name):
            return await self.users.find_by_id(user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        async with DatabaseManager.transaction(self.db_name):
            return await self.users.find_by_username(username)

    async def get_user_info_by_id(self, user_id: UUID | str) -> UserInfo | None:
        user = await self.get_user_by_id(user_id)
        if user is None:
            return None
        return UserInfo(id=user.id, username=user.username)

    async def authenticate(self, username: str, password: str) -> User | None:
        """The user when `password` matches the stored hash, else None"""
        user = await self.get_user_by_username(username)
        if user is None or not verify_password(password, user.password):
            return None
        return user
