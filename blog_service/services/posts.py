"""
Post service: create, read, update, delete and list posts.

Every method runs in its own transaction on the pool named at construction
(nested inside the caller's transaction when there is one). Driver errors
propagate unchanged. "Not found" is never an error: reads and updates return
None, deletes report ``deleted_count == 0``.

Updates and deletes are ownership checked: they only touch a post whose
``author`` equals the ``author_id`` argument. A post owned by someone else is
indistinguishable from a missing one.
"""

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from blog_service.db_context import DatabaseManager
from blog_service.entities import DeleteResult
from blog_service.errors import ValidationError
from blog_service.post_entities import Post, PostCreate, PostListOptions, PostUpdate
from blog_service.post_repository import PostRepository
from blog_service.repository import coerce_id
from blog_service.services._validation import parse
from blog_service.user_repository import UserRepository

logger = logging.getLogger(__name__)

ListOptions = PostListOptions | Mapping[str, Any] | None


class PostService:
    def __init__(
        self,
        posts: PostRepository | None = None,
        users: UserRepository | None = None,
        db_name: str = "default",
    ):
        self.posts = posts or PostRepository()
        self.users = users or UserRepository()
        self.db_name = db_name

    async def create_post(
        self, author_id: UUID | str, fields: PostCreate | Mapping[str, Any]
    ) -> Post:
        """Persist a new post written by `author_id`.

        An `author` given inside `fields` is ignored in favour of `author_id`.

        Raises:
            ValidationError: title absent or blank, or author_id malformed.
                Nothing is written in that case.
        """
        try:
            data = parse(PostCreate, fields)
        except ValidationError as exc:
            logger.warning("Rejected post: %s", exc.message)
            raise

        author = coerce_id(author_id)
        if author is None:
            raise ValidationError(
                "author is required",
                field="author",
                kind="missing" if author_id is None else "invalid",
            )

        async with DatabaseManager.transaction(self.db_name):
            post = await self.posts.create({**data.model_dump(), "author": author})

        logger.info("Created post %s by %s", post.id, post.author)
        return post

    async def list_all_posts(self, options: ListOptions = None) -> list[Post]:
        """All posts, newest first unless `options` says otherwise"""
        list_options = parse(PostListOptions, options)
        async with DatabaseManager.transaction(self.db_name):
            return await self.posts.find_all(list_options)

    async def list_posts_by_author(
        self, author_id: UUID | str, options: ListOptions = None
    ) -> list[Post]:
        list_options = parse(PostListOptions, options)
        async with DatabaseManager.transaction(self.db_name):
            return await self.posts.find_by_author(author_id, list_options)

    async def list_posts_by_author_username(
        self, username: str, options: ListOptions = None
    ) -> list[Post]:
        """Posts of the user called `username`; empty when there is no such user"""
        list_options = parse(PostListOptions, options)
        async with DatabaseManager.transaction(self.db_name):
            user = await self.users.find_by_username(username)
            if user is None:
                return []
            return await self.posts.find_by_author(user.id, list_options)

    async def list_posts_by_tag(self, tag: str, options: ListOptions = None) -> list[Post]:
        """Posts whose tags include `tag` (exact, case-sensitive)"""
        list_options = parse(PostListOptions, options)
        async with DatabaseManager.transaction(self.db_name):
            return await self.posts.find_by_tag(tag, list_options)

    async def get_post_by_id(self, post_id: UUID | str) -> Post | None:
        async with DatabaseManager.transaction(self.db_name):
            return await self.posts.find_by_id(post_id)

    async def update_post(
        self,
        post_id: UUID | str,
        author_id: UUID | str,
        patch: PostUpdate | Mapping[str, Any],
    ) -> Post | None:
        """Apply `patch` to a post owned by `author_id`.

        `updated_at` advances even when the patch changes nothing. A patch that
        sets `author` transfers the post to that user.

        Returns:
            The updated post, or None when no post with `post_id` is owned by `author_id`.

        Raises:
            ValidationError: unknown field in `patch`, a blank title, or a null
                or malformed author
        """
        try:
            update = parse(PostUpdate, patch)
        except ValidationError as exc:
            logger.warning("Rejected update of post %s: %s", post_id, exc.message)
            raise

        async with DatabaseManager.transaction(self.db_name):
            post = await self.posts.owned_by(author_id).update(post_id, update)

        if post is None:
            logger.info("Update skipped: post %s not found for author %s", post_id, author_id)
        else:
            logger.info("Updated post %s", post.id)
        return post

    async def delete_post(self, post_id: UUID | str, author_id: UUID | str) -> DeleteResult:
        async with DatabaseManager.transaction(self.db_name):
            deleted = await self.posts.owned_by(author_id).delete(post_id)

        if deleted:
            logger.info("Deleted post %s", post_id)
        return DeleteResult(deleted_count=deleted)
