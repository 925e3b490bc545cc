from uuid import UUID

from blog_service.entities import SortOrder
from blog_service.features import TimestampFeature
from blog_service.post_entities import Post, PostListOptions, PostUpdate
from blog_service.repository import Repository, RepositoryConfig, coerce_id


class PostRepository(Repository[Post, PostUpdate]):
    def __init__(self, config: RepositoryConfig | None = None):
        super().__init__(
            entity_class=Post,
            update_class=PostUpdate,
            table_name="posts",
            config=config or RepositoryConfig(features=[TimestampFeature()]),
        )

    def sorted_by(self, options: PostListOptions | None = None) -> "PostRepository":
        options = options or PostListOptions()
        return self.sort(options.sort_by, SortOrder(options.sort_order))

    def owned_by(self, author_id: UUID | str) -> "PostRepository":
        """Scope queries and writes to posts whose author is `author_id`.

        A malformed id matches nothing.
        """
        parsed_id = coerce_id(author_id)
        if parsed_id is None:
            return self.where_in("author", [])
        return self.where("author", parsed_id)

    async def find_all(self, options: PostListOptions | None = None) -> list[Post]:
        return await self.sorted_by(options).get()

    async def find_by_author(
        self, author_id: UUID | str, options: PostListOptions | None = None
    ) -> list[Post]:
        return await self.owned_by(author_id).sorted_by(options).get()

    async def find_by_tag(
        self, tag: str, options: PostListOptions | None = None
    ) -> list[Post]:
        return await self.where_contains("tags", tag).sorted_by(options).get()
