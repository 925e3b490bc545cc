from blog_service.features import TimestampFeature
from blog_service.repository import Repository, RepositoryConfig
from blog_service.user_entities import User, UserUpdate


class UserRepository(Repository[User, UserUpdate]):
    def __init__(self, config: RepositoryConfig | None = None):
        super().__init__(
            entity_class=User,
            update_class=UserUpdate,
            table_name="users",
            config=config or RepositoryConfig(features=[TimestampFeature()]),
        )

    async def find_by_username(self, username: str) -> User | None:
        return await self.where("username", username).first()
