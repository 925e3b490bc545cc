from blog_service.services.posts import PostService
from blog_service.services.users import UserService

__all__ = ["PostService", "UserService"]
