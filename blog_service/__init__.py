"""Blog post/user service layer over PostgreSQL"""

from blog_service.db_context import DatabaseManager, transactional
from blog_service.errors import BlogServiceError, StoreError, ValidationError
from blog_service.features import RepositoryFeature, TimestampFeature
from blog_service.repository import Repository, RepositoryConfig
from blog_service.services import PostService, UserService

__all__ = [
    "DatabaseManager",
    "transactional",
    "BlogServiceError",
    "StoreError",
    "ValidationError",
    "Repository",
    "RepositoryConfig",
    "RepositoryFeature",
    "TimestampFeature",
    "PostService",
    "UserService",
]
