"""Repository features package"""

from blog_service.features.base_feature import RepositoryFeature
from blog_service.features.timestamp_feature import TimestampFeature

__all__ = ["RepositoryFeature", "TimestampFeature"]
