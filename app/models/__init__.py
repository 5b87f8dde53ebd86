from app.models.article import Article, ArticleCategory, ArticleStatus
from app.models.tag import Tag
from app.models.user import UserProfile, UserRole

__all__ = ["Article", "ArticleCategory", "ArticleStatus", "Tag", "UserProfile", "UserRole"]
