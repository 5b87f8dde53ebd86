"""
Authorization rules for mutating calls

These checks run in the service layer before any write reaches Firestore.
"""

from app.exceptions import PermissionDeniedError
from app.models.article import Article
from app.models.user import UserProfile


class AccessPolicy:
    """Role and ownership checks"""

    @staticmethod
    def require_admin(actor: UserProfile) -> None:
        if actor is None or not actor.is_admin:
            raise PermissionDeniedError("Administrator role required")

    @staticmethod
    def owns_article(actor: UserProfile, article: Article) -> bool:
        # Authorship is the display-name string stored on the article
        return bool(actor.display_name) and article.author == actor.display_name

    @classmethod
    def can_edit_article(cls, actor: UserProfile, article: Article) -> bool:
        return actor.is_admin or cls.owns_article(actor, article)

    @classmethod
    def require_article_editor(cls, actor: UserProfile, article: Article) -> None:
        if not cls.can_edit_article(actor, article):
            raise PermissionDeniedError("Not allowed to modify this article")

    @staticmethod
    def may_set_author(actor: UserProfile) -> bool:
        return actor.is_admin

