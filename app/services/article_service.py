"""
Article service: CRUD, slug generation and tag synchronization
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from app.models.article import (
    Article,
    ArticleStatus,
    firestore_article_to_model,
)
from app.models.tag import tag_key
from app.models.user import UserProfile
from app.policies import AccessPolicy
from app.schemas.article import ArticleCreateSchema, ArticleUpdateSchema
from app.services.deploy_hook import DeployHook, deploy_hook
from app.services.firebase_service import (
    ARTICLES_COLLECTION,
    DESCENDING,
    FirebaseService,
    firebase_service,
)
from app.services.tag_service import TagService, tag_service

logger = logging.getLogger(__name__)

_INVALID_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RUN = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-+")


def generate_slug(title: str) -> str:
    """Create a URL slug from a title: "Hello, World!" -> "hello-world"

    Leading and trailing hyphens are dropped as well, so that
    "  ---Test---  " becomes "test". Uniqueness is not guaranteed.
    """
    s = _INVALID_SLUG_CHARS.sub("", (title or "").lower()).strip()
    s = _WHITESPACE_RUN.sub("-", s)
    s = _HYPHEN_RUN.sub("-", s)
    return s.strip("-")


def normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Trim, lowercase and de-duplicate tags, keeping first-seen order"""
    seen = []
    for tag in tags or []:
        key = tag_key(tag)
        if key and key not in seen:
            seen.append(key)
    return seen


class ArticleService:
    def __init__(
        self,
        firebase: FirebaseService = None,
        tags: TagService = None,
        hook: DeployHook = None,
        policy: AccessPolicy = None,
    ):
        self.firebase = firebase or firebase_service
        self.tags = tags or tag_service
        self.hook = hook or deploy_hook
        self.policy = policy or AccessPolicy()

    async def list_articles(self) -> List[Article]:
        """All articles, newest first. Filtering happens in memory."""
        docs = await self.firebase.query_collection(
            ARTICLES_COLLECTION, order_by="createdAt", direction=DESCENDING
        )
        articles = []
        for doc_id, data in docs:
            try:
                articles.append(firestore_article_to_model(data, doc_id))
            except ValueError as e:
                logger.warning("Skipping malformed article %s: %s", doc_id, e)
        return articles

    async def get_article(self, article_id: str) -> Optional[Article]:
        data = await self.firebase.get_document(ARTICLES_COLLECTION, article_id)
        if data is None:
            return None
        return firestore_article_to_model(data, article_id)

    async def create_article(self, actor: UserProfile, payload: ArticleCreateSchema) -> str:
        """
        Persist a new article

        Args:
            actor: The signed-in profile creating the article
            payload: Validated article fields

        Returns:
            The store-assigned article id
        """
        author = actor.display_name
        if payload.author and self.policy.may_set_author(actor):
            author = payload.author.strip()

        data = {
            "title": payload.title,
            "slug": generate_slug(payload.title),
            "thumbnail": payload.thumbnail,
            "content": payload.content,
            "excerpt": payload.excerpt,
            "author": author,
            "category": payload.category.value,
            "tags": normalize_tags(payload.tags),
            "status": payload.status.value,
            "createdAt": self.firebase.server_timestamp(),
        }
        article_id = await self.firebase.add_document(ARTICLES_COLLECTION, data)
        logger.info("Article %s created by %s", article_id, actor.uid)

        await self._after_save(data["tags"], payload.status)
        return article_id

    async def update_article(
        self, actor: UserProfile, article_id: str, patch: ArticleUpdateSchema
    ) -> Optional[Article]:
        """
        Merge a partial update into an existing article

        Returns:
            The updated article, or None when it does not exist

        Raises:
            PermissionDeniedError: If the actor is neither author nor admin
        """
        existing = await self.get_article(article_id)
        if existing is None:
            return None
        self.policy.require_article_editor(actor, existing)

        changes: Dict[str, Any] = patch.model_dump(exclude_unset=True, exclude_none=True)
        if "author" in changes and not self.policy.may_set_author(actor):
            changes.pop("author")
        if "title" in changes:
            changes["slug"] = generate_slug(changes["title"])
        if "tags" in changes:
            changes["tags"] = normalize_tags(changes["tags"])
        for key in ("category", "status"):
            if key in changes:
                changes[key] = changes[key].value

        if changes:
            await self.firebase.update_document(ARTICLES_COLLECTION, article_id, changes)
            logger.info("Article %s updated by %s", article_id, actor.uid)
            saved_status = ArticleStatus(changes.get("status", existing.status.value))
            await self._after_save(changes.get("tags"), saved_status)

        return await self.get_article(article_id)

    async def delete_article(self, actor: UserProfile, article_id: str) -> None:
        """Permanent delete; a missing id is a no-op"""
        existing = await self.get_article(article_id)
        if existing is not None:
            self.policy.require_article_editor(actor, existing)
        await self.firebase.delete_document(ARTICLES_COLLECTION, article_id)
        logger.info("Article %s deleted by %s", article_id, actor.uid)

    async def _after_save(self, tags: Optional[List[str]], status: ArticleStatus) -> None:
        if tags:
            # best effort, never fails the save
            await self.tags.sync_tags(tags)
        if status == ArticleStatus.PUBLISHED:
            self.hook.schedule()


article_service = ArticleService()
