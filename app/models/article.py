"""
Article model and Firestore conversion helpers
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class ArticleCategory(str, Enum):
    OPINI = "Opini"
    BERITA = "Berita"
    LAINNYA = "Lainnya"


class ArticleStatus(str, Enum):
    DRAFT = "Draft"
    PUBLISHED = "Published"


class Article(BaseModel):
    article_id: str = Field(..., alias="id")
    title: str
    slug: str = ""
    thumbnail: str = ""
    content: str = ""
    excerpt: str = ""
    author: str = ""
    category: ArticleCategory = ArticleCategory.LAINNYA
    tags: list[str] = Field(default_factory=list)
    status: ArticleStatus = ArticleStatus.DRAFT
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)


def firestore_article_to_model(doc: dict, doc_id: str) -> Article:
    return Article.model_validate({**doc, "id": doc_id})

