"""
Article request/response schemas
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime

from app.models.article import ArticleCategory, ArticleStatus


class ArticleCreateSchema(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    thumbnail: str = Field(..., min_length=1, description="Image URL or data URI")
    content: str = Field(..., description="Markdown body")
    excerpt: str = Field(..., min_length=1)
    author: Optional[str] = Field(
        None, description="Only honored when an administrator saves the article")
    category: ArticleCategory = ArticleCategory.OPINI
    tags: list[str] = Field(default_factory=list)
    status: ArticleStatus = ArticleStatus.DRAFT

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Refleksi Akhir Tahun",
                "thumbnail": "https://example.com/cover.jpg",
                "content": "## Pembuka\n\nIsi artikel...",
                "excerpt": "Catatan singkat akhir tahun.",
                "category": "Opini",
                "tags": ["refleksi", "organisasi"],
                "status": "Draft",
            }
        }
    )


class ArticleUpdateSchema(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    thumbnail: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    author: Optional[str] = None
    category: Optional[ArticleCategory] = None
    tags: Optional[list[str]] = None
    status: Optional[ArticleStatus] = None

    model_config = ConfigDict(populate_by_name=True)


class ArticleResponse(BaseModel):
    article_id: str = Field(..., alias="id")
    title: str
    slug: str
    thumbnail: str
    content: str
    excerpt: str
    author: str
    category: ArticleCategory
    tags: list[str]
    status: ArticleStatus
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
    )


class ArticleListResponse(BaseModel):
    articles: list[ArticleResponse]
    total: int
    search: str = Field("", description="Search term that was applied")

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
    )


class ArticleCreatedResponse(BaseModel):
    article_id: str = Field(..., alias="id")
    slug: str

    model_config = ConfigDict(populate_by_name=True)


class SlugPreviewResponse(BaseModel):
    title: str
    slug: str
