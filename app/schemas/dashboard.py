"""
Dashboard response schema
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.article import ArticleResponse


class DashboardResponse(BaseModel):
    total_articles: int = Field(..., alias="totalArticles")
    published_count: int = Field(..., alias="publishedCount")
    my_drafts: int = Field(..., alias="myDrafts")
    user_count: Optional[int] = Field(None, alias="userCount")
    recent_articles: list[ArticleResponse] = Field(..., alias="recentArticles")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)
