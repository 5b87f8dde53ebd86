"""Articles API routes"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.dependencies import get_current_user
from app.models.article import ArticleCategory, ArticleStatus
from app.models.user import UserProfile
from app.schemas.article import (
    ArticleCreatedResponse,
    ArticleCreateSchema,
    ArticleListResponse,
    ArticleResponse,
    ArticleUpdateSchema,
    SlugPreviewResponse,
)
from app.services.article_filters import ArticleFilter, DateRange
from app.services.article_service import article_service, generate_slug


router = APIRouter(prefix="/api/v1/articles", tags=["Articles"])


@router.get("", response_model=ArticleListResponse)
async def list_articles(
    q: Optional[str] = Query(None, description="Title or author; defaults to your name for staff"),
    category: Optional[ArticleCategory] = None,
    status_filter: Optional[ArticleStatus] = Query(None, alias="status"),
    topics: Optional[List[str]] = Query(None),
    date_range: DateRange = Query(DateRange.ALL, alias="dateRange"),
    current_user: UserProfile = Depends(get_current_user),
):
    """List articles, newest first, filtered in memory"""
    article_filter = ArticleFilter.for_viewer(
        current_user,
        search=q,
        category=category,
        status=status_filter,
        topics=topics,
        date_range=date_range,
    )
    articles = article_filter.apply(await article_service.list_articles())
    return ArticleListResponse(
        articles=[ArticleResponse.model_validate(a) for a in articles],
        total=len(articles),
        search=article_filter.search,
    )


@router.get("/slug", response_model=SlugPreviewResponse)
async def preview_slug(title: str, current_user: UserProfile = Depends(get_current_user)):
    """Slug that a title would produce"""
    return SlugPreviewResponse(title=title, slug=generate_slug(title))


@router.get("/{article_id}", response_model=ArticleResponse)
async def get_article(article_id: str, current_user: UserProfile = Depends(get_current_user)):
    article = await article_service.get_article(article_id)
    if article is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Article not found"
        )
    return ArticleResponse.model_validate(article)


@router.post("", response_model=ArticleCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_article(
    payload: ArticleCreateSchema, current_user: UserProfile = Depends(get_current_user)
):
    if not payload.content.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Konten artikel tidak boleh kosong!",
        )
    article_id = await article_service.create_article(current_user, payload)
    return ArticleCreatedResponse(article_id=article_id, slug=generate_slug(payload.title))


@router.put("/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: str,
    payload: ArticleUpdateSchema,
    current_user: UserProfile = Depends(get_current_user),
):
    if payload.content is not None and not payload.content.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Konten artikel tidak boleh kosong!",
        )
    article = await article_service.update_article(current_user, article_id, payload)
    if article is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Article not found"
        )
    return ArticleResponse.model_validate(article)


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(article_id: str, current_user: UserProfile = Depends(get_current_user)):
    await article_service.delete_article(current_user, article_id)
    return None
