"""Dashboard statistics route"""

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user
from app.models.user import UserProfile
from app.schemas.dashboard import DashboardResponse
from app.services.article_filters import build_dashboard
from app.services.article_service import article_service
from app.services.user_service import user_service

router = APIRouter(prefix="/api/v1/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(current_user: UserProfile = Depends(get_current_user)):
    articles = await article_service.list_articles()
    user_count = None
    if current_user.is_admin:
        user_count = len(await user_service.list_profiles())
    stats = build_dashboard(current_user, articles, user_count)
    return DashboardResponse.model_validate(stats)
