"""Tags API routes"""

from typing import List

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user
from app.models.user import UserProfile
from app.services.tag_service import tag_service

router = APIRouter(prefix="/api/v1/tags", tags=["Tags"])


@router.get("", response_model=List[str])
async def list_tags(current_user: UserProfile = Depends(get_current_user)):
    """Every known tag, for autocomplete"""
    return await tag_service.list_all_tags()
