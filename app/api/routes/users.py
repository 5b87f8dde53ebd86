"""
User management API endpoints (administrators only)
"""

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies import require_admin
from app.models.user import UserProfile
from app.schemas.user import (
    UserAdminUpdate,
    UserListResponse,
    UserProvisionRequest,
    UserResponse,
)
from app.services.user_service import user_service

# Create router
router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("", response_model=UserListResponse)
async def list_users(current_user: UserProfile = Depends(require_admin)):
    """
    All profiles, most recently updated first

    Whitelist placeholders are included; their uid is the email.
    """
    profiles = await user_service.list_profiles()
    return UserListResponse(
        users=[UserResponse.model_validate(p) for p in profiles],
        total=len(profiles),
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def provision_user(
    payload: UserProvisionRequest, current_user: UserProfile = Depends(require_admin)
):
    """
    Whitelist an email

    - **email**: the person must register with this email to log in
    - **displayName**, **role**, **position**: copied to the account on activation
    """
    profile = await user_service.pre_provision(current_user, payload)
    return UserResponse.model_validate(profile)


@router.put("/{uid}", response_model=UserResponse)
async def update_user(
    uid: str, payload: UserAdminUpdate, current_user: UserProfile = Depends(require_admin)
):
    profile = await user_service.admin_update(current_user, uid, payload)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )
    return UserResponse.model_validate(profile)


@router.delete("/{uid}")
async def delete_user(uid: str, current_user: UserProfile = Depends(require_admin)):
    """
    Delete a profile permanently

    The user loses access the next time their session is checked.
    """
    await user_service.delete_profile(current_user, uid)
    return {"message": "Pengguna dan akses login telah dihapus."}
