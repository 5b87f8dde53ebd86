"""
User management request/response schemas
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.user import DEFAULT_POSITION, UserRole


class UserProvisionRequest(BaseModel):
    """Administrator pre-registers an email on the whitelist"""

    email: str = Field(..., description="Email the staff member will register with")
    display_name: str = Field(..., alias="displayName", max_length=100)
    role: UserRole = UserRole.STAFF
    position: str = DEFAULT_POSITION

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "email": "staff@lspi.or.id",
                "displayName": "Siti Aminah",
                "role": "staff",
                "position": "Anggota",
            }
        }
    )


class UserAdminUpdate(BaseModel):
    """Administrator edit of an existing profile; email is immutable"""

    display_name: Optional[str] = Field(None, alias="displayName", max_length=100)
    role: Optional[UserRole] = None
    position: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class SettingsUpdate(BaseModel):
    """Fields a user may change on their own profile"""

    position: Optional[str] = None
    photo_url: Optional[str] = Field(None, alias="photoURL")

    model_config = ConfigDict(populate_by_name=True)


class UserResponse(BaseModel):
    uid: str
    email: str
    display_name: str = Field(..., alias="displayName")
    role: UserRole
    position: str
    photo_url: Optional[str] = Field(None, alias="photoURL")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class UserListResponse(BaseModel):
    users: list[UserResponse]
    total: int
