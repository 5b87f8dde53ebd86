"""
User Models for LSPI Admin Backend

This module defines the UserProfile model that represents staff
profile documents stored in Firebase Firestore.
"""

from datetime import datetime
from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict


class UserRole(str, Enum):
    """User role enumeration"""

    ADMIN = "admin"
    STAFF = "staff"


DEFAULT_POSITION = "Anggota"


class UserProfile(BaseModel):
    """
    Staff profile stored in Firestore

    Collection: users/
    Document ID: Firebase Auth UID once activated, or the lowercased
    email address while the profile is still a whitelist placeholder.
    """

    uid: str = Field(..., description="Document key (auth UID or placeholder email)")
    email: str
    display_name: str = Field(
        default="", description="Name shown as article author", alias="displayName"
    )
    role: UserRole = Field(default=UserRole.STAFF, description="User role in the system")
    position: str = Field(default=DEFAULT_POSITION, description="Free-text job title")
    photo_url: Optional[str] = Field(
        default=None, description="URL or data URI of the avatar", alias="photoURL"
    )
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=False,
        json_schema_extra={
            "example": {
                "uid": "firebase_user_uid_123",
                "email": "staff@lspi.or.id",
                "displayName": "Siti Aminah",
                "role": "staff",
                "position": "Anggota",
                "photoURL": "",
            }
        }
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_placeholder(self) -> bool:
        """True while the document is still keyed by email."""
        return self.uid == self.email.strip().lower()


# Helper function to convert Firestore document to UserProfile model
def firestore_user_to_model(doc_data: dict, uid: str) -> UserProfile:
    # The document key wins over any stale "uid" field copied during migration
    return UserProfile.model_validate({**doc_data, "uid": uid})

