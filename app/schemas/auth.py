"""
Authentication request/response schemas
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional

from app.schemas.user import UserResponse


class UserLogin(BaseModel):
    """Schema for user login"""

    email: str
    password: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": "staff@lspi.or.id", "password": "rahasia123"}
        }
    )


class UserRegister(BaseModel):
    """Schema for self-activation of a whitelisted email"""

    email: str
    password: str
    confirm_password: str = Field(..., alias="confirmPassword")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "email": "staff@lspi.or.id",
                "password": "rahasia123",
                "confirmPassword": "rahasia123",
            }
        }
    )


class TokenRefresh(BaseModel):
    """Schema for token refresh request"""

    refresh_token: str = Field(..., alias="refreshToken")

    model_config = ConfigDict(populate_by_name=True)


class PasswordChange(BaseModel):
    """Schema for password change"""

    new_password: str = Field(..., alias="newPassword")
    confirm_password: str = Field(..., alias="confirmPassword")

    model_config = ConfigDict(populate_by_name=True)


class Token(BaseModel):
    """Firebase session tokens"""

    id_token: str = Field(..., alias="idToken")
    refresh_token: str = Field(..., alias="refreshToken")
    token_type: str = Field("bearer", alias="tokenType")
    expires_in: int = Field(..., alias="expiresIn")  # seconds

    model_config = ConfigDict(populate_by_name=True)


class AuthResponse(BaseModel):
    """Complete authentication response with profile and tokens"""

    user: UserResponse
    tokens: Token
    is_admin: bool = Field(False, alias="isAdmin")

    model_config = ConfigDict(populate_by_name=True)


class RegistrationResponse(BaseModel):
    message: str
    user: Optional[UserResponse] = None


class MessageResponse(BaseModel):
    message: str
