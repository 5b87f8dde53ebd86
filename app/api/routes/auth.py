"""
Authentication API endpoints
"""

from fastapi import APIRouter, Depends, status

from app.dependencies import get_auth_service, get_current_session
from app.schemas.auth import (
    AuthResponse,
    MessageResponse,
    PasswordChange,
    RegistrationResponse,
    Token,
    TokenRefresh,
    UserLogin,
    UserRegister,
)
from app.schemas.user import SettingsUpdate, UserResponse
from app.services.auth_service import AuthService
from app.services.registration_service import registration_service
from app.services.session_service import SessionContext
from app.services.user_service import user_service

# Create router
router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def _auth_response(result: dict) -> AuthResponse:
    session = result["session"]
    context = result["context"]
    return AuthResponse(
        user=UserResponse.model_validate(context.profile),
        tokens=Token(
            id_token=session["id_token"],
            refresh_token=session["refresh_token"],
            expires_in=session["expires_in"],
        ),
        is_admin=context.is_admin,
    )


@router.post("/login", response_model=AuthResponse)
async def login(payload: UserLogin, auth_service: AuthService = Depends(get_auth_service)):
    """
    Sign in with email and password

    Returns the Firebase ID token to send as Bearer token on later calls,
    together with the caller's profile.
    """
    result = await auth_service.sign_in(payload.email, payload.password)
    return _auth_response(result)


@router.post("/refresh", response_model=AuthResponse)
async def refresh_token(
    token_data: TokenRefresh, auth_service: AuthService = Depends(get_auth_service)
):
    """
    Refresh the ID token using the Firebase refresh token
    """
    result = await auth_service.refresh(token_data.refresh_token)
    return _auth_response(result)


@router.post("/register", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: UserRegister):
    """
    Activate a whitelisted account

    - **email**: the email an administrator registered
    - **password** / **confirmPassword**: at least 6 characters, must match
    """
    result = await registration_service.activate(
        payload.email, payload.password, payload.confirm_password
    )
    user = UserResponse.model_validate(result.profile) if result.profile else None
    return RegistrationResponse(
        message="Akun Anda telah aktif. Selamat datang di LSPI!", user=user
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    session: SessionContext = Depends(get_current_session),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Logout current user

    Revokes the refresh tokens of the identity.
    """
    await auth_service.sign_out(session)
    return MessageResponse(message="Successfully logged out")


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(session: SessionContext = Depends(get_current_session)):
    """
    Get current authenticated user information
    """
    return UserResponse.model_validate(session.profile)


@router.put("/me", response_model=UserResponse)
async def update_settings(
    payload: SettingsUpdate, session: SessionContext = Depends(get_current_session)
):
    """
    Update position and avatar of the current user

    The display name is locked after creation.
    """
    profile = await user_service.update_own_settings(session.profile, payload)
    return UserResponse.model_validate(profile)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    payload: PasswordChange, session: SessionContext = Depends(get_current_session)
):
    """
    Change the password; every session of the user is ended afterwards
    """
    await user_service.change_password(
        session.profile, payload.new_password, payload.confirm_password
    )
    return MessageResponse(message="Password telah diubah. Silakan login kembali.")
