"""
FastAPI dependency injection for authentication and services
"""

import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.exceptions import SessionRevokedError
from app.models.user import UserProfile
from app.services.auth_service import AuthService
from app.services.session_service import SessionContext

logger = logging.getLogger(__name__)

# Security scheme for Firebase ID tokens
security = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


async def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionContext:
    """
    Dependency to get the session of the caller from the Firebase ID token

    Raises:
        HTTPException: If the token is invalid or the profile is gone
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or not credentials.credentials:
        raise credentials_exception

    try:
        return await auth_service.authenticate(credentials.credentials)
    except SessionRevokedError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Akun Anda tidak lagi memiliki akses. Silakan hubungi Admin.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except ValueError as e:
        logger.debug("Token rejected: %s", e)
        raise credentials_exception


async def get_current_user(
    session: SessionContext = Depends(get_current_session),
) -> UserProfile:
    """The profile of the caller"""
    return session.profile


async def require_admin(
    current_user: UserProfile = Depends(get_current_user),
) -> UserProfile:
    """Require user to be an admin"""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions. Required role: admin",
        )
    return current_user
