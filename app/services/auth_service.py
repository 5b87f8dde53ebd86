"""
Authentication service handling sign-in, token refresh and sign-out
"""

import logging
from typing import Any, Dict

from app.services.firebase_service import FirebaseService, firebase_service
from app.services.identity_toolkit import IdentityToolkitClient, identity_toolkit
from app.services.session_service import (
    ProfileGuard,
    SessionContext,
    SessionEvent,
    SessionProvider,
    SessionState,
)
from app.services.user_service import UserService, user_service

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations"""

    def __init__(
        self,
        provider: SessionProvider,
        firebase: FirebaseService = None,
        identity: IdentityToolkitClient = None,
        users: UserService = None,
    ):
        self.provider = provider
        self.firebase = firebase or firebase_service
        self.identity = identity or identity_toolkit
        self.guard = ProfileGuard(provider, users=users or user_service, firebase=self.firebase)

    async def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """
        Authenticate with email and password

        Returns:
            Dictionary containing the Firebase session and the SessionContext

        Raises:
            AuthServiceError: If the credentials are rejected
            SessionRevokedError: If the identity has no profile
        """
        session = await self.identity.sign_in(email.strip(), password)
        context = await self.guard.resolve({"uid": session["uid"], "email": email.strip()})
        await self.provider.publish(
            SessionEvent(uid=context.uid, state=SessionState.SIGNED_IN, profile=context.profile)
        )
        return {"session": session, "context": context}

    async def refresh(self, refresh_token: str) -> Dict[str, Any]:
        """Exchange a refresh token; the profile guard runs again"""
        session = await self.identity.refresh(refresh_token)
        context = await self.guard.resolve({"uid": session["uid"]})
        return {"session": session, "context": context}

    async def authenticate(self, id_token: str) -> SessionContext:
        """
        Verify a Firebase ID token and load the caller's profile

        Raises:
            ValueError: If the token is invalid, expired or revoked
            SessionRevokedError: If the identity has no profile
        """
        claims = await self.firebase.verify_id_token(id_token)
        return await self.guard.resolve(claims)

    async def sign_out(self, context: SessionContext) -> None:
        await self.firebase.revoke_sessions(context.uid)
        await self.provider.publish(SessionEvent(uid=context.uid, state=SessionState.SIGNED_OUT))
        logger.info("User %s signed out", context.uid)
