"""
Session state provider and profile guard

The provider is the single channel through which session changes are
announced. It is created and started by the application lifespan and handed
to its dependents explicitly; nothing here is a module-level singleton.
"""

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from app.exceptions import AuthServiceError, SessionRevokedError
from app.models.user import UserProfile
from app.services.firebase_service import FirebaseService, firebase_service
from app.services.user_service import UserService, user_service

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    REVOKED = "revoked"


@dataclass(frozen=True)
class SessionEvent:
    uid: str
    state: SessionState
    profile: Optional[UserProfile] = None


@dataclass
class SessionContext:
    """The authenticated identity and its profile for one request"""

    uid: str
    email: str
    profile: UserProfile
    claims: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.profile.is_admin


Listener = Callable[[SessionEvent], Union[None, Awaitable[None]]]


class SessionProvider:
    """Publishes session changes to subscribed listeners"""

    def __init__(self):
        self._listeners: List[Listener] = []
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        self._started = True
        logger.info("Session provider started")

    def stop(self) -> None:
        self._listeners.clear()
        self._started = False
        logger.info("Session provider stopped")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and return the function that removes it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def publish(self, event: SessionEvent) -> None:
        if not self._started:
            logger.debug("Dropping %s for %s, provider not started", event.state.value, event.uid)
            return
        for listener in list(self._listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("Session listener %r failed: %s", listener, e)


class ProfileGuard:
    """
    Turns a verified identity into a SessionContext.

    An identity without a profile document means the account was deleted by
    an administrator (or its activation never finished): the identity is
    signed out and the request is refused.
    """

    def __init__(
        self,
        provider: SessionProvider,
        users: UserService = None,
        firebase: FirebaseService = None,
    ):
        self.provider = provider
        self.users = users or user_service
        self.firebase = firebase or firebase_service

    async def resolve(self, claims: Dict[str, Any]) -> SessionContext:
        uid = claims.get("uid") or claims.get("sub")
        if not uid:
            raise SessionRevokedError("Token carries no user id")

        profile = await self.users.get_profile(uid)
        if profile is None:
            logger.warning("Identity %s has no profile, forcing sign-out", uid)
            try:
                await self.firebase.revoke_sessions(uid)
            except AuthServiceError as e:
                # the request is refused either way
                logger.error("Could not revoke sessions of %s: %s", uid, e)
            await self.provider.publish(SessionEvent(uid=uid, state=SessionState.REVOKED))
            raise SessionRevokedError("Account no longer has access")

        return SessionContext(
            uid=uid,
            email=claims.get("email") or profile.email,
            profile=profile,
            claims=claims,
        )
