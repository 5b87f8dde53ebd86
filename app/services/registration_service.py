"""
Whitelist self-activation

An administrator first whitelists an email by creating a placeholder profile
keyed by that email (see UserService.pre_provision). The owner of the email
later registers with a password; this service then creates the auth identity
and moves the placeholder to a document keyed by the new UID.

The steps run as a saga. Identity creation comes first because the profile
lookup must run as an authenticated principal; if anything fails before the
UID-keyed profile is written, the freshly created identity is deleted again.
Two windows are not covered: a process crash after the identity exists but
before the profile is written leaves an orphaned identity (signed out by the
profile guard on first sign-in), and a crash between writing the new profile
and deleting the placeholder leaves an inert duplicate keyed by email.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.exceptions import (
    AuthErrorCode,
    AuthServiceError,
    NotWhitelistedError,
    RegistrationError,
)
from app.models.user import UserProfile, firestore_user_to_model
from app.services.firebase_service import USERS_COLLECTION, FirebaseService, firebase_service
from app.services.identity_toolkit import IdentityToolkitClient, identity_toolkit
from app.utils.validation import sanitize_email, validate_email_format, validate_new_password

logger = logging.getLogger(__name__)

REGISTRATION_MESSAGES = {
    AuthErrorCode.EMAIL_ALREADY_IN_USE: "Email ini sudah memiliki akun aktif. Silakan Login.",
    AuthErrorCode.INVALID_EMAIL: "Format email tidak diterima oleh sistem.",
    AuthErrorCode.WEAK_PASSWORD: "Password terlalu lemah (min 6 karakter).",
}
SYSTEM_ERROR_MESSAGE = "Terjadi kesalahan saat aktivasi akun."
NOT_WHITELISTED_MESSAGE = "Email Anda belum terdaftar di sistem LSPI. Silakan hubungi Admin."


def registration_error(code: AuthErrorCode) -> RegistrationError:
    message = REGISTRATION_MESSAGES.get(code)
    if message is None:
        return RegistrationError(AuthErrorCode.UNKNOWN, SYSTEM_ERROR_MESSAGE)
    return RegistrationError(code, message)


@dataclass
class ActivationResult:
    uid: str
    email: str
    profile: Optional[UserProfile]
    migrated: bool


class RegistrationService:
    def __init__(
        self,
        firebase: FirebaseService = None,
        identity: IdentityToolkitClient = None,
    ):
        self.firebase = firebase or firebase_service
        self.identity = identity or identity_toolkit

    async def activate(self, email: str, password: str, confirm_password: str) -> ActivationResult:
        """
        Claim a whitelisted account

        Raises:
            ValidationError: Local checks failed; nothing was sent anywhere
            NotWhitelistedError: The email has no profile; the identity was removed
            RegistrationError: The auth service refused the identity, or a later
                step failed and the identity was removed
        """
        clean_email = sanitize_email(email)
        validate_email_format(clean_email)
        validate_new_password(password, confirm_password)

        uid, created = await self._obtain_identity(clean_email, password)

        migrated = False
        try:
            matches = await self.firebase.query_collection(
                USERS_COLLECTION, filters=[("email", "==", clean_email)]
            )
            if not matches:
                raise NotWhitelistedError(NOT_WHITELISTED_MESSAGE)

            placeholder = next(
                ((doc_id, data) for doc_id, data in matches if doc_id != uid), None
            )
            if placeholder is None:
                logger.info("Account %s already activated for %s", uid, clean_email)
            else:
                await self._migrate(uid, clean_email, *placeholder)
                migrated = True
        except NotWhitelistedError:
            if created:
                await self._rollback_identity(uid)
            raise
        except Exception as e:
            if created:
                await self._rollback_identity(uid)
            logger.error("Activation of %s failed: %s", clean_email, e)
            raise registration_error(AuthErrorCode.UNKNOWN) from e

        if migrated:
            await self._drop_placeholder(placeholder[0])

        profile_data = await self.firebase.get_document(USERS_COLLECTION, uid)
        profile = firestore_user_to_model(profile_data, uid) if profile_data else None
        return ActivationResult(uid=uid, email=clean_email, profile=profile, migrated=migrated)

    async def _obtain_identity(self, email: str, password: str):
        """Create the identity; returns (uid, created_by_this_call)"""
        try:
            return await self.firebase.create_identity(email, password), True
        except AuthServiceError as e:
            if e.code != AuthErrorCode.EMAIL_ALREADY_IN_USE:
                raise registration_error(e.code) from e
            exists_error = e

        # The identity may come from an earlier activation; the password proves
        # ownership, and the rest of the flow is safe to repeat.
        try:
            session = await self.identity.sign_in(email, password)
        except AuthServiceError:
            raise registration_error(exists_error.code) from exists_error
        logger.info("Existing identity %s re-entered activation", session["uid"])
        return session["uid"], False

    async def _migrate(self, uid: str, email: str, placeholder_id: str, placeholder: dict) -> None:
        display_name = placeholder.get("displayName")
        if display_name:
            await self.firebase.set_display_name(uid, display_name)

        new_profile = {
            **placeholder,
            "uid": uid,
            "email": email,
            "photoURL": "",
            "createdAt": self.firebase.server_timestamp(),
        }
        await self.firebase.set_document(USERS_COLLECTION, uid, new_profile)
        logger.info("Placeholder %s migrated to %s", placeholder_id, uid)

    async def _drop_placeholder(self, placeholder_id: str) -> None:
        try:
            await self.firebase.delete_document(USERS_COLLECTION, placeholder_id)
        except Exception as e:
            # the UID-keyed profile is authoritative; the stale copy is inert
            logger.error("Could not delete placeholder %s: %s", placeholder_id, e)

    async def _rollback_identity(self, uid: str) -> None:
        try:
            await self.firebase.delete_identity(uid)
            logger.info("Rolled back identity %s", uid)
        except AuthServiceError as e:
            logger.error("Rollback of identity %s failed: %s", uid, e)


registration_service = RegistrationService()
