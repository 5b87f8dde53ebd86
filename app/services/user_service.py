"""
Account service: staff profile documents keyed by auth UID or placeholder email
"""

import logging
from typing import Any, Dict, List, Optional

from app.exceptions import ValidationError
from app.models.user import UserProfile, firestore_user_to_model
from app.policies import AccessPolicy
from app.schemas.user import SettingsUpdate, UserAdminUpdate, UserProvisionRequest
from app.services.firebase_service import (
    DESCENDING,
    USERS_COLLECTION,
    FirebaseService,
    firebase_service,
)
from app.utils.validation import (
    sanitize_email,
    validate_email_format,
    validate_new_password,
)

logger = logging.getLogger(__name__)


class UserService:
    """Service for profile operations"""

    def __init__(self, firebase: FirebaseService = None, policy: AccessPolicy = None):
        self.firebase = firebase or firebase_service
        self.policy = policy or AccessPolicy()

    async def get_profile(self, uid: str) -> Optional[UserProfile]:
        data = await self.firebase.get_document(USERS_COLLECTION, uid)
        if data is None:
            return None
        return firestore_user_to_model(data, uid)

    async def list_profiles(self) -> List[UserProfile]:
        """All profiles, most recently updated first"""
        try:
            docs = await self.firebase.query_collection(
                USERS_COLLECTION, order_by="updatedAt", direction=DESCENDING
            )
        except Exception as e:
            logger.error("Error fetching users: %s", e)
            return []

        profiles = []
        for doc_id, data in docs:
            try:
                profiles.append(firestore_user_to_model(data, doc_id))
            except ValueError as e:
                logger.warning("Skipping malformed profile %s: %s", doc_id, e)
        return profiles

    async def save_profile(self, uid: str, data: Dict[str, Any]) -> None:
        """
        Create or merge a profile document

        updatedAt is stamped on every save; createdAt only when the
        document did not exist yet.
        """
        if not uid:
            raise ValidationError("UID is required for saving")

        final_data = {**data, "updatedAt": self.firebase.server_timestamp()}
        existing = await self.firebase.get_document(USERS_COLLECTION, uid)
        if existing is None:
            final_data["createdAt"] = self.firebase.server_timestamp()

        await self.firebase.set_document(USERS_COLLECTION, uid, final_data, merge=True)

    async def delete_profile(self, actor: UserProfile, uid: str) -> bool:
        """
        Permanently delete a profile

        The owner's live session is ended by the profile guard the next time
        it is checked; the auth identity itself is left in place.
        """
        self.policy.require_admin(actor)
        if not uid:
            logger.error("Delete failed: UID is empty")
            return False
        await self.firebase.delete_document(USERS_COLLECTION, uid)
        logger.info("Profile %s deleted by %s", uid, actor.uid)
        return True

    async def pre_provision(self, actor: UserProfile, request: UserProvisionRequest) -> UserProfile:
        """
        Whitelist an email by creating a placeholder keyed by that email

        Raises:
            PermissionDeniedError: If the actor is not an administrator
            ValidationError: If name or email are missing or malformed
        """
        self.policy.require_admin(actor)

        email = sanitize_email(request.email)
        display_name = request.display_name.strip()
        position = (request.position or "").strip()

        if not email or not display_name:
            raise ValidationError("Nama dan Email wajib diisi!")
        validate_email_format(email)

        # one profile per email: an activated account already owns it
        matches = await self.firebase.query_collection(
            USERS_COLLECTION, filters=[("email", "==", email)]
        )
        if any(doc_id != email for doc_id, _ in matches):
            raise ValidationError("Email ini sudah memiliki akun aktif.")

        await self.save_profile(
            email,
            {
                "email": email,
                "displayName": display_name,
                "role": request.role.value,
                "position": position,
            },
        )
        logger.info("Email %s whitelisted by %s", email, actor.uid)
        return await self.get_profile(email)

    async def admin_update(
        self, actor: UserProfile, uid: str, request: UserAdminUpdate
    ) -> Optional[UserProfile]:
        self.policy.require_admin(actor)
        if await self.get_profile(uid) is None:
            return None

        changes: Dict[str, Any] = {}
        if request.display_name is not None:
            display_name = request.display_name.strip()
            if not display_name:
                raise ValidationError("Nama dan Email wajib diisi!")
            changes["displayName"] = display_name
        if request.role is not None:
            changes["role"] = request.role.value
        if request.position is not None:
            changes["position"] = request.position.strip()

        await self.save_profile(uid, changes)
        return await self.get_profile(uid)

    async def update_own_settings(self, actor: UserProfile, request: SettingsUpdate) -> UserProfile:
        """Position and avatar; the display name stays locked"""
        changes: Dict[str, Any] = {}
        if request.position is not None:
            changes["position"] = request.position.strip()
        if request.photo_url is not None:
            changes["photoURL"] = request.photo_url
        if changes:
            await self.save_profile(actor.uid, changes)
        return await self.get_profile(actor.uid)

    async def change_password(self, actor: UserProfile, password: str, confirm_password: str) -> None:
        """Set a new password, then end every session of the identity"""
        validate_new_password(password, confirm_password)
        await self.firebase.set_password(actor.uid, password)
        await self.firebase.revoke_sessions(actor.uid)
        logger.info("Password changed for %s, sessions revoked", actor.uid)


user_service = UserService()
