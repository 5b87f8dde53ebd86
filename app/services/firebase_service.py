"""
Firebase service for Firestore and Authentication operations
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials, exceptions as firebase_exceptions, firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from app.config import settings
from app.exceptions import AuthErrorCode, AuthServiceError

logger = logging.getLogger(__name__)

ARTICLES_COLLECTION = "articles"
USERS_COLLECTION = "users"
TAGS_COLLECTION = "tags"

ASCENDING = "ASCENDING"
DESCENDING = "DESCENDING"


def map_auth_error(exc: Exception) -> AuthErrorCode:
    """Categorize an Admin SDK failure by its known error codes."""
    if isinstance(exc, firebase_auth.EmailAlreadyExistsError):
        return AuthErrorCode.EMAIL_ALREADY_IN_USE
    text = str(exc)
    lowered = text.lower()
    # Argument validation in the SDK raises plain ValueError before any request
    if isinstance(exc, ValueError):
        if "password" in lowered:
            return AuthErrorCode.WEAK_PASSWORD
        if "email" in lowered:
            return AuthErrorCode.INVALID_EMAIL
    if "INVALID_EMAIL" in text:
        return AuthErrorCode.INVALID_EMAIL
    if "WEAK_PASSWORD" in text:
        return AuthErrorCode.WEAK_PASSWORD
    if "EMAIL_EXISTS" in text or "DUPLICATE_EMAIL" in text:
        return AuthErrorCode.EMAIL_ALREADY_IN_USE
    return AuthErrorCode.UNKNOWN


class FirebaseService:
    """Service for Firebase operations"""

    _instance = None

    def __new__(cls):
        """Singleton pattern to ensure only one Firebase instance"""
        if cls._instance is None:
            cls._instance = super(FirebaseService, cls).__new__(cls)
            cls._instance._db = None
        return cls._instance

    @property
    def db(self):
        """Firestore client, created on first use"""
        if self._db is None:
            self._initialize_firebase()
            self._db = firestore.client()
        return self._db

    def _initialize_firebase(self):
        """Initialize Firebase Admin SDK with credentials"""
        try:
            # Check if already initialized
            firebase_admin.get_app()
            logger.debug("Firebase already initialized")
            return
        except ValueError:
            pass

        options = {}
        if settings.FIREBASE_PROJECT_ID:
            options["projectId"] = settings.FIREBASE_PROJECT_ID

        try:
            if settings.DEV_MODE and settings.FIREBASE_EMULATOR_HOST:
                # Use emulator for development
                os.environ["FIRESTORE_EMULATOR_HOST"] = settings.FIREBASE_EMULATOR_HOST
                if settings.FIREBASE_AUTH_EMULATOR_HOST:
                    os.environ["FIREBASE_AUTH_EMULATOR_HOST"] = settings.FIREBASE_AUTH_EMULATOR_HOST
                firebase_admin.initialize_app(options=options or None)
                logger.info(
                    "Firebase initialized with emulator: %s", settings.FIREBASE_EMULATOR_HOST
                )
                return

            if settings.FIREBASE_CREDENTIALS_JSON:
                try:
                    cred = credentials.Certificate(
                        json.loads(settings.FIREBASE_CREDENTIALS_JSON))
                except json.JSONDecodeError as e:
                    logger.error("Error parsing FIREBASE_CREDENTIALS_JSON: %s", e)
                    raise
                logger.info(
                    "Firebase initialized with credentials from FIREBASE_CREDENTIALS_JSON")
            else:
                # Fallback to file path
                cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
                logger.info(
                    "Firebase initialized with credentials from %s",
                    settings.FIREBASE_CREDENTIALS_PATH,
                )

            firebase_admin.initialize_app(cred, options or None)
        except Exception as e:
            logger.error("Firebase Admin SDK initialization failed: %s", e)
            raise  # Re-raise to prevent the app from running with a broken Firebase setup

    # ============================================
    # Document store
    # ============================================

    @staticmethod
    def server_timestamp():
        """Sentinel replaced by the server's commit time"""
        return firestore.SERVER_TIMESTAMP

    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a single document

        Returns:
            The document data, or None when it does not exist
        """
        if not doc_id:
            return None
        doc = await asyncio.to_thread(
            self.db.collection(collection).document(doc_id).get)
        if not doc.exists:
            return None
        return doc.to_dict()

    async def add_document(self, collection: str, data: Dict[str, Any]) -> str:
        """Create a document with a store-assigned id and return the id"""
        doc_ref = self.db.collection(collection).document()
        await asyncio.to_thread(doc_ref.set, data)
        return doc_ref.id

    async def set_document(
        self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False
    ) -> None:
        doc_ref = self.db.collection(collection).document(doc_id)
        await asyncio.to_thread(doc_ref.set, data, merge=merge)

    async def update_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Partial update; fails if the document does not exist"""
        doc_ref = self.db.collection(collection).document(doc_id)
        await asyncio.to_thread(doc_ref.update, data)

    async def delete_document(self, collection: str, doc_id: str) -> None:
        """Permanent delete. Deleting a missing document is a no-op."""
        doc_ref = self.db.collection(collection).document(doc_id)
        await asyncio.to_thread(doc_ref.delete)

    async def list_document_ids(self, collection: str) -> List[str]:
        def _ids():
            return [doc.id for doc in self.db.collection(collection).stream()]

        return await asyncio.to_thread(_ids)

    async def query_collection(
        self,
        collection_name: str,
        filters: Optional[List[tuple]] = None,
        order_by: Optional[str] = None,
        direction: str = ASCENDING,
    ) -> List[Tuple[str, Dict[str, Any]]]:
        """
        Queries a Firestore collection with filters and ordering.

        Args:
            collection_name: The name of the Firestore collection.
            filters: A list of (field, op, value) tuples, or a dict of
                     {field: value} which defaults to '==' comparison.
            order_by: The field to order the results by.
            direction: 'ASCENDING' or 'DESCENDING'.

        Returns:
            A list of (document_id, document_data) tuples.
        """
        query = self.db.collection(collection_name)

        if filters:
            if isinstance(filters, dict):
                filters = [(k, "==", v) for k, v in filters.items()]
            for f in filters:
                if len(f) != 3:
                    raise ValueError(
                        f"Invalid filter format: {f}. Expected (field, op, value)")
                query = query.where(filter=FieldFilter(f[0], f[1], f[2]))

        if order_by:
            query = query.order_by(order_by, direction=direction)

        def _get_stream_data(q):
            return [(doc.id, doc.to_dict()) for doc in q.stream()]

        return await asyncio.to_thread(_get_stream_data, query)

    # ============================================
    # Auth identities
    # ============================================

    async def create_identity(self, email: str, password: str) -> str:
        """Create a Firebase Auth user and return its UID"""
        self._initialize_firebase()
        try:
            user = await asyncio.to_thread(
                firebase_auth.create_user, email=email, password=password)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            code = map_auth_error(e)
            logger.warning("create_identity failed for %s: %s (%s)", email, e, code.value)
            raise AuthServiceError(code, str(e)) from e
        return user.uid

    async def delete_identity(self, uid: str) -> None:
        self._initialize_firebase()
        try:
            await asyncio.to_thread(firebase_auth.delete_user, uid)
        except firebase_auth.UserNotFoundError:
            logger.info("Identity %s already absent", uid)
        except firebase_exceptions.FirebaseError as e:
            raise AuthServiceError(map_auth_error(e), str(e)) from e

    async def set_display_name(self, uid: str, display_name: str) -> None:
        self._initialize_firebase()
        try:
            await asyncio.to_thread(
                firebase_auth.update_user, uid, display_name=display_name)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise AuthServiceError(map_auth_error(e), str(e)) from e

    async def set_password(self, uid: str, password: str) -> None:
        self._initialize_firebase()
        try:
            await asyncio.to_thread(firebase_auth.update_user, uid, password=password)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise AuthServiceError(map_auth_error(e), str(e)) from e

    async def revoke_sessions(self, uid: str) -> None:
        """Sign the identity out everywhere by revoking its refresh tokens"""
        self._initialize_firebase()
        try:
            await asyncio.to_thread(firebase_auth.revoke_refresh_tokens, uid)
        except firebase_auth.UserNotFoundError:
            logger.info("Cannot revoke sessions of missing identity %s", uid)
        except firebase_exceptions.FirebaseError as e:
            raise AuthServiceError(map_auth_error(e), str(e)) from e

    async def verify_id_token(self, id_token: str) -> Dict[str, Any]:
        """
        Verify a Firebase ID token, rejecting revoked sessions

        Raises:
            ValueError: If the token is invalid, expired or revoked
        """
        self._initialize_firebase()
        try:
            return await asyncio.to_thread(
                firebase_auth.verify_id_token, id_token, check_revoked=True)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise ValueError(f"Firebase ID token verification failed: {e}") from e


# Global firebase service instance
firebase_service = FirebaseService()
