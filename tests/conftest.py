"""
Shared fixtures: an in-memory stand-in for Firestore and Firebase Auth.

FakeFirebase exposes the same coroutine methods as FirebaseService, so the
services can be exercised end to end without a Firebase project.
"""

import itertools
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.exceptions import AuthErrorCode, AuthServiceError
from app.main import app
from app.models.user import UserProfile, UserRole
from app.services.article_service import ArticleService
from app.services.auth_service import AuthService
from app.services.registration_service import RegistrationService
from app.services.session_service import SessionProvider
from app.services.tag_service import TagService
from app.services.user_service import UserService

SERVER_TIME = object()
BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


class FakeFirebase:
    def __init__(self):
        self.collections = {}
        self.identities = {}
        self.tokens = {}
        self.revoked = []
        self.calls = []
        self.fail = {}
        self._clock = itertools.count(1)

    # -- helpers -------------------------------------------------------
    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail:
            raise self.fail[name]

    def _stamp(self, data):
        out = {}
        for key, value in data.items():
            if value is SERVER_TIME:
                value = BASE_TIME + timedelta(seconds=next(self._clock))
            out[key] = value
        return out

    def docs(self, collection):
        return self.collections.setdefault(collection, {})

    def seed(self, collection, doc_id, data):
        self.docs(collection)[doc_id] = dict(data)

    def add_identity(self, email, password, uid=None):
        uid = uid or f"uid-{uuid.uuid4().hex[:8]}"
        self.identities[uid] = {"email": email, "password": password, "display_name": None}
        return uid

    def issue_token(self, uid, email=None):
        token = f"token-{uid}"
        self.tokens[token] = {"uid": uid, "email": email}
        return token

    # -- document store ------------------------------------------------
    @staticmethod
    def server_timestamp():
        return SERVER_TIME

    async def get_document(self, collection, doc_id):
        self._record("get_document", collection, doc_id)
        data = self.docs(collection).get(doc_id)
        return dict(data) if data is not None else None

    async def add_document(self, collection, data):
        self._record("add_document", collection)
        doc_id = uuid.uuid4().hex[:20]
        self.docs(collection)[doc_id] = self._stamp(data)
        return doc_id

    async def set_document(self, collection, doc_id, data, merge=False):
        self._record("set_document", collection, doc_id)
        stamped = self._stamp(data)
        if merge and doc_id in self.docs(collection):
            self.docs(collection)[doc_id].update(stamped)
        else:
            self.docs(collection)[doc_id] = stamped

    async def update_document(self, collection, doc_id, data):
        self._record("update_document", collection, doc_id)
        if doc_id not in self.docs(collection):
            raise LookupError(f"No document to update: {collection}/{doc_id}")
        self.docs(collection)[doc_id].update(self._stamp(data))

    async def delete_document(self, collection, doc_id):
        self._record("delete_document", collection, doc_id)
        self.docs(collection).pop(doc_id, None)

    async def list_document_ids(self, collection):
        self._record("list_document_ids", collection)
        return list(self.docs(collection))

    async def query_collection(self, collection_name, filters=None, order_by=None, direction="ASCENDING"):
        self._record("query_collection", collection_name)
        rows = [(k, dict(v)) for k, v in self.docs(collection_name).items()]
        for field, op, value in filters or []:
            assert op == "=="
            rows = [r for r in rows if r[1].get(field) == value]
        if order_by:
            # Firestore drops documents that lack the ordering field
            rows = [r for r in rows if r[1].get(order_by) is not None]
            rows.sort(key=lambda r: r[1][order_by], reverse=direction == "DESCENDING")
        return rows

    # -- auth ----------------------------------------------------------
    async def create_identity(self, email, password):
        self._record("create_identity", email)
        if any(i["email"] == email for i in self.identities.values()):
            raise AuthServiceError(AuthErrorCode.EMAIL_ALREADY_IN_USE, "EMAIL_EXISTS")
        if len(password) < 6:
            raise AuthServiceError(AuthErrorCode.WEAK_PASSWORD, "WEAK_PASSWORD")
        return self.add_identity(email, password)

    async def delete_identity(self, uid):
        self._record("delete_identity", uid)
        self.identities.pop(uid, None)

    async def set_display_name(self, uid, display_name):
        self._record("set_display_name", uid, display_name)
        self.identities[uid]["display_name"] = display_name

    async def set_password(self, uid, password):
        self._record("set_password", uid)
        self.identities[uid]["password"] = password

    async def revoke_sessions(self, uid):
        self._record("revoke_sessions", uid)
        self.revoked.append(uid)
        self.tokens = {t: c for t, c in self.tokens.items() if c["uid"] != uid}

    async def verify_id_token(self, id_token):
        self._record("verify_id_token", id_token)
        if id_token not in self.tokens:
            raise ValueError("Firebase ID token verification failed: unknown token")
        return dict(self.tokens[id_token])


class FakeIdentityToolkit:
    def __init__(self, firebase: FakeFirebase):
        self.firebase = firebase

    async def sign_in(self, email, password):
        for uid, identity in self.firebase.identities.items():
            if identity["email"] == email and identity["password"] == password:
                return {
                    "id_token": self.firebase.issue_token(uid, email),
                    "refresh_token": f"refresh-{uid}",
                    "uid": uid,
                    "expires_in": 3600,
                }
        raise AuthServiceError(AuthErrorCode.INVALID_CREDENTIALS, "INVALID_LOGIN_CREDENTIALS")

    async def refresh(self, refresh_token):
        uid = refresh_token.replace("refresh-", "", 1)
        if uid not in self.firebase.identities:
            raise AuthServiceError(AuthErrorCode.INVALID_CREDENTIALS, "INVALID_REFRESH_TOKEN")
        return {
            "id_token": self.firebase.issue_token(uid),
            "refresh_token": refresh_token,
            "uid": uid,
            "expires_in": 3600,
        }


@pytest.fixture
def fake_firebase():
    return FakeFirebase()


@pytest.fixture
def fake_identity(fake_firebase):
    return FakeIdentityToolkit(fake_firebase)


@pytest.fixture
def hook():
    """Deploy hook double; schedule() is what the save flow calls"""
    return MagicMock()


@pytest.fixture
def tag_svc(fake_firebase):
    return TagService(firebase=fake_firebase)


@pytest.fixture
def article_svc(fake_firebase, tag_svc, hook):
    return ArticleService(firebase=fake_firebase, tags=tag_svc, hook=hook)


@pytest.fixture
def user_svc(fake_firebase):
    return UserService(firebase=fake_firebase)


@pytest.fixture
def registration_svc(fake_firebase, fake_identity):
    return RegistrationService(firebase=fake_firebase, identity=fake_identity)


@pytest.fixture
def provider():
    session_provider = SessionProvider()
    session_provider.start()
    yield session_provider
    session_provider.stop()


@pytest.fixture
def auth_svc(provider, fake_firebase, fake_identity, user_svc):
    return AuthService(provider, firebase=fake_firebase, identity=fake_identity, users=user_svc)


@pytest.fixture
def admin():
    return UserProfile(
        uid="admin-uid",
        email="admin@lspi.or.id",
        display_name="Admin LSPI",
        role=UserRole.ADMIN,
        position="Ketua",
    )


@pytest.fixture
def staff():
    return UserProfile(
        uid="staff-uid",
        email="budi@lspi.or.id",
        display_name="Budi",
        role=UserRole.STAFF,
        position="Anggota",
    )


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides = {}
