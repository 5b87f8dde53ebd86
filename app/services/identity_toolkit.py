"""
Identity Toolkit REST client

The Admin SDK cannot sign a user in with a password or exchange a refresh
token, so those two calls go to the public Firebase Auth REST API.
"""

import logging
from typing import Any, Dict

import httpx

from app.config import settings
from app.exceptions import AuthErrorCode, AuthServiceError

logger = logging.getLogger(__name__)

_SIGN_IN_ERRORS = {
    "EMAIL_NOT_FOUND": AuthErrorCode.INVALID_CREDENTIALS,
    "INVALID_PASSWORD": AuthErrorCode.INVALID_CREDENTIALS,
    "INVALID_LOGIN_CREDENTIALS": AuthErrorCode.INVALID_CREDENTIALS,
    "USER_DISABLED": AuthErrorCode.INVALID_CREDENTIALS,
    "INVALID_EMAIL": AuthErrorCode.INVALID_EMAIL,
    "TOKEN_EXPIRED": AuthErrorCode.INVALID_CREDENTIALS,
    "INVALID_REFRESH_TOKEN": AuthErrorCode.INVALID_CREDENTIALS,
    "USER_NOT_FOUND": AuthErrorCode.INVALID_CREDENTIALS,
}


def _error_code(response: httpx.Response) -> AuthErrorCode:
    try:
        message = response.json().get("error", {}).get("message", "")
    except ValueError:
        return AuthErrorCode.UNKNOWN
    # Messages look like "WEAK_PASSWORD : Password should be at least 6 characters"
    key = message.split(" ", 1)[0]
    return _SIGN_IN_ERRORS.get(key, AuthErrorCode.UNKNOWN)


class IdentityToolkitClient:
    """Password sign-in and token refresh over HTTPS"""

    def __init__(self, api_key: str = "", transport: httpx.AsyncBaseTransport = None):
        self.api_key = api_key or settings.FIREBASE_WEB_API_KEY
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=15.0)

    async def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """
        Authenticate with email and password

        Returns:
            Dictionary with id_token, refresh_token, uid and expires_in

        Raises:
            AuthServiceError: If the credentials are rejected
        """
        if not self.api_key:
            raise AuthServiceError(AuthErrorCode.UNKNOWN, "Firebase Web API key not configured")

        url = f"{settings.IDENTITY_TOOLKIT_URL}/accounts:signInWithPassword"
        payload = {"email": email, "password": password, "returnSecureToken": True}
        try:
            async with self._client() as client:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            logger.error("Sign-in request failed: %s", e)
            raise AuthServiceError(AuthErrorCode.UNKNOWN, str(e)) from e

        if response.status_code != 200:
            code = _error_code(response)
            logger.info("Sign-in rejected for %s (%s)", email, code.value)
            raise AuthServiceError(code, "Authentication failed")

        data = response.json()
        return {
            "id_token": data["idToken"],
            "refresh_token": data["refreshToken"],
            "uid": data["localId"],
            "expires_in": int(data.get("expiresIn", 3600)),
        }

    async def refresh(self, refresh_token: str) -> Dict[str, Any]:
        """Exchange a refresh token for a new ID token"""
        if not self.api_key:
            raise AuthServiceError(AuthErrorCode.UNKNOWN, "Firebase Web API key not configured")

        url = f"{settings.SECURE_TOKEN_URL}/token"
        form = {"grant_type": "refresh_token", "refresh_token": refresh_token}
        try:
            async with self._client() as client:
                response = await client.post(url, params={"key": self.api_key}, data=form)
        except httpx.HTTPError as e:
            logger.error("Token refresh request failed: %s", e)
            raise AuthServiceError(AuthErrorCode.UNKNOWN, str(e)) from e

        if response.status_code != 200:
            raise AuthServiceError(_error_code(response), "Token refresh failed")

        data = response.json()
        return {
            "id_token": data["id_token"],
            "refresh_token": data["refresh_token"],
            "uid": data["user_id"],
            "expires_in": int(data.get("expires_in", 3600)),
        }


identity_toolkit = IdentityToolkitClient()
