"""Firebase Authentication over the Identity Toolkit REST API (email + password)."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from employee_manager.core.config import Settings
from employee_manager.core.errors import AuthenticationError
from employee_manager.models.auth import Identity

logger = logging.getLogger(__name__)

_IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
_SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1/token"

_ERROR_MESSAGES: dict[str, str] = {
    "EMAIL_EXISTS": "The email address is already in use by another account.",
    "EMAIL_NOT_FOUND": "There is no account for this email address.",
    "INVALID_PASSWORD": "The password is invalid.",
    "INVALID_LOGIN_CREDENTIALS": "The email or password is incorrect.",
    "INVALID_EMAIL": "The email address is badly formatted.",
    "USER_DISABLED": "The account has been disabled.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Try again later.",
    "TOKEN_EXPIRED": "The session has expired. Please log in again.",
    "INVALID_REFRESH_TOKEN": "The session is no longer valid. Please log in again.",
    "INVALID_ID_TOKEN": "The session is no longer valid. Please log in again.",
}


def _error_message(data: Any, status: int) -> str:
    """Translate a Firebase error payload into a readable message.

    Codes may carry a suffix, e.g. ``WEAK_PASSWORD : Password should be at least 6 characters``.
    """
    code = ""
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            code = str(error.get("message", ""))
    if not code:
        return f"Identity provider returned status {status}"

    key, _, detail = code.partition(" : ")
    if key in _ERROR_MESSAGES:
        return _ERROR_MESSAGES[key]
    return detail or key.replace("_", " ").capitalize()


class IdentityService:
    def __init__(self) -> None:
        self.initialized = False
        self.api_key = ""

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        if not settings.FIREBASE_API_KEY:
            logger.warning("Firebase API key missing — IdentityService not initialized")
            return

        self.api_key = settings.FIREBASE_API_KEY
        self.initialized = True

    async def close(self) -> None:
        self.initialized = False
        self.api_key = ""

    async def sign_in(self, email: str, password: str) -> Identity:
        data = await self._post_json(
            f"{_IDENTITY_TOOLKIT_URL}/accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        logger.info("Signed in %s", data.get("email", email))
        return self._to_identity(data)

    async def sign_up(self, email: str, password: str) -> Identity:
        data = await self._post_json(
            f"{_IDENTITY_TOOLKIT_URL}/accounts:signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        logger.info("Registered %s", data.get("email", email))
        return self._to_identity(data)

    async def refresh(self, refresh_token: str) -> Identity:
        """Exchange a refresh token for a fresh identity (used to restore a session)."""
        tokens = await self._post_form(
            _SECURE_TOKEN_URL,
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
        )
        id_token = tokens.get("id_token", "")
        account = await self.lookup(id_token)
        return account.model_copy(
            update={
                "id_token": id_token,
                "refresh_token": tokens.get("refresh_token", refresh_token),
                "expires_in": int(tokens.get("expires_in", 3600)),
            }
        )

    async def lookup(self, id_token: str) -> Identity:
        data = await self._post_json(f"{_IDENTITY_TOOLKIT_URL}/accounts:lookup", {"idToken": id_token})
        users = data.get("users") or []
        if not users:
            raise AuthenticationError("No account found for this session.")
        user = users[0]
        return Identity(
            uid=user.get("localId", ""),
            email=user.get("email"),
            display_name=user.get("displayName") or None,
            id_token=id_token,
        )

    async def sign_out(self, identity: Identity | None) -> None:
        # Firebase keeps no server-side session for password sign-in; tokens simply expire.
        if identity is not None:
            logger.info("Signed out %s", identity.email or identity.uid)

    def _to_identity(self, data: dict[str, Any]) -> Identity:
        return Identity(
            uid=data.get("localId", ""),
            email=data.get("email"),
            display_name=data.get("displayName") or None,
            id_token=data.get("idToken", ""),
            refresh_token=data.get("refreshToken", ""),
            expires_in=int(data.get("expiresIn", 3600)),
        )

    async def _post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request(url, json=payload)

    async def _post_form(self, url: str, form: dict[str, str]) -> dict[str, Any]:
        return await self._request(url, data=form)

    async def _request(self, url: str, **kwargs: Any) -> dict[str, Any]:
        if not self.initialized:
            raise AuthenticationError("Identity provider not configured")

        timeout = aiohttp.ClientTimeout(total=30)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, params={"key": self.api_key}, **kwargs) as response:
                    data = await response.json(content_type=None)
                    if response.status == 200:
                        return data
                    message = _error_message(data, response.status)
                    logger.warning("Identity request failed (%s): %s", response.status, message)
                    raise AuthenticationError(message)
        except aiohttp.ClientError as err:
            logger.error("Identity provider unreachable: %s", err)
            raise AuthenticationError(f"Identity provider unreachable: {err}") from err

    async def check_connection(self) -> bool:
        return self.initialized


identity_service = IdentityService()
