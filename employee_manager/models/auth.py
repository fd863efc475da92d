"""Authentication models for Firebase identities and ID tokens."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Identity(BaseModel):
    """A signed-in Firebase account together with its tokens."""

    uid: str
    email: str | None = None
    display_name: str | None = None
    id_token: str = ""
    refresh_token: str = ""
    expires_in: int = 3600


class UserInfo(BaseModel):
    id: str | None = None
    name: str | None = None
    email: str | None = None


class CredentialsRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    user: UserInfo
    id_token: str
    refresh_token: str
    expires_in: int
