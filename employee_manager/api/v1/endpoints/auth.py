from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from employee_manager.core.dependencies import get_current_user
from employee_manager.core.errors import AuthenticationError
from employee_manager.models.auth import AuthResponse, CredentialsRequest, Identity, UserInfo
from employee_manager.services.identity_service import identity_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _to_response(identity: Identity) -> AuthResponse:
    return AuthResponse(
        user=UserInfo(id=identity.uid, name=identity.display_name, email=identity.email),
        id_token=identity.id_token,
        refresh_token=identity.refresh_token,
        expires_in=identity.expires_in,
    )


@router.post("/login", response_model=AuthResponse)
async def login(credentials: CredentialsRequest):
    try:
        identity = await identity_service.sign_in(credentials.email, credentials.password)
    except AuthenticationError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Failed to log in: {err}",
        ) from err
    return _to_response(identity)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(credentials: CredentialsRequest):
    try:
        identity = await identity_service.sign_up(credentials.email, credentials.password)
    except AuthenticationError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Failed to create an account: {err}",
        ) from err
    return _to_response(identity)


@router.get("/me", response_model=UserInfo)
async def me(user: UserInfo = Depends(get_current_user)):  # noqa: B008
    return user
