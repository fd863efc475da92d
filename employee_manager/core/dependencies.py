from __future__ import annotations

import logging

from fastapi import Header, HTTPException, status

from employee_manager.core.auth import validate_token
from employee_manager.core.config import settings
from employee_manager.models.auth import UserInfo

logger = logging.getLogger(__name__)


async def get_current_user(authorization: str | None = Header(None)) -> UserInfo:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization.split(" ", 1)[1]

    try:
        payload = validate_token(token, settings.FIREBASE_PROJECT_ID)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Token validation error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    return UserInfo(
        id=payload.get("user_id") or payload.get("sub"),
        name=payload.get("name"),
        email=payload.get("email"),
    )
