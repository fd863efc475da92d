from __future__ import annotations

from fastapi import APIRouter, Depends

from employee_manager.core.config import settings
from employee_manager.core.dependencies import get_current_user
from employee_manager.models.auth import UserInfo
from employee_manager.services.employee_store import employee_store
from employee_manager.services.identity_service import identity_service

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    services: dict[str, str] = {}

    try:
        if employee_store.initialized:
            ok = await employee_store.check_connection()
            services["cosmos_db"] = "ok" if ok else "error"
        else:
            services["cosmos_db"] = "not_configured"
    except Exception:
        services["cosmos_db"] = "error"

    services["firebase_auth"] = "ok" if identity_service.initialized else "not_configured"

    all_ok = all(v in ("ok", "not_configured") for v in services.values())

    return {
        "status": "healthy" if all_ok else "degraded",
        "version": settings.APP_VERSION,
        "services": services,
    }


@router.get("/protected")
async def health_protected(user: UserInfo = Depends(get_current_user)):
    return {"status": "ok", "user": user.model_dump()}


@router.get("/ready")
async def readiness_probe():
    return {"ready": True}
