from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.config import settings
from app.core.dependencies import get_current_user
from app.models.auth import UserInfo
from app.services.cosmos_employee_store import employee_store

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    if not employee_store.initialized:
        store_status = "not_configured"
    else:
        store_status = "ok" if await employee_store.check_connection() else "error"

    return {
        "status": "healthy" if store_status in ("ok", "not_configured") else "degraded",
        "version": settings.APP_VERSION,
        "services": {"employee_store": store_status},
    }


@router.get("/protected")
async def health_protected(user: UserInfo = Depends(get_current_user)):  # noqa: B008
    return {"status": "ok", "user": user.model_dump()}


@router.get("/ready")
async def readiness_probe():
    return {"ready": True}
