from datetime import timedelta

from fastapi import APIRouter, Depends

from campus_chatbot.config import Config
from campus_chatbot.core.errors import ApiError, AuthenticationError
from campus_chatbot.core.responses import success_response
from campus_chatbot.engines.db_engine_async import AsyncDatabaseEngine
from campus_chatbot.api.dependencies import get_current_admin, get_db
from campus_chatbot.schemas import AdminLoginRequest
from campus_chatbot.utils.auth_utils import (
    admin_token_ttl_hours,
    create_access_token,
    verify_admin_password,
)

router = APIRouter()


@router.post("/admin/login")
async def admin_login(request: AdminLoginRequest):
    if not str(Config.ADMIN_PASSWORD or "").strip():
        raise ApiError(
            "ADMIN_PASSWORD is not configured", error_code="ADMIN_DISABLED", status_code=503
        )
    if not verify_admin_password(request.password):
        raise AuthenticationError("Invalid admin credentials", error_code="INVALID_CREDENTIALS")

    expires = timedelta(hours=admin_token_ttl_hours())
    token = create_access_token(
        data={"sub": "admin", "name": "Administrator", "role": "admin"},
        expires_delta=expires,
    )
    return success_response(
        data={
            "access_token": token,
            "token_type": "bearer",
            "expires_in_seconds": int(expires.total_seconds()),
        },
        message="Logged in",
    )


@router.get("/admin/stats")
async def get_stats(
    _: dict = Depends(get_current_admin),
    db: AsyncDatabaseEngine = Depends(get_db),
):
    stats = await db.get_stats()
    return success_response(data=stats, message="Statistics retrieved")


# =============================================================================
# HEALTH CHECK (PUBLIC)
# =============================================================================

@router.get("/health")
async def health_check(db: AsyncDatabaseEngine = Depends(get_db)):
    """Public health check endpoint."""
    db_connected = db.connected and await db.ping()
    status = "healthy" if db_connected else "degraded"
    return success_response(
        data={"status": status, "db_connected": db_connected},
        message=f"Service {status}",
    )
