from fastapi import Request

from campus_chatbot.core.errors import ApiError, AuthenticationError
from campus_chatbot.engines.db_engine_async import AsyncDatabaseEngine, db_engine_async
from campus_chatbot.utils.auth_utils import decode_access_token

async def get_db() -> AsyncDatabaseEngine:
    return db_engine_async

async def get_current_admin(request: Request) -> dict:
    auth_header = str(request.headers.get("Authorization") or "").strip()
    if not auth_header.startswith("Bearer "):
        raise AuthenticationError()

    payload = decode_access_token(auth_header.split(" ", 1)[1].strip())
    if not payload:
        raise AuthenticationError("Invalid or expired token", error_code="INVALID_TOKEN")

    role = str(payload.get("role") or "").strip().lower()
    if role != "admin":
        raise ApiError("Admin role required", error_code="FORBIDDEN", status_code=403)
    return payload

def client_info(request: Request) -> dict:
    """Caller address and user agent, honouring the first X-Forwarded-For hop."""
    forwarded = str(request.headers.get("X-Forwarded-For") or "").strip()
    if forwarded:
        ip_address = forwarded.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else ""
    return {
        "ip_address": ip_address,
        "user_agent": str(request.headers.get("User-Agent") or ""),
    }
