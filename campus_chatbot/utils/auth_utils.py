import datetime
from hmac import compare_digest
from typing import Any, Dict, Optional

import jwt

from campus_chatbot.config import Config

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60


def _secret_key() -> str:
    secret = Config.SECRET_KEY
    if not secret:
        raise ValueError("No SECRET_KEY set for application. Please set SECRET_KEY in .env.")
    return secret


def verify_admin_password(provided: str) -> bool:
    configured = str(Config.ADMIN_PASSWORD or "").strip()
    candidate = str(provided or "")
    if not configured or not candidate:
        return False
    return compare_digest(candidate, configured)


def admin_token_ttl_hours() -> int:
    raw = str(Config.ADMIN_TOKEN_EXPIRE_HOURS or "12").strip()
    try:
        value = int(raw)
    except ValueError:
        value = 12
    return min(max(value, 1), 72)


def create_access_token(
    data: Dict[str, Any], expires_delta: Optional[datetime.timedelta] = None
) -> str:
    """Create a new JWT access token."""
    to_encode = data.copy()
    expire = datetime.datetime.now(datetime.timezone.utc) + (
        expires_delta or datetime.timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, _secret_key(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify a JWT token."""
    try:
        payload = jwt.decode(token, _secret_key(), algorithms=[ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
