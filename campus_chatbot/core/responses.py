"""
Response envelope helpers.

Every API response carries ``status``, ``timestamp`` and ``request_id``;
successes add ``message`` and ``data``, errors add ``message`` and
``error_code``.
"""
import secrets
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from campus_chatbot.config import Config

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def now_timestamp() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def new_request_id() -> str:
    return f"req_{secrets.token_hex(8)}"


def json_response(
    payload: Dict[str, Any],
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = dict(payload)
    body.setdefault("timestamp", now_timestamp())
    body.setdefault("request_id", new_request_id())
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def success_response(
    data: Any = None,
    message: str = "Operation completed successfully",
    status_code: int = 200,
    **extra: Any,
) -> JSONResponse:
    payload = {
        "status": "success",
        "message": message,
        "data": data if data is not None else [],
    }
    payload.update(extra)
    return json_response(payload, status_code=status_code)


def error_response(
    message: str,
    status_code: int = 500,
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    debug: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    payload: Dict[str, Any] = {
        "status": "error",
        "message": message,
        "error_code": error_code or "GENERAL_ERROR",
    }
    if details:
        payload["details"] = details
    if debug and Config.APP_ENV == "development":
        payload["debug"] = debug
    return json_response(payload, status_code=status_code, headers=headers)
