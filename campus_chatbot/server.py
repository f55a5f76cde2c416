"""
Campus Chatbot API - FastAPI application

Features:
- Menu option, course, internship and contact lookups for the widget
- Upsert-by-email user registry
- Append-only interaction log
- Enveloped JSON responses with machine-readable error codes
- Origin allow-list with violation logging
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from campus_chatbot import __version__
from campus_chatbot.api import admin, options, users
from campus_chatbot.config import Config
from campus_chatbot.core.errors import ApiError, StoreError
from campus_chatbot.core.responses import error_response
from campus_chatbot.engines.db_engine_async import db_engine_async
from campus_chatbot.utils.logging_utils import get_logger

logger = get_logger("server")

SECURITY_HEADERS = {
    "X-Frame-Options": "SAMEORIGIN",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

_HTTP_ERROR_CODES = {
    404: ("Resource not found", "NOT_FOUND"),
    405: ("Method not allowed", "METHOD_NOT_ALLOWED"),
}


def _debug_info(request: Request) -> dict:
    return {"request_method": request.method, "request_uri": str(request.url.path)}


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not db_engine_async.connected:
        await db_engine_async.connect()
    yield
    db_engine_async.close()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return error_response(
            exc.message,
            status_code=exc.status_code,
            error_code=exc.error_code,
            details=exc.details,
            debug=_debug_info(request),
            headers=headers,
        )

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error(f"Store error on {request.method} {request.url.path}: {exc}")
        return error_response(
            "Database error occurred",
            status_code=500,
            error_code="DATABASE_ERROR",
            debug=_debug_info(request),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        fields = [".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()]
        return error_response(
            "Invalid request data",
            status_code=400,
            error_code="VALIDATION_ERROR",
            details={"fields": [f for f in fields if f]},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        message, code = _HTTP_ERROR_CODES.get(exc.status_code, (str(exc.detail), "HTTP_ERROR"))
        details = None
        if exc.status_code == 405:
            details = {"current_method": request.method}
        return error_response(
            message,
            status_code=exc.status_code,
            error_code=code,
            details=details,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response(
            "Server error occurred",
            status_code=500,
            error_code="SERVER_ERROR",
            debug=_debug_info(request),
        )


def create_app() -> FastAPI:
    app = FastAPI(title="Campus Chatbot API", version=__version__, lifespan=lifespan)

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=Config.ALLOWED_METHODS,
        allow_headers=Config.ALLOWED_HEADERS,
        max_age=Config.CORS_MAX_AGE,
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        origin = request.headers.get("Origin")
        if origin and origin not in Config.ALLOWED_ORIGINS:
            logger.warning(
                f"CORS violation: origin={origin} path={request.url.path} "
                f"user_agent={request.headers.get('User-Agent', 'unknown')}"
            )
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    register_exception_handlers(app)

    app.include_router(options.router, prefix="/api", tags=["options"])
    app.include_router(users.router, prefix="/api", tags=["users"])
    app.include_router(admin.router, prefix="/api", tags=["admin"])
    return app


app = create_app()
