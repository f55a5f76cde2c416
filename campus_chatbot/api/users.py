"""
User registry and interaction log endpoints.
"""
from fastapi import APIRouter, Depends, Request

from campus_chatbot.core.errors import RequestValidationFailed
from campus_chatbot.core.responses import success_response
from campus_chatbot.engines.db_engine_async import AsyncDatabaseEngine
from campus_chatbot.api.dependencies import client_info, get_db
from campus_chatbot.schemas import LogInteractionRequest, SaveUserRequest
from campus_chatbot.utils.logging_utils import get_logger, log_audit
from campus_chatbot.utils.validation import sanitize_input, validate_email

router = APIRouter()
logger = get_logger("api.users")


@router.post("/save-user")
async def save_user(body: SaveUserRequest, db: AsyncDatabaseEngine = Depends(get_db)):
    if body.name is None or body.email is None:
        raise RequestValidationFailed("Name and email are required", error_code="MISSING_FIELDS")

    name = sanitize_input(body.name, max_length=120)
    raw_email = body.email.strip().lower()
    if not name:
        raise RequestValidationFailed("Name and email are required", error_code="MISSING_FIELDS")
    if not validate_email(raw_email):
        raise RequestValidationFailed("Invalid email format", error_code="INVALID_EMAIL")
    email = sanitize_input(raw_email, max_length=254)

    result = await db.upsert_user(name, email)
    log_audit(
        "user_created" if result["created"] else "user_updated",
        email,
        f"user_id={result['user_id']}",
    )
    return success_response(
        data={"user_id": result["user_id"], "created": result["created"]},
        message="User saved successfully",
        user_id=result["user_id"],
        affected_rows=result["affected_rows"],
    )


@router.post("/log-interaction")
async def log_interaction(
    body: LogInteractionRequest,
    request: Request,
    db: AsyncDatabaseEngine = Depends(get_db),
):
    raw_email = str(body.user_email or "").strip().lower()
    user_email = sanitize_input(raw_email, max_length=254)
    record = {
        "user_email": user_email,
        "interaction_type": body.interaction_type,
        "option_selected": sanitize_input(body.option_selected, max_length=120),
        "user_message": sanitize_input(body.user_message),
        "bot_response": sanitize_input(body.bot_response, max_length=4000),
        "session_id": sanitize_input(body.session_id, max_length=64),
        **client_info(request),
    }
    interaction_id = await db.log_interaction(record)

    if raw_email and validate_email(raw_email):
        await db.touch_user_activity(user_email)

    return success_response(
        data={"interaction_id": interaction_id, "interaction_type": body.interaction_type},
        message="Interaction logged successfully",
        interaction_id=interaction_id,
        interaction_type=body.interaction_type,
    )
