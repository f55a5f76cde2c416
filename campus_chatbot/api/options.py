"""
Option and contact endpoints that feed the widget's menus.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from campus_chatbot.config import Config
from campus_chatbot.core.responses import success_response
from campus_chatbot.engines.db_engine_async import (
    CONTACT_PREFIX,
    PRIMARY_CONTACT_FIELDS,
    AsyncDatabaseEngine,
)
from campus_chatbot.api.dependencies import get_db
from campus_chatbot.utils.logging_utils import get_logger

router = APIRouter()
logger = get_logger("api.options")


def _category_statistics(category: str, stats: Dict[str, int], returned: int) -> Dict[str, int]:
    return {
        f"total_{category}": stats["total"],
        f"{category}_with_links": stats["with_links"],
        "returned_count": returned,
    }


async def _category_response(db: AsyncDatabaseEngine, category: str, message: str):
    options = await db.get_options(category)
    stats = await db.get_option_statistics(category)
    return success_response(
        data=options,
        message=message,
        statistics=_category_statistics(category, stats, len(options)),
    )


def build_contact_payload(rows) -> Dict[str, Any]:
    """Merge contact_* settings rows over the configured fallbacks."""
    primary = dict(Config.CONTACT_DEFAULTS)
    additional: Dict[str, Any] = {}
    loaded = []
    for row in rows:
        key = str(row.get("setting_key") or "")
        if not key.startswith(CONTACT_PREFIX):
            continue
        field = key[len(CONTACT_PREFIX):]
        if field in PRIMARY_CONTACT_FIELDS:
            primary[field] = row.get("setting_value")
            loaded.append(key)
        else:
            additional[field] = row.get("setting_value")
    return {
        "primary_contact": primary,
        "additional_contact": additional,
        "settings_loaded": loaded,
    }


@router.get("/main-options")
async def get_main_options(db: AsyncDatabaseEngine = Depends(get_db)):
    options = [
        {
            "id": row["id"],
            "text": row["text"],
            "response_text": row["response_text"],
            "sort_order": row["sort_order"],
        }
        for row in await db.get_options("main")
    ]
    return success_response(data=options, message="Main options retrieved", count=len(options))


@router.get("/courses")
async def get_courses(db: AsyncDatabaseEngine = Depends(get_db)):
    return await _category_response(db, "courses", "Courses retrieved")


@router.get("/internships")
async def get_internships(db: AsyncDatabaseEngine = Depends(get_db)):
    return await _category_response(db, "internships", "Internships retrieved")


@router.get("/contact")
async def get_contact(db: AsyncDatabaseEngine = Depends(get_db)):
    rows = await db.get_contact_settings()
    payload = build_contact_payload(rows)
    if not payload["settings_loaded"]:
        logger.info("No contact settings stored, serving configured defaults")
    return success_response(data=payload, message="Contact information retrieved")
