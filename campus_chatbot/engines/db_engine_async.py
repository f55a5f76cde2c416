"""
Async Database Engine - MongoDB connection manager for the chatbot API.

Collections:
- chatbot_options   menu entries per category (read-only at runtime)
- app_settings      key/value settings, contact_* rows feed the contact card
- users             upsert-by-email registry of widget visitors
- chat_interactions append-only interaction log
"""
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

import motor.motor_asyncio
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from campus_chatbot.config import Config
from campus_chatbot.core.errors import StoreError
from campus_chatbot.utils.logging_utils import get_logger

logger = get_logger("db")

OPTIONS_COLLECTION = "chatbot_options"
SETTINGS_COLLECTION = "app_settings"
USERS_COLLECTION = "users"
INTERACTIONS_COLLECTION = "chat_interactions"

CONTACT_PREFIX = "contact_"
PRIMARY_CONTACT_FIELDS = ("phone", "email", "address", "hours")

_OPTION_PROJECTION = {
    "_id": 0,
    "option_id": 1,
    "option_text": 1,
    "response_text": 1,
    "link_url": 1,
    "sort_order": 1,
}


def _db_name_from_uri(uri: str) -> str:
    tail = str(uri or "").rsplit("/", 1)[-1].split("?", 1)[0]
    # mongodb://host:port has no database segment
    if not tail or ":" in tail or "@" in tail:
        return "campus_chatbot"
    return tail


def _option_row(doc: Dict[str, Any]) -> Dict[str, Any]:
    link = doc.get("link_url") or None
    return {
        "id": str(doc.get("option_id") or ""),
        "text": str(doc.get("option_text") or ""),
        "response_text": doc.get("response_text"),
        "link": link,
        "sort_order": int(doc.get("sort_order") or 0),
        "has_link": link is not None,
    }


class AsyncDatabaseEngine:
    def __init__(self):
        self.client = None
        self.db = None

    async def connect(self, client=None, db_name: Optional[str] = None):
        """Establish connection to MongoDB.

        A pre-built client may be passed in (tests hand over an in-memory one).
        """
        uri = Config.MONGO_URI
        try:
            if client is None:
                client = motor.motor_asyncio.AsyncIOMotorClient(
                    uri, serverSelectionTimeoutMS=Config.MONGO_TIMEOUT_MS
                )
                await client.admin.command("ping")

            self.client = client
            name = db_name or Config.MONGO_DB_NAME or _db_name_from_uri(uri)
            self.db = self.client[name]
            logger.info(f"[AsyncDB] Connected to MongoDB database: {name}")

            await self._ensure_runtime_indexes()
        except PyMongoError as e:
            logger.error(f"[AsyncDB][ERROR] Database connection failed: {e}")
            self.client = None
            self.db = None

    async def _ensure_runtime_indexes(self) -> None:
        """Create the indexes the API queries rely on."""
        if self.db is None:
            return
        try:
            await self.db[OPTIONS_COLLECTION].create_index(
                [("category", ASCENDING), ("is_active", ASCENDING), ("sort_order", ASCENDING)],
                name="options_category_sort",
            )
            await self.db[USERS_COLLECTION].create_index(
                [("email", ASCENDING)], name="users_email_unique", unique=True
            )
            await self.db[INTERACTIONS_COLLECTION].create_index(
                [("created_at", DESCENDING)], name="interactions_created_desc"
            )
            await self.db[SETTINGS_COLLECTION].create_index(
                [("setting_key", ASCENDING)], name="settings_key_unique", unique=True
            )
        except PyMongoError as e:
            logger.warning(f"Index ensure error: {e}")

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
        self.client = None
        self.db = None

    @property
    def connected(self) -> bool:
        return self.db is not None

    async def ping(self) -> bool:
        if self.client is None:
            return False
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError:
            return False

    def _collection(self, name: str, operation: str):
        if self.db is None:
            raise StoreError(operation, RuntimeError("database not connected"))
        return self.db[name]

    # ===========================================
    # OPTION STORE
    # ===========================================

    async def get_options(self, category: str) -> List[Dict[str, Any]]:
        """Active options for a category, by sort order then text."""
        coll = self._collection(OPTIONS_COLLECTION, f"get_options({category})")
        try:
            cursor = coll.find(
                {"category": category, "is_active": True}, _OPTION_PROJECTION
            ).sort([("sort_order", ASCENDING), ("option_text", ASCENDING)])
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StoreError(f"get_options({category})", e) from e
        return [_option_row(doc) for doc in docs]

    async def get_option_statistics(self, category: str) -> Dict[str, int]:
        coll = self._collection(OPTIONS_COLLECTION, f"get_option_statistics({category})")
        base = {"category": category, "is_active": True}
        try:
            total = await coll.count_documents(base)
            with_links = await coll.count_documents(
                {**base, "link_url": {"$nin": [None, ""]}}
            )
        except PyMongoError as e:
            raise StoreError(f"get_option_statistics({category})", e) from e
        return {"total": int(total), "with_links": int(with_links)}

    # ===========================================
    # CONTACT STORE
    # ===========================================

    async def get_contact_settings(self) -> List[Dict[str, Any]]:
        """Active ``contact_*`` settings rows."""
        coll = self._collection(SETTINGS_COLLECTION, "get_contact_settings")
        try:
            cursor = coll.find(
                {"setting_key": {"$regex": f"^{re.escape(CONTACT_PREFIX)}"}, "is_active": True},
                {"_id": 0, "setting_key": 1, "setting_value": 1, "description": 1},
            ).sort("setting_key", ASCENDING)
            return await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StoreError("get_contact_settings", e) from e

    # ===========================================
    # USER REGISTRY
    # ===========================================

    async def upsert_user(self, name: str, email: str) -> Dict[str, Any]:
        """Insert a new user or refresh an existing one, keyed by email.

        Existing users get their name and last_active refreshed and their
        interaction counter incremented.
        """
        coll = self._collection(USERS_COLLECTION, "upsert_user")
        now = datetime.now()
        update = {
            "$set": {"name": name, "last_active": now},
            "$inc": {"total_interactions": 1},
            "$setOnInsert": {"created_at": now},
        }
        try:
            try:
                result = await coll.update_one({"email": email}, update, upsert=True)
            except DuplicateKeyError:
                # a concurrent first save inserted the row; update it instead
                result = await coll.update_one({"email": email}, update)

            if result.upserted_id is not None:
                return {
                    "user_id": str(result.upserted_id),
                    "created": True,
                    "affected_rows": 1,
                }
            existing = await coll.find_one({"email": email}, {"_id": 1})
        except PyMongoError as e:
            raise StoreError("upsert_user", e) from e

        if existing is None:
            raise StoreError("upsert_user", RuntimeError("user row vanished after update"))
        return {
            "user_id": str(existing["_id"]),
            "created": False,
            "affected_rows": int(result.modified_count),
        }

    async def touch_user_activity(self, email: str) -> bool:
        """Bump a known user's interaction counter; unknown emails are ignored."""
        coll = self._collection(USERS_COLLECTION, "touch_user_activity")
        try:
            result = await coll.update_one(
                {"email": email},
                {"$set": {"last_active": datetime.now()}, "$inc": {"total_interactions": 1}},
            )
        except PyMongoError as e:
            raise StoreError("touch_user_activity", e) from e
        return result.matched_count > 0

    # ===========================================
    # INTERACTION LOG
    # ===========================================

    async def log_interaction(self, record: Dict[str, Any]) -> str:
        coll = self._collection(INTERACTIONS_COLLECTION, "log_interaction")
        document = dict(record)
        document.setdefault("created_at", datetime.now())
        try:
            result = await coll.insert_one(document)
        except PyMongoError as e:
            raise StoreError("log_interaction", e) from e
        return str(result.inserted_id)

    # ===========================================
    # ANALYTICS
    # ===========================================

    async def get_stats(self) -> Dict[str, Any]:
        if self.db is None:
            raise StoreError("get_stats", RuntimeError("database not connected"))
        try:
            total_users = await self.db[USERS_COLLECTION].count_documents({})
            total_interactions = await self.db[INTERACTIONS_COLLECTION].count_documents({})

            type_rows = await self.db[INTERACTIONS_COLLECTION].aggregate([
                {"$group": {"_id": "$interaction_type", "count": {"$sum": 1}}},
                {"$sort": {"count": -1}},
            ]).to_list(length=None)

            option_rows = await self.db[OPTIONS_COLLECTION].aggregate([
                {"$match": {"is_active": True}},
                {"$group": {"_id": "$category", "count": {"$sum": 1}}},
            ]).to_list(length=None)

            selected_rows = await self.db[INTERACTIONS_COLLECTION].aggregate([
                {"$match": {"option_selected": {"$nin": [None, ""]}}},
                {"$group": {"_id": "$option_selected", "count": {"$sum": 1}}},
                {"$sort": {"count": -1}},
                {"$limit": 10},
            ]).to_list(length=None)
        except PyMongoError as e:
            raise StoreError("get_stats", e) from e

        return {
            "total_users": int(total_users),
            "total_interactions": int(total_interactions),
            "interactions_by_type": {str(r["_id"]): r["count"] for r in type_rows},
            "options_by_category": {str(r["_id"]): r["count"] for r in option_rows},
            "top_options": {str(r["_id"]): r["count"] for r in selected_rows},
        }

# Singleton
db_engine_async = AsyncDatabaseEngine()
