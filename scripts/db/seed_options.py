"""
Seed the option store and contact settings.

Usage:
    python scripts/db/seed_options.py
    python scripts/db/seed_options.py --dry-run

Rows are upserted on (category, option_id) and setting_key, so the script can
be re-run after editing campus_chatbot/engines/seed_data.py.
"""
import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from dotenv import load_dotenv
from pymongo import MongoClient
from pymongo.errors import PyMongoError

load_dotenv()

from campus_chatbot.config import Config
from campus_chatbot.engines.db_engine_async import (
    OPTIONS_COLLECTION,
    SETTINGS_COLLECTION,
    _db_name_from_uri,
)
from campus_chatbot.engines.seed_data import option_documents, setting_documents


def seed(db, dry_run: bool = False) -> dict:
    counts = {"options": 0, "settings": 0}
    for doc in option_documents():
        if not dry_run:
            db[OPTIONS_COLLECTION].update_one(
                {"category": doc["category"], "option_id": doc["option_id"]},
                {"$set": doc},
                upsert=True,
            )
        counts["options"] += 1
    for doc in setting_documents():
        if not dry_run:
            db[SETTINGS_COLLECTION].update_one(
                {"setting_key": doc["setting_key"]}, {"$set": doc}, upsert=True
            )
        counts["settings"] += 1
    return counts


def main():
    parser = argparse.ArgumentParser(description="Seed chatbot options and contact settings")
    parser.add_argument("--dry-run", action="store_true", help="Count rows without writing")
    args = parser.parse_args()

    try:
        client = MongoClient(Config.MONGO_URI, serverSelectionTimeoutMS=Config.MONGO_TIMEOUT_MS)
        db = client[Config.MONGO_DB_NAME or _db_name_from_uri(Config.MONGO_URI)]
        counts = seed(db, dry_run=args.dry_run)
    except PyMongoError as e:
        print(f"[Seed][ERROR] {e}")
        return 1

    verb = "Would upsert" if args.dry_run else "Upserted"
    print(f"[Seed] {verb} {counts['options']} options and {counts['settings']} settings in {db.name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
