"""Shared fixtures: an in-memory MongoDB and a FastAPI test client bound to it."""

import asyncio
import os
import sys

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from campus_chatbot.api.dependencies import get_db
from campus_chatbot.config import Config
from campus_chatbot.engines.db_engine_async import (
    OPTIONS_COLLECTION,
    SETTINGS_COLLECTION,
    AsyncDatabaseEngine,
)
from campus_chatbot.engines.seed_data import option_documents, setting_documents
from campus_chatbot.server import app


async def _connected_engine(seed_options: bool, seed_settings: bool) -> AsyncDatabaseEngine:
    engine = AsyncDatabaseEngine()
    await engine.connect(client=AsyncMongoMockClient(), db_name="campus_chatbot_test")
    if seed_options:
        await engine.db[OPTIONS_COLLECTION].insert_many(option_documents())
    if seed_settings:
        await engine.db[SETTINGS_COLLECTION].insert_many(setting_documents())
    return engine


@pytest.fixture
def db_engine():
    """Engine over a seeded in-memory database."""
    return asyncio.run(_connected_engine(seed_options=True, seed_settings=True))


@pytest.fixture
def empty_db_engine():
    """Engine over an empty in-memory database."""
    return asyncio.run(_connected_engine(seed_options=False, seed_settings=False))


def _client_for(engine) -> TestClient:
    async def override():
        return engine

    app.dependency_overrides[get_db] = override
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def api_client(db_engine):
    client = _client_for(db_engine)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def empty_api_client(empty_db_engine):
    client = _client_for(empty_db_engine)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def offline_api_client():
    """Client whose database never connected."""
    client = _client_for(AsyncDatabaseEngine())
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_config(monkeypatch):
    monkeypatch.setattr(Config, "SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
    monkeypatch.setattr(Config, "ADMIN_PASSWORD", "letmein")
    return Config
