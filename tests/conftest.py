"""
Shared fixtures: settings from a test environment, an in-memory stand-in for
the Motor database, and an HTTPX client bound to a fresh app.
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set before Settings() is built so no real cluster is targeted
os.environ["MONGO_URI"] = "mongodb://localhost:27017/mflix_test"
os.environ["DATABASE_NAME"] = "mflix_test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["EMBEDDING_DIMENSIONS"] = "4"

from app.config.settings import Settings  # noqa: E402
from app.db.client import get_database  # noqa: E402
from app.main import create_app  # noqa: E402


def make_cursor(docs=None):
    """Chainable cursor: find().sort().skip().limit().to_list()."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=list(docs or []))
    return cursor


def make_collection():
    collection = MagicMock()
    collection.find.return_value = make_cursor()
    collection.aggregate.return_value = make_cursor()
    collection.count_documents = AsyncMock(return_value=0)
    collection.distinct = AsyncMock(return_value=[])
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.update_one = AsyncMock()
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.find_one_and_delete = AsyncMock(return_value=None)
    return collection


class FakeDatabase:
    """Hands out one mock collection per name, like ``client[db][name]``."""

    def __init__(self):
        self.collections = {}
        self.command = AsyncMock(return_value={"ok": 1})

    def __getitem__(self, name):
        if name not in self.collections:
            collection = make_collection()
            collection.name = name
            self.collections[name] = collection
        return self.collections[name]


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def app(settings, fake_db):
    application = create_app(settings)
    application.dependency_overrides[get_database] = lambda: fake_db
    return application


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client
