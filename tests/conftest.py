"""
pytest configuration and shared fixtures.

Stores run against mongomock-motor, an in-memory stand-in for the Motor driver.
"""

import os

# Must be set before core.config / core.logger are imported
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ENVIRONMENT", "testing")

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

from repositories.task_store import TaskStore
from repositories.user_store import UserStore


@pytest.fixture
def mock_db():
    """Fresh in-memory database per test."""
    client = AsyncMongoMockClient()
    return client["tidytasks_test"]


@pytest.fixture
def task_store(mock_db) -> TaskStore:
    return TaskStore.from_database(mock_db)


@pytest_asyncio.fixture
async def user_store(mock_db) -> UserStore:
    store = UserStore.from_database(mock_db)
    await store.ensure_indexes()
    return store


@pytest.fixture
def failing_collection():
    """Collection double whose calls can be set to raise backend errors."""
    collection = MagicMock()
    collection.name = "broken"
    collection.find_one = AsyncMock()
    collection.find_one_and_update = AsyncMock()
    collection.find_one_and_delete = AsyncMock()
    collection.insert_one = AsyncMock()
    collection.count_documents = AsyncMock()
    collection.create_index = AsyncMock()
    return collection


@pytest.fixture
def sample_task_data() -> dict:
    return {"title": "Buy milk", "done": False}


@pytest.fixture
def sample_user_data() -> dict:
    return {
        "first_name": "Ana",
        "last_name": "García",
        "age": 29,
        "email": "ana@example.com",
        "password": "$2b$10$hashedsecret",
    }
