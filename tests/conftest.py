"""
Test fixtures for Meal Planner tests.
Uses FastAPI dependency overrides for testable, isolated components.
"""

import os
from datetime import datetime, timedelta
from unittest.mock import MagicMock

# Required configuration must exist before app.main is imported
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("RECIPE_API_ID", "test-app-id")
os.environ.setdefault("RECIPE_API_KEY", "test-app-key")

import mongomock
import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_favourite_storage, get_recipe_search
from app.main import app
from app.services.connection import MongoConnection
from app.services.storage import FAVOURITES_COLLECTION, FavouriteStorage


class FakeClock:
    """Deterministic clock: each call is one second after the previous one."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current += timedelta(seconds=1)
        return now


@pytest.fixture
def connection():
    """MongoConnection backed by an in-memory mongomock client."""
    conn = MongoConnection(
        "mongodb://localhost:27017",
        "mealplanner_test",
        client_factory=mongomock.MongoClient,
    )
    conn.get_database().drop_collection(FAVOURITES_COLLECTION)
    yield conn
    conn.get_database().drop_collection(FAVOURITES_COLLECTION)
    conn.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage(connection, clock):
    """Fresh FavouriteStorage for each test."""
    store = FavouriteStorage(connection, clock=clock)
    store.ensure_indexes()
    return store


@pytest.fixture
def mock_search():
    """Mock recipe search source (Edamam). Returns no recipes by default."""
    mock = MagicMock()
    mock.search.return_value = []
    return mock


@pytest.fixture
def client(storage, mock_search):
    """Test client with dependency overrides for storage and recipe search."""
    def get_storage():
        return storage

    def get_search():
        return mock_search

    app.dependency_overrides[get_favourite_storage] = get_storage
    app.dependency_overrides[get_recipe_search] = get_search

    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sample_favourite_data():
    """Favourite payload as the browser client posts it"""
    return {
        "recipeId": "http%3A%2F%2Fwww.edamam.com%2Fontologies%2Fedamam.owl%23recipe_abc123",
        "title": "Chicken Soup",
        "image": "https://example.com/soup.jpg",
        "sourceUrl": "https://example.com/soup",
        "calories": 512.4,
        "readyInMinutes": 45,
        "diets": ["High-Protein", "Dairy-Free"],
    }
