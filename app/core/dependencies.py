"""
FastAPI dependency injection providers.
Use Depends(get_favourite_storage), etc. in route handlers.

Instances are built once by the application lifespan and kept on app.state;
tests swap them out with app.dependency_overrides.
"""

from fastapi import Request

from app.adapters.edamam import EdamamAdapter
from app.config import Settings
from app.core.abstractions import FavouriteRepository, RecipeSearchSource
from app.services.connection import MongoConnection
from app.services.storage import FavouriteStorage


def get_favourite_storage(request: Request) -> FavouriteRepository:
    """Provide FavouriteRepository. Used as Depends(get_favourite_storage)."""
    return request.app.state.favourite_storage


def get_recipe_search(request: Request) -> RecipeSearchSource:
    """Provide RecipeSearchSource (Edamam). Used as Depends(get_recipe_search)."""
    return request.app.state.recipe_search


# --- Factories used at startup ---


def create_connection(settings: Settings) -> MongoConnection:
    return MongoConnection(settings.MONGODB_URI, settings.MONGODB_DB_NAME)


def create_favourite_storage(connection: MongoConnection) -> FavouriteStorage:
    """Create FavouriteStorage on an existing connection."""
    return FavouriteStorage(connection)


def create_recipe_search(settings: Settings) -> EdamamAdapter:
    return EdamamAdapter(
        app_id=settings.RECIPE_API_ID,
        app_key=settings.RECIPE_API_KEY,
        base_url=settings.RECIPE_API_BASE_URL,
    )
