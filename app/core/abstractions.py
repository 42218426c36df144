"""
Abstractions for favourite storage and the external recipe search API.
Enables component swapping and testability via dependency injection.
"""

from typing import TYPE_CHECKING, List, Optional, Protocol

from app.models import FavouriteInput, FavouriteRecipe, SearchResult

if TYPE_CHECKING:
    from app.services.storage import FavouriteCreateResult


class FavouriteRepository(Protocol):
    """Abstract interface for favourite recipe persistence."""

    def list(self) -> List[FavouriteRecipe]:
        """Return all favourites, newest first."""
        ...

    def create(self, favourite: FavouriteInput) -> "FavouriteCreateResult":
        """Add a favourite unless its recipeId is already stored."""
        ...

    def remove(self, favourite_id: str) -> None:
        """Delete a favourite by id. Raises NotFoundError if absent."""
        ...


class RecipeSearchSource(Protocol):
    """Abstract interface for external recipe search (e.g. Edamam)."""

    def search(self, ingredients: Optional[str], diet: Optional[str] = None) -> List[SearchResult]:
        """Search by ingredients and optional diet. Returns normalized results."""
        ...
