"""
Favourite input validation and normalization.

Used by the favourite record store (construction path for stored documents)
and the Edamam adapter (numeric coercion of upstream fields).
"""

import math
from datetime import datetime
from typing import Any, Optional

from app.errors import ValidationError
from app.models import FavouriteInput


def coerce_number(value: Any) -> Optional[float]:
    """Return value if it is a real finite number, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def coerce_positive_number(value: Any) -> Optional[float]:
    number = coerce_number(value)
    if number is None or number <= 0:
        return None
    return number


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def require_favourite_fields(favourite: FavouriteInput) -> None:
    """Raise ValidationError unless recipeId and title are both present."""
    if _is_blank(favourite.recipe_id) or _is_blank(favourite.title):
        raise ValidationError("Missing recipeId or title")


def build_favourite_document(favourite: FavouriteInput, created_at: datetime) -> dict:
    """
    Build the document to insert for a new favourite.

    Missing image/sourceUrl become "", missing or zero calories/readyInMinutes
    become None and a non-list diets becomes []. Call
    require_favourite_fields first.
    """
    diets = favourite.diets if isinstance(favourite.diets, list) else []
    return {
        "recipeId": favourite.recipe_id,
        "title": favourite.title,
        "image": favourite.image or "",
        "sourceUrl": favourite.source_url or "",
        "calories": coerce_number(favourite.calories) or None,
        "readyInMinutes": coerce_number(favourite.ready_in_minutes) or None,
        "diets": [d for d in diets if isinstance(d, str)],
        "createdAt": created_at,
    }
