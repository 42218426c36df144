"""
Edamam recipe search API adapter.
Maps ingredient + diet queries to Edamam parameters and transforms the
response hits to the SearchResult schema.
"""

import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.config import DEFAULT_RECIPE_API_BASE_URL
from app.errors import UpstreamError, ValidationError
from app.models import UNTITLED_RECIPE, SearchResult
from app.services import prometheus_metrics
from app.validation import coerce_number, coerce_positive_number

logger = logging.getLogger(__name__)

# Diet select value -> extra Edamam query params. Unknown values add nothing.
# Edamam has no low-calorie diet, low-fat stands in for it.
DIET_PARAMS: Dict[str, Dict[str, str]] = {
    "high-protein": {"diet": "high-protein"},
    "low-calorie": {"diet": "low-fat"},
    "vegetarian": {"health": "vegetarian"},
    "vegan": {"health": "vegan"},
}

# Characters encodeURIComponent leaves alone besides alphanumerics and "_.-~"
_URI_COMPONENT_SAFE = "!*'()"


def diet_params(diet: Optional[str]) -> Dict[str, str]:
    """Return the Edamam params for a diet value ({} when unrecognized)."""
    return dict(DIET_PARAMS.get(diet or "", {}))


def diet_label(diet: Optional[str]) -> str:
    """Bounded label for metrics: none, a known diet, or other."""
    if not diet:
        return "none"
    return diet if diet in DIET_PARAMS else "other"


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value]


def transform_hit_to_recipe(hit: Dict[str, Any]) -> SearchResult:
    """Transform one Edamam ``hits[]`` entry to a SearchResult."""
    recipe = hit.get("recipe") if isinstance(hit, dict) else None
    if not isinstance(recipe, dict):
        recipe = {}

    uri = recipe.get("uri") or ""
    return SearchResult(
        recipe_id=quote(str(uri), safe=_URI_COMPONENT_SAFE),
        title=recipe.get("label") or UNTITLED_RECIPE,
        image=recipe.get("image") or "",
        source_url=recipe.get("url") or "",
        calories=coerce_number(recipe.get("calories")),
        ready_in_minutes=coerce_positive_number(recipe.get("totalTime")),
        diets=_string_list(recipe.get("dietLabels"))
        + _string_list(recipe.get("healthLabels")),
    )


class EdamamAdapter:
    """Adapter for the Edamam recipes v2 API."""

    def __init__(
        self,
        app_id: str,
        app_key: str,
        base_url: str = DEFAULT_RECIPE_API_BASE_URL,
    ):
        self.app_id = app_id
        self.app_key = app_key
        self.base_url = base_url.rstrip("/")

    def build_params(self, ingredients: str, diet: Optional[str] = None) -> Dict[str, str]:
        params = {
            "type": "public",
            "q": ingredients,
            "app_id": self.app_id,
            "app_key": self.app_key,
        }
        params.update(diet_params(diet))
        return params

    def search(self, ingredients: Optional[str], diet: Optional[str] = None) -> List[SearchResult]:
        """
        Search recipes by ingredients, optionally filtered by diet.
        Raises ValidationError without calling out when ingredients is blank,
        UpstreamError on any failure of the Edamam call.
        """
        if not ingredients or not str(ingredients).strip():
            raise ValidationError("Missing 'ingredients' query param")

        params = self.build_params(ingredients, diet)
        headers = {"Edamam-Account-User": self.app_id}
        start = time.perf_counter()

        try:
            with httpx.Client() as client:
                response = client.get(self.base_url, params=params, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Error fetching recipes from Edamam: %s (status=%s, body=%s)",
                e,
                e.response.status_code,
                e.response.text,
            )
            self._record_call(start, success=False)
            raise UpstreamError("Failed to fetch recipes") from e
        except httpx.HTTPError as e:
            logger.error("Error fetching recipes from Edamam: %s", e)
            self._record_call(start, success=False)
            raise UpstreamError("Failed to fetch recipes") from e
        except ValueError as e:
            logger.error("Edamam returned a non-JSON body: %s", e)
            self._record_call(start, success=False)
            raise UpstreamError("Failed to fetch recipes") from e

        hits = (data.get("hits") or []) if isinstance(data, dict) else None
        if not isinstance(hits, list):
            logger.error("Edamam returned an unexpected body: %r", data)
            self._record_call(start, success=False)
            raise UpstreamError("Failed to fetch recipes")

        try:
            recipes = [transform_hit_to_recipe(hit) for hit in hits]
        except (PydanticValidationError, TypeError) as e:
            logger.error("Edamam returned a malformed hit: %s (body=%r)", e, data)
            self._record_call(start, success=False)
            raise UpstreamError("Failed to fetch recipes") from e

        self._record_call(start, success=True)
        return recipes

    def _record_call(self, start: float, *, success: bool) -> None:
        prometheus_metrics.record_external_duration(time.perf_counter() - start)
        prometheus_metrics.record_recipe_api(success)
