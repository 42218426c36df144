from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.adapters.edamam import diet_label
from app.core.abstractions import FavouriteRepository, RecipeSearchSource
from app.core.dependencies import get_favourite_storage, get_recipe_search
from app.errors import ValidationError
from app.models import FavouriteInput
from app.services import prometheus_metrics
from app.validation import require_favourite_fields

router = APIRouter(prefix="/api")


def _method_not_allowed(allow: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content={"error": "Method Not Allowed"},
        headers={"Allow": allow},
    )


@router.get("/search")
def search_recipes(
    ingredients: Optional[str] = None,
    diet: Optional[str] = None,
    search: RecipeSearchSource = Depends(get_recipe_search),
):
    """Search Edamam recipes by ingredients, optionally filtered by diet."""
    if not ingredients or not ingredients.strip():
        raise ValidationError("Missing 'ingredients' query param")

    prometheus_metrics.record_recipe_search(diet_label(diet))
    recipes = search.search(ingredients, diet)
    return {"recipes": [recipe.to_response() for recipe in recipes]}


@router.get("/favourites")
def list_favourites(
    storage: FavouriteRepository = Depends(get_favourite_storage),
):
    """List saved favourites, newest first"""
    favourites = storage.list()
    prometheus_metrics.record_favourite_operation("list", "success")
    return {"favourites": [fav.to_response() for fav in favourites]}


@router.post("/favourites")
def add_favourite(
    favourite: FavouriteInput,
    storage: FavouriteRepository = Depends(get_favourite_storage),
):
    """Save a recipe as a favourite. Saving an already saved recipeId is a no-op."""
    require_favourite_fields(favourite)

    result = storage.create(favourite)
    if not result.created:
        prometheus_metrics.record_favourite_operation("create", "exists")
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"message": "Already in favourites"},
        )

    prometheus_metrics.record_favourite_operation("create", "created")
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={
            "message": "Added to favourites",
            "favourite": result.favourite.to_response(),
        },
    )


@router.delete("/favourites/", include_in_schema=False)
def remove_favourite_without_id():
    raise ValidationError("Missing id param")


@router.delete("/favourites/{favourite_id}")
def remove_favourite(
    favourite_id: str,
    storage: FavouriteRepository = Depends(get_favourite_storage),
):
    """Delete a favourite by id"""
    if not favourite_id.strip():
        raise ValidationError("Missing id param")

    storage.remove(favourite_id)
    prometheus_metrics.record_favourite_operation("remove", "success")
    return {"message": "Favourite removed"}


# --- 405 for unsupported methods, with the permitted ones in Allow ---


@router.api_route(
    "/search",
    methods=["POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    include_in_schema=False,
)
def search_method_not_allowed():
    return _method_not_allowed("GET")


@router.api_route(
    "/favourites",
    methods=["PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    include_in_schema=False,
)
def favourites_method_not_allowed():
    return _method_not_allowed("GET, POST")


@router.api_route(
    "/favourites/{favourite_id}",
    methods=["GET", "POST", "PUT", "PATCH", "HEAD", "OPTIONS"],
    include_in_schema=False,
)
def favourite_method_not_allowed(favourite_id: str):
    return _method_not_allowed("DELETE")
