from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Constants
UNTITLED_RECIPE = "Untitled recipe"


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class SearchResult(CamelModel):
    recipe_id: str
    title: str
    image: str = ""
    source_url: str = ""
    calories: Optional[Union[int, float]] = None
    ready_in_minutes: Optional[Union[int, float]] = None
    diets: List[str] = Field(default_factory=list)


class FavouriteRecipe(SearchResult):
    id: str
    created_at: datetime

    @classmethod
    def from_document(cls, doc: dict) -> "FavouriteRecipe":
        """Build from a stored Mongo document (``_id`` becomes ``id``)."""
        data = {key: value for key, value in doc.items() if key != "_id"}
        return cls(id=str(doc["_id"]), **data)


class FavouriteInput(CamelModel):
    """Add-favourite request body.

    Everything is optional here; required fields are checked by the record
    store so a missing ``recipeId`` or ``title`` is a 400, not a schema error.
    """

    recipe_id: Optional[str] = None
    title: Optional[str] = None
    image: Optional[str] = None
    source_url: Optional[str] = None
    calories: Any = None
    ready_in_minutes: Any = None
    diets: Any = None

    @field_validator("recipe_id", "title", "image", "source_url", mode="before")
    @classmethod
    def stringify_scalars(cls, value: Any) -> Any:
        # Clients may send numeric ids or titles
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value
