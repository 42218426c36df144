"""
Favourite recipe storage.
MongoDB-backed persistence over a single ``favourites`` collection.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError, OperationFailure, PyMongoError

from app.errors import NotFoundError, StorageError, ValidationError
from app.models import FavouriteInput, FavouriteRecipe
from app.services.connection import MongoConnection
from app.validation import build_favourite_document, require_favourite_fields

logger = logging.getLogger(__name__)

FAVOURITES_COLLECTION = "favourites"
_DUPLICATE_KEY_CODE = 11000

# Newest first; _id breaks ties between inserts in the same millisecond
_LIST_SORT = [("createdAt", DESCENDING), ("_id", DESCENDING)]


def _utcnow() -> datetime:
    # Mongo stores milliseconds, naive UTC
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


@dataclass
class FavouriteCreateResult:
    """Outcome of create(): the new favourite, or created=False if it existed."""

    favourite: Optional[FavouriteRecipe]
    created: bool


class FavouriteStorage:
    """MongoDB-backed favourite storage implementing FavouriteRepository."""

    def __init__(
        self,
        connection: MongoConnection,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._connection = connection
        self._clock = clock

    @property
    def _collection(self):
        return self._connection.get_database()[FAVOURITES_COLLECTION]

    def ensure_indexes(self) -> None:
        """
        Unique recipeId (closes the check-then-insert race) and createdAt sort.

        A collection that already holds duplicate recipeIds cannot take the
        unique index; it gets a plain one and dedup stays find-then-insert.
        """
        try:
            try:
                self._collection.create_index([("recipeId", ASCENDING)], unique=True)
            except OperationFailure as e:
                if e.code != _DUPLICATE_KEY_CODE:
                    raise
                logger.warning(
                    "Duplicate recipeIds already stored, recipeId index is not unique: %s", e
                )
                self._collection.create_index([("recipeId", ASCENDING)])
            self._collection.create_index([("createdAt", DESCENDING)])
        except PyMongoError as e:
            logger.error("Error creating favourites indexes: %s", e)
            raise StorageError("Failed to prepare favourites collection") from e

    def list(self) -> List[FavouriteRecipe]:
        try:
            docs = list(self._collection.find().sort(_LIST_SORT))
        except PyMongoError as e:
            logger.error("Error fetching favourites: %s", e)
            raise StorageError("Failed to fetch favourites") from e
        return [FavouriteRecipe.from_document(doc) for doc in docs]

    def create(self, favourite: FavouriteInput) -> FavouriteCreateResult:
        require_favourite_fields(favourite)

        try:
            existing = self._collection.find_one({"recipeId": favourite.recipe_id})
            if existing is not None:
                return FavouriteCreateResult(favourite=None, created=False)

            doc = build_favourite_document(favourite, created_at=self._clock())
            result = self._collection.insert_one(doc)
        except DuplicateKeyError:
            logger.info("Concurrent duplicate favourite for recipeId=%s", favourite.recipe_id)
            return FavouriteCreateResult(favourite=None, created=False)
        except PyMongoError as e:
            logger.error("Error saving favourite: %s", e)
            raise StorageError("Failed to save favourite") from e

        doc["_id"] = result.inserted_id
        return FavouriteCreateResult(
            favourite=FavouriteRecipe.from_document(doc), created=True
        )

    def remove(self, favourite_id: str) -> None:
        if not favourite_id or not favourite_id.strip():
            raise ValidationError("Missing id param")
        try:
            object_id = ObjectId(favourite_id.strip())
        except (InvalidId, TypeError):
            raise NotFoundError("Favourite not found")

        try:
            result = self._collection.delete_one({"_id": object_id})
        except PyMongoError as e:
            logger.error("Error deleting favourite: %s", e)
            raise StorageError("Failed to delete favourite") from e
        if result.deleted_count == 0:
            raise NotFoundError("Favourite not found")
