"""
Tests for FavouriteStorage: dedup, ordering, defaults, delete and error mapping.
"""
from datetime import datetime
from unittest.mock import MagicMock, call

import pytest
from pymongo.errors import DuplicateKeyError, OperationFailure, PyMongoError

from app.errors import NotFoundError, StorageError, ValidationError
from app.models import FavouriteInput
from app.services.storage import FavouriteStorage


def _favourite(recipe_id="r1", title="Soup", **extra) -> FavouriteInput:
    return FavouriteInput(recipe_id=recipe_id, title=title, **extra)


def _storage_over(collection: MagicMock) -> FavouriteStorage:
    connection = MagicMock()
    connection.get_database.return_value.__getitem__.return_value = collection
    return FavouriteStorage(connection)


def test_create_applies_defaults(storage):
    result = storage.create(_favourite())

    assert result.created is True
    fav = result.favourite
    assert fav.id
    assert fav.recipe_id == "r1"
    assert fav.image == ""
    assert fav.source_url == ""
    assert fav.calories is None
    assert fav.ready_in_minutes is None
    assert fav.diets == []


def test_create_same_recipe_id_twice(storage):
    first = storage.create(_favourite())
    second = storage.create(_favourite(title="Soup again"))

    assert first.created is True
    assert second.created is False
    assert second.favourite is None
    assert len(storage.list()) == 1


def test_create_missing_fields_does_not_touch_store(storage):
    with pytest.raises(ValidationError):
        storage.create(_favourite(recipe_id=None))
    with pytest.raises(ValidationError):
        storage.create(_favourite(title="  "))
    assert storage.list() == []


def test_list_sorted_newest_first(storage):
    for i in range(5):
        storage.create(_favourite(recipe_id=f"r{i}", title=f"Recipe {i}"))

    favourites = storage.list()
    assert [f.recipe_id for f in favourites] == ["r4", "r3", "r2", "r1", "r0"]
    for newer, older in zip(favourites, favourites[1:]):
        assert newer.created_at >= older.created_at


def test_list_same_timestamp_keeps_insertion_order(connection):
    frozen = FavouriteStorage(connection, clock=lambda: datetime(2024, 1, 1))
    frozen.create(_favourite(recipe_id="first"))
    frozen.create(_favourite(recipe_id="second"))

    assert [f.recipe_id for f in frozen.list()] == ["second", "first"]


def test_remove_existing(storage):
    keep = storage.create(_favourite(recipe_id="keep")).favourite
    drop = storage.create(_favourite(recipe_id="drop")).favourite

    storage.remove(drop.id)

    remaining = storage.list()
    assert len(remaining) == 1
    assert remaining[0].id == keep.id


def test_remove_unknown_id(storage):
    storage.create(_favourite())
    with pytest.raises(NotFoundError):
        storage.remove("0123456789abcdef01234567")
    with pytest.raises(NotFoundError):
        storage.remove("not-an-object-id")
    assert len(storage.list()) == 1


def test_remove_blank_id(storage):
    with pytest.raises(ValidationError):
        storage.remove("")


def test_recipe_id_can_be_saved_again_after_remove(storage):
    fav = storage.create(_favourite()).favourite
    storage.remove(fav.id)

    assert storage.create(_favourite()).created is True


def test_concurrent_duplicate_insert_reports_existing():
    """A unique-index violation from a racing insert is an 'already exists'"""
    collection = MagicMock()
    collection.find_one.return_value = None
    collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")

    result = _storage_over(collection).create(_favourite())

    assert result.created is False
    assert result.favourite is None


def test_storage_errors_are_wrapped():
    collection = MagicMock()
    collection.find.side_effect = PyMongoError("connection reset")
    collection.find_one.side_effect = PyMongoError("connection reset")
    collection.delete_one.side_effect = PyMongoError("connection reset")
    storage = _storage_over(collection)

    with pytest.raises(StorageError, match="Failed to fetch favourites"):
        storage.list()
    with pytest.raises(StorageError, match="Failed to save favourite"):
        storage.create(_favourite())
    with pytest.raises(StorageError, match="Failed to delete favourite"):
        storage.remove("0123456789abcdef01234567")


def test_ensure_indexes_makes_recipe_id_unique(storage, connection):
    indexes = connection.get_database()["favourites"].index_information()
    unique = [info for info in indexes.values() if info.get("unique")]
    assert any(info["key"] == [("recipeId", 1)] for info in unique)


def test_ensure_indexes_tolerates_stored_duplicates(connection, caplog):
    """Duplicates left by an older deployment must not abort startup"""
    collection = connection.get_database()["favourites"]
    collection.insert_many(
        [
            {"recipeId": "r1", "title": "Soup", "createdAt": datetime(2024, 1, 1)},
            {"recipeId": "r1", "title": "Soup again", "createdAt": datetime(2024, 1, 2)},
        ]
    )

    FavouriteStorage(connection).ensure_indexes()

    keys = [info["key"] for info in collection.index_information().values()]
    assert [("createdAt", -1)] in keys
    assert "Duplicate recipeIds already stored" in caplog.text


def test_ensure_indexes_falls_back_to_plain_recipe_id_index():
    collection = MagicMock()
    collection.create_index.side_effect = [
        OperationFailure("E11000 duplicate key error", code=11000),
        "recipeId_1",
        "createdAt_-1",
    ]

    _storage_over(collection).ensure_indexes()

    assert collection.create_index.call_args_list == [
        call([("recipeId", 1)], unique=True),
        call([("recipeId", 1)]),
        call([("createdAt", -1)]),
    ]


def test_ensure_indexes_other_failures_are_storage_errors():
    collection = MagicMock()
    collection.create_index.side_effect = OperationFailure("not authorized", code=13)

    with pytest.raises(StorageError, match="Failed to prepare favourites collection"):
        _storage_over(collection).ensure_indexes()
