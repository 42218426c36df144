"""
MongoDB connection manager.

One MongoConnection is built at application startup and handed to whatever
needs the database. The client is created lazily on first use, at most once.
"""

import logging
import threading
from typing import Any, Callable, Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from app.errors import StorageError

logger = logging.getLogger(__name__)


class MongoConnection:
    def __init__(
        self,
        uri: str,
        database_name: str,
        client_factory: Callable[..., Any] = MongoClient,
    ) -> None:
        self._uri = uri
        self._database_name = database_name
        self._client_factory = client_factory
        self._client: Optional[Any] = None
        self._database: Optional[Any] = None
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._database is not None

    def get_database(self):
        """Return the cached database handle, connecting on first call."""
        if self._database is not None:
            return self._database
        with self._lock:
            if self._database is None:
                self._connect()
        return self._database

    def _connect(self) -> None:
        try:
            client = self._client_factory(self._uri)
            database = client.get_default_database(default=self._database_name)
        except PyMongoError as e:
            logger.error("MongoDB connection error: %s", e)
            raise StorageError("Failed to connect to database") from e
        self._client = client
        self._database = database
        logger.info("MongoDB connected (database=%s)", database.name)

    def ping(self) -> None:
        """Round-trip to the server. Raises StorageError if unreachable."""
        database = self.get_database()
        try:
            database.command("ping")
        except PyMongoError as e:
            logger.error("MongoDB ping failed: %s", e)
            raise StorageError("Failed to connect to database") from e

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
            self._client = None
            self._database = None
