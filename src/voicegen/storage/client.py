"""MongoDB storage client for generation history.

Provides connection management, retry logic, and repository access.
"""

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from .models import AudioGenerationRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_on_connection_failure(
    max_retries: int = 3,
    base_delay: float = 0.5,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator for exponential backoff retry on connection failures.

    Args:
        max_retries: Maximum number of attempts.
        base_delay: Base delay in seconds (doubles each retry).

    Returns:
        Decorated function with retry logic.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                    if attempt == max_retries - 1:
                        logger.error(f"Connection failed after {max_retries} attempts: {e}")
                        raise
                    delay = base_delay * (2**attempt)
                    logger.warning(
                        f"Connection failed (attempt {attempt + 1}/{max_retries}), "
                        f"retrying in {delay:.1f}s: {e}"
                    )
                    time.sleep(delay)
            raise RuntimeError("Unexpected retry loop exit")

        return wrapper

    return decorator


def _object_id(record_id: str) -> ObjectId | None:
    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError):
        return None


class AudioGenerationRepository:
    """Repository for generated audio records."""

    def __init__(self, collection: Collection[dict[str, Any]]) -> None:
        """Initialize repository with MongoDB collection.

        Args:
            collection: MongoDB collection for audio generations.
        """
        self._collection = collection
        self._ensure_indexes()

    def _ensure_indexes(self) -> None:
        self._collection.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
        self._collection.create_index("public_id")

    @retry_on_connection_failure()
    def save(self, record: AudioGenerationRecord) -> str:
        """Save a record and return its ID."""
        result = self._collection.insert_one(record.to_dict())
        record.id = str(result.inserted_id)
        return record.id

    @retry_on_connection_failure()
    def get_by_id(self, record_id: str, user_id: str | None = None) -> AudioGenerationRecord | None:
        """Retrieve a record by ID, optionally scoped to its owner.

        Returns:
            The record, or None if not found or the ID is malformed.
        """
        oid = _object_id(record_id)
        if oid is None:
            return None

        query: dict[str, Any] = {"_id": oid}
        if user_id is not None:
            query["user_id"] = user_id

        doc = self._collection.find_one(query)
        return AudioGenerationRecord.from_dict(doc) if doc else None

    def _user_query(self, user_id: str, language: str | None, content_type: str | None) -> dict[str, Any]:
        query: dict[str, Any] = {"user_id": user_id}
        if language:
            query["language"] = language
        if content_type:
            query["content_type"] = content_type
        return query

    @retry_on_connection_failure()
    def list_for_user(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 10,
        language: str | None = None,
        content_type: str | None = None,
    ) -> list[AudioGenerationRecord]:
        """List a user's records, newest first.

        Args:
            user_id: Owner.
            page: 1-based page number.
            limit: Page size.
            language: Only records in this language.
            content_type: Only records of this content type.
        """
        page = max(1, page)
        cursor = (
            self._collection.find(self._user_query(user_id, language, content_type))
            .sort("created_at", DESCENDING)
            .skip((page - 1) * limit)
            .limit(limit)
        )
        return [AudioGenerationRecord.from_dict(doc) for doc in cursor]

    @retry_on_connection_failure()
    def count_for_user(
        self,
        user_id: str,
        language: str | None = None,
        content_type: str | None = None,
    ) -> int:
        return self._collection.count_documents(self._user_query(user_id, language, content_type))

    @retry_on_connection_failure()
    def delete(self, record_id: str, user_id: str | None = None) -> bool:
        """Delete a record.

        Returns:
            True if a record was deleted.
        """
        oid = _object_id(record_id)
        if oid is None:
            return False

        query: dict[str, Any] = {"_id": oid}
        if user_id is not None:
            query["user_id"] = user_id
        return self._collection.delete_one(query).deleted_count > 0


class MongoStorageClient:
    """High-level MongoDB storage client.

    Manages connection and provides access to the generation repository.
    """

    def __init__(
        self,
        uri: str = "mongodb://localhost:27017",
        database_name: str = "voicegen",
        connect_timeout_ms: int = 5000,
        server_selection_timeout_ms: int = 5000,
    ) -> None:
        self._uri = uri
        self._database_name = database_name
        self._connect_timeout_ms = connect_timeout_ms
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._client: MongoClient[dict[str, Any]] | None = None
        self._db: Database[dict[str, Any]] | None = None
        self._generations: AudioGenerationRepository | None = None

    def connect(self) -> None:
        """Connect to MongoDB.

        Raises:
            ConnectionFailure: If the server cannot be reached.
        """
        if self._client is not None:
            return

        try:
            client: MongoClient[dict[str, Any]] = MongoClient(
                self._uri,
                connectTimeoutMS=self._connect_timeout_ms,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
            )
            client.admin.command("ping")
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

        self._client = client
        self._db = client[self._database_name]
        self._generations = AudioGenerationRepository(self._db["audio_generations"])
        logger.info(f"Connected to MongoDB database {self._database_name}")

    def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self._client is not None:
            self._client.close()
            self._client = None
            self._db = None
            self._generations = None
            logger.info("Disconnected from MongoDB")

    @property
    def generations(self) -> AudioGenerationRepository:
        """Get the audio generation repository.

        Raises:
            RuntimeError: If not connected.
        """
        if self._generations is None:
            raise RuntimeError("Not connected to MongoDB. Call connect() first.")
        return self._generations

    def __enter__(self) -> "MongoStorageClient":
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.disconnect()


__all__ = [
    "AudioGenerationRepository",
    "MongoStorageClient",
    "retry_on_connection_failure",
]
