"""
MongoDB access for the portfolio admin backend.

One ``Database`` handle per process, created lazily by ``get_database()`` and
injected into the routes. It knows whether the server is reachable; the
services ask ``is_connected()`` before every call so a dead database costs a
503 instead of a five second driver timeout per request.
"""

import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, DuplicateKeyError, PyMongoError

from config import get_settings
from errors import InternalError, ServiceUnavailableError, ValidationError
from logging_config import get_logger

logger = get_logger("database")

PROJECTS = "projects"
VISITORS = "visitors"
CONTACTS = "contacts"

Sort = List[Tuple[str, int]]


def utcnow() -> datetime:
    """Naive UTC, which is what the driver hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def serialize_document(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    out = dict(doc)
    if "_id" in out:
        out["_id"] = str(out["_id"])
    return out


class Database:
    def __init__(
        self,
        uri: str,
        name: str,
        timeout_ms: int = 5000,
        retry_seconds: float = 30.0,
        client_factory: Callable[..., Any] = MongoClient,
    ):
        self.uri = uri
        self.name = name
        self.timeout_ms = timeout_ms
        self.retry_seconds = retry_seconds
        self._client_factory = client_factory
        self._client = None
        self._db = None
        self._connected = False
        self._last_attempt: Optional[float] = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------
    def connect(self) -> bool:
        """Open the client, ping the server and create indexes.

        Returns False (and stays usable in degraded mode) when the server is
        unreachable within ``timeout_ms``.
        """
        with self._lock:
            self._last_attempt = time.monotonic()
            try:
                if self._client is None:
                    self._client = self._client_factory(
                        self.uri, serverSelectionTimeoutMS=self.timeout_ms
                    )
                self._client.admin.command("ping")
                self._db = self._client[self.name]
                self._ensure_indexes()
            except PyMongoError as exc:
                self._connected = False
                logger.error("MongoDB connection failed: %s", exc)
                return False
            self._connected = True
            logger.info("MongoDB connected: database=%s", self.name)
            return True

    def ensure_connection(self) -> bool:
        """Connect on first use, and retry at most once per ``retry_seconds``."""
        if self._connected:
            return True
        last = self._last_attempt
        if last is not None and time.monotonic() - last < self.retry_seconds:
            return False
        return self.connect()

    def is_connected(self) -> bool:
        return self._connected

    def mark_disconnected(self) -> None:
        if self._connected:
            logger.warning("MongoDB connection lost")
        self._connected = False

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None
        self._db = None
        self._connected = False

    def _ensure_indexes(self) -> None:
        self._db[PROJECTS].create_index([("id", ASCENDING)], unique=True)
        self._db[VISITORS].create_index([("date", ASCENDING)])
        self._db[VISITORS].create_index([("createdAt", ASCENDING)])

    # ------------------------------------------------------------
    # Access
    # ------------------------------------------------------------
    def collection(self, name: str) -> Collection:
        if not self._connected or self._db is None:
            raise ServiceUnavailableError()
        return self._db[name]

    def collection_names(self) -> List[str]:
        if not self._connected:
            return []
        with self.operation("list collections"):
            return self._db.list_collection_names()

    @contextmanager
    def operation(self, description: str, duplicate_message: str = "Duplicate key") -> Iterator[None]:
        """Translate driver errors raised inside the block."""
        try:
            yield
        except DuplicateKeyError as exc:
            logger.info("Duplicate key during %s: %s", description, exc)
            raise ValidationError(duplicate_message)
        except ConnectionFailure as exc:
            logger.warning("Connection failure during %s: %s", description, exc)
            self.mark_disconnected()
            raise ServiceUnavailableError()
        except PyMongoError:
            logger.exception("Database error during %s", description)
            raise InternalError()

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------
    def create_document(
        self,
        collection_name: str,
        data: Union[BaseModel, Dict[str, Any]],
        duplicate_message: str = "Duplicate key",
    ) -> Dict[str, Any]:
        """Insert a document with createdAt/updatedAt stamps and return it."""
        if isinstance(data, BaseModel):
            doc = data.model_dump(by_alias=True, exclude_none=True)
        else:
            doc = dict(data)
        now = utcnow()
        doc.setdefault("createdAt", now)
        doc["updatedAt"] = now
        collection = self.collection(collection_name)
        with self.operation(f"insert into {collection_name}", duplicate_message):
            result = collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def get_documents(
        self,
        collection_name: str,
        filter_dict: Optional[Dict[str, Any]] = None,
        sort: Optional[Sort] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        collection = self.collection(collection_name)
        with self.operation(f"find in {collection_name}"):
            cursor = collection.find(filter_dict or {})
            if sort:
                cursor = cursor.sort(sort)
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)

    def count_documents(self, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None) -> int:
        collection = self.collection(collection_name)
        with self.operation(f"count in {collection_name}"):
            return collection.count_documents(filter_dict or {})


# ------------------------------------------------------------
# Process-wide handle
# ------------------------------------------------------------
_database: Optional[Database] = None
_database_lock = threading.Lock()


def get_database() -> Database:
    """FastAPI dependency: the lazily connected process-wide handle."""
    global _database
    if _database is None:
        with _database_lock:
            if _database is None:
                settings = get_settings()
                _database = Database(
                    settings.mongodb_uri,
                    settings.mongodb_database,
                    timeout_ms=settings.mongodb_timeout_ms,
                    retry_seconds=settings.mongodb_retry_seconds,
                )
    _database.ensure_connection()
    return _database


def close_database() -> None:
    global _database
    if _database is not None:
        _database.close()
        _database = None
