"""
Storage - Keyed Text Storage Backends

Opaque key -> text persistence for the review state store.
Backends know nothing about card states; serialization is the
state_store module's job.

Backends:
- MemoryStore: process-local dict (tests, throwaway sessions)
- SqlStore: SQLAlchemy table (SQLite by default, Postgres via DATABASE_URL)
- MongoStore: MongoDB collection (MONGO_URI)

Every backend raises StorageUnavailable for medium failures.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import logging
import os

from dotenv import load_dotenv
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session

from gilead.sm2.errors import StorageUnavailable
from gilead.sm2.models import Base, StoreEntry

# Load environment
load_dotenv()

logger = logging.getLogger(__name__)

# Configuration
DB_DIR = Path("logs")
DB_NAME = "review_state"
DEFAULT_MONGO_DB_NAME = "gilead"
STORE_COLLECTION_NAME = "review_store"


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_database_url() -> str:
    """
    Get the SQL database URL from environment variables.

    Falls back to a SQLite file under logs/ when DATABASE_URL is unset.
    In TEST_MODE, 'review_state' in the URL is replaced with
    'test_review_state' so tests never touch the real store.

    Returns:
        SQLAlchemy database URL
    """
    base_url = os.getenv("DATABASE_URL")
    if not base_url:
        DB_DIR.mkdir(exist_ok=True)
        base_url = f"sqlite:///{DB_DIR / DB_NAME}.db"

    if is_test_mode():
        return base_url.replace(DB_NAME, f"test_{DB_NAME}")

    return base_url


class KeyValueStore(ABC):
    """
    Port for opaque keyed text storage.

    Last write wins; no merge, no compare-and-swap.
    """

    @abstractmethod
    def get_text(self, key: str) -> Optional[str]:
        """
        Read the text stored under a key.

        Returns:
            Stored text, or None if the key was never written

        Raises:
            StorageUnavailable: If the medium cannot be read
        """

    @abstractmethod
    def put_text(self, key: str, value: str) -> None:
        """
        Overwrite the text stored under a key.

        Raises:
            StorageUnavailable: If the medium cannot be written
        """


class MemoryStore(KeyValueStore):
    """Dict-backed store; contents vanish with the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.entries: dict[str, str] = dict(initial or {})

    def get_text(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def put_text(self, key: str, value: str) -> None:
        self.entries[key] = value


class SqlStore(KeyValueStore):
    """
    Key-value table behind SQLAlchemy.

    The schema is created lazily on first access so an unreachable
    database surfaces as StorageUnavailable rather than at construction.
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url or get_database_url()
        self._engine = None
        self._session_factory = None

    def _get_engine(self):
        if self._engine is None:
            if self.url.startswith("sqlite"):
                engine = create_engine(self.url, echo=False)
            else:
                engine = create_engine(
                    self.url,
                    pool_size=5,           # Keep 5 connections open
                    max_overflow=10,       # Allow up to 10 extra connections
                    pool_pre_ping=True,    # Verify connections before use
                    echo=False
                )
            Base.metadata.create_all(engine)
            logger.debug("Opened review store at %s", engine.url)
            self._engine = engine
            self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        return self._engine

    def get_session(self) -> Session:
        """Get a SQLAlchemy session bound to this store's engine."""
        self._get_engine()
        return self._session_factory()

    def get_text(self, key: str) -> Optional[str]:
        try:
            session = self.get_session()
            try:
                entry = session.get(StoreEntry, key)
                return entry.value if entry is not None else None
            finally:
                session.close()
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"Could not read '{key}': {exc}") from exc

    def put_text(self, key: str, value: str) -> None:
        try:
            session = self.get_session()
            try:
                session.merge(StoreEntry(
                    key=key,
                    value=value,
                    updated_at=datetime.now(timezone.utc)
                ))
                session.commit()
            finally:
                session.close()
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"Could not write '{key}': {exc}") from exc

    def dispose(self) -> None:
        """Release pooled connections."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None


class MongoStore(KeyValueStore):
    """
    Key-value documents in a MongoDB collection: {_id: key, value: text}.
    """

    def __init__(self, collection: Optional[Collection] = None):
        self._collection = collection
        self._client: Optional[MongoClient] = None

    def get_collection(self) -> Collection:
        """
        Get the store collection, connecting on first use.

        Returns:
            MongoDB collection object
        """
        if self._collection is not None:
            return self._collection

        mongo_uri = os.getenv("MONGO_URI")
        if not mongo_uri:
            raise ValueError("MONGO_URI not found in environment variables")

        self._client = MongoClient(
            mongo_uri,
            maxPoolSize=10,  # Connection pool size
            minPoolSize=1,   # Keep at least 1 connection alive
            maxIdleTimeMS=60000  # Keep connections alive for 60 seconds
        )
        db = self._client[os.getenv("MONGO_DB_NAME", DEFAULT_MONGO_DB_NAME)]
        self._collection = db[STORE_COLLECTION_NAME]
        return self._collection

    def get_text(self, key: str) -> Optional[str]:
        try:
            doc = self.get_collection().find_one({"_id": key})
        except PyMongoError as exc:
            raise StorageUnavailable(f"Could not read '{key}': {exc}") from exc
        if doc is None:
            return None
        return doc.get("value")

    def put_text(self, key: str, value: str) -> None:
        try:
            self.get_collection().replace_one(
                {"_id": key},
                {"_id": key, "value": value, "updated_at": datetime.now(timezone.utc)},
                upsert=True
            )
        except PyMongoError as exc:
            raise StorageUnavailable(f"Could not write '{key}': {exc}") from exc


def get_store(backend: Optional[str] = None) -> KeyValueStore:
    """
    Build the configured storage backend.

    Args:
        backend: 'sql', 'mongo' or 'memory' (defaults to REVIEW_STORE_BACKEND, then 'sql')

    Returns:
        KeyValueStore instance
    """
    backend = (backend or os.getenv("REVIEW_STORE_BACKEND", "sql")).lower()
    if backend == "sql":
        return SqlStore()
    if backend == "mongo":
        return MongoStore()
    if backend == "memory":
        return MemoryStore()
    raise ValueError(f"Unknown store backend: {backend}")
