"""Document store backends.

A document store holds collections addressed by slash-separated paths
("courses/toeic/Day3") whose documents have auto-assigned ids. Single
documents are addressed as "{collection}/{id}".

Backends:
- MemoryDocumentStore: dict-backed, used in tests and LITE mode
- RedisDocumentStore: one Redis hash per collection, JSON values
"""

from __future__ import annotations

import json
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


def new_document_id() -> str:
    """Generate a 20-character document id."""
    return uuid.uuid4().hex[:20]


def split_document_path(path: str) -> tuple[str, str]:
    """Split "{collection}/{id}" into its parts.

    Raises:
        ValueError: If the path has no collection component.
    """
    collection, sep, doc_id = path.strip("/").rpartition("/")
    if not sep or not collection or not doc_id:
        raise ValueError(f"Invalid document path: {path!r}")
    return collection, doc_id


@dataclass(slots=True)
class DocumentSnapshot:
    """One document read from a store."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)
    exists: bool = True
    path: str = ""


class BaseDocumentStore(ABC):
    """Abstract document store interface."""

    @property
    @abstractmethod
    def backend(self) -> str:
        """Backend name for logging and stats."""
        pass

    @abstractmethod
    async def list_documents(self, path: str) -> list[DocumentSnapshot]:
        """List every document in a collection (empty if none)."""
        pass

    @abstractmethod
    async def delete_document(self, path: str, doc_id: str) -> None:
        """Delete one document from a collection."""
        pass

    @abstractmethod
    async def add_document(self, path: str, data: dict[str, Any]) -> str:
        """Add a document with an auto-assigned id and return the id."""
        pass

    @abstractmethod
    async def get_document(self, path: str) -> DocumentSnapshot:
        """Read a single document. Missing documents have exists=False."""
        pass

    @abstractmethod
    async def set_document(
        self,
        path: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        """Create or replace a single document (or merge fields into it)."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None


class MemoryDocumentStore(BaseDocumentStore):
    """In-memory document store."""

    __slots__ = ("_collections",)

    def __init__(self):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    @property
    def backend(self) -> str:
        return "memory"

    async def list_documents(self, path: str) -> list[DocumentSnapshot]:
        collection = self._collections.get(path.strip("/"), {})
        return [
            DocumentSnapshot(id=doc_id, data=dict(data), path=f"{path}/{doc_id}")
            for doc_id, data in collection.items()
        ]

    async def delete_document(self, path: str, doc_id: str) -> None:
        collection = self._collections.get(path.strip("/"))
        if collection is not None:
            collection.pop(doc_id, None)

    async def add_document(self, path: str, data: dict[str, Any]) -> str:
        doc_id = new_document_id()
        self._collections.setdefault(path.strip("/"), {})[doc_id] = dict(data)
        return doc_id

    async def get_document(self, path: str) -> DocumentSnapshot:
        collection, doc_id = split_document_path(path)
        data = self._collections.get(collection, {}).get(doc_id)
        if data is None:
            return DocumentSnapshot(id=doc_id, exists=False, path=path)
        return DocumentSnapshot(id=doc_id, data=dict(data), path=path)

    async def set_document(
        self,
        path: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        collection, doc_id = split_document_path(path)
        documents = self._collections.setdefault(collection, {})
        if merge and doc_id in documents:
            documents[doc_id].update(data)
        else:
            documents[doc_id] = dict(data)

    def count(self, path: str) -> int:
        """Number of documents in a collection."""
        return len(self._collections.get(path.strip("/"), {}))


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class RedisDocumentStore(BaseDocumentStore):
    """Redis-backed document store.

    Each collection is a hash at "{prefix}:{collection path}" mapping
    document id to the JSON-encoded document. Datetimes are stored as
    ISO-8601 strings.

    Usage:
        store = RedisDocumentStore(prefix="voca")
        await store.connect("redis://localhost:6379")
    """

    __slots__ = ("redis", "url", "_prefix")

    def __init__(self, prefix: str = "voca", client: Any = None):
        """Initialize Redis store.

        Args:
            prefix: Key prefix for every collection hash.
            client: Existing redis.asyncio client.
        """
        self.redis = client
        self.url = ""
        self._prefix = prefix

    @property
    def backend(self) -> str:
        return "redis"

    async def connect(self, url: str) -> None:
        """Connect to Redis and verify the connection."""
        self.url = url
        self.redis = aioredis.from_url(
            url,
            decode_responses=True,
            socket_timeout=5.0,
            socket_connect_timeout=5.0,
            health_check_interval=30,
        )
        await self.redis.ping()
        logger.info(f"DocumentStore: Redis connected ({url})")

    async def close(self) -> None:
        if self.redis:
            await self.redis.aclose()

    def _key(self, path: str) -> str:
        return f"{self._prefix}:{path.strip('/')}"

    async def list_documents(self, path: str) -> list[DocumentSnapshot]:
        entries = await self.redis.hgetall(self._key(path))
        return [
            DocumentSnapshot(id=doc_id, data=json.loads(raw), path=f"{path}/{doc_id}")
            for doc_id, raw in entries.items()
        ]

    async def delete_document(self, path: str, doc_id: str) -> None:
        await self.redis.hdel(self._key(path), doc_id)

    async def add_document(self, path: str, data: dict[str, Any]) -> str:
        doc_id = new_document_id()
        await self.redis.hset(
            self._key(path),
            doc_id,
            json.dumps(data, default=_json_default, ensure_ascii=False),
        )
        return doc_id

    async def get_document(self, path: str) -> DocumentSnapshot:
        collection, doc_id = split_document_path(path)
        raw = await self.redis.hget(self._key(collection), doc_id)
        if raw is None:
            return DocumentSnapshot(id=doc_id, exists=False, path=path)
        return DocumentSnapshot(id=doc_id, data=json.loads(raw), path=path)

    async def set_document(
        self,
        path: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        collection, doc_id = split_document_path(path)
        payload = dict(data)
        if merge:
            existing = await self.get_document(path)
            if existing.exists:
                payload = {**existing.data, **data}
        await self.redis.hset(
            self._key(collection),
            doc_id,
            json.dumps(payload, default=_json_default, ensure_ascii=False),
        )
