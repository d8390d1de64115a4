"""
Redis store - Implements Store protocol on a Redis server.

Each collection is a single string key holding the same JSON document
the file store writes, e.g. ``users`` and ``pending-registrations``
(optionally prefixed). Updates are plain GET-then-SET with no WATCH,
so concurrent writers to one collection follow last-write-wins.
"""

import logging

import redis

from src.domain.exceptions import InfrastructureError
from src.domain.ports import Collection

from . import documents

logger = logging.getLogger(__name__)


class RedisStore:
    """
    Implements Store protocol via redis-py.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Every redis.RedisError is re-raised as InfrastructureError.
    """

    def __init__(self, client: redis.Redis, prefix: str = "") -> None:
        """
        Initialize store with a Redis client.

        Args:
            client: Connected redis.Redis client
            prefix: Prepended to every collection key
        """
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "") -> "RedisStore":
        return cls(redis.Redis.from_url(url), prefix=prefix)

    def key_for(self, collection: Collection) -> str:
        return f"{self._prefix}{collection.value}"

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            raise InfrastructureError("Redis unreachable") from e

    def list_records(self, collection: Collection) -> list[dict]:
        return documents.records(collection, self._read(collection))

    def get(self, collection: Collection, key: str) -> dict | None:
        return documents.find(collection, self._read(collection), key)

    def put(self, collection: Collection, key: str, record: dict) -> None:
        document = self._read(collection)
        documents.upsert(collection, document, key, record)
        self._write(collection, document)

    def delete(self, collection: Collection, key: str) -> None:
        document = self._read(collection)
        if documents.remove(collection, document, key):
            self._write(collection, document)

    def clear(self, collection: Collection) -> None:
        self._write(collection, documents.empty_document(collection))

    def _read(self, collection: Collection) -> list | dict:
        try:
            raw = self._client.get(self.key_for(collection))
        except redis.RedisError as e:
            logger.error("Redis read failed for %s: %s", self.key_for(collection), e)
            raise InfrastructureError(f"Failed to read {collection.value}") from e
        return documents.decode(collection, raw)

    def _write(self, collection: Collection, document: list | dict) -> None:
        try:
            self._client.set(self.key_for(collection), documents.encode(document))
        except redis.RedisError as e:
            logger.error("Redis write failed for %s: %s", self.key_for(collection), e)
            raise InfrastructureError(f"Failed to write {collection.value}") from e
