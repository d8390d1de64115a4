"""
Fallback store - Composes a primary and a secondary Store.

Policy:
- Reads go to the primary. If it raises InfrastructureError, the
  secondary's last known snapshot is served instead (degrade-read).
- Writes go to the primary; a failure there propagates. Each successful
  write is then mirrored to the secondary on a best-effort basis, and a
  mirror failure is logged and swallowed.

The two stores are eventually consistent at best. Nothing copies the
secondary back into the primary once the primary recovers, so writes
made while the primary was down are not replayed.
"""

import logging

from src.domain.exceptions import InfrastructureError
from src.domain.ports import Collection, Store

logger = logging.getLogger(__name__)


class FallbackStore:
    """Implements Store protocol over a primary store with a local mirror."""

    def __init__(self, primary: Store, secondary: Store) -> None:
        self.primary = primary
        self.secondary = secondary

    def ping(self) -> bool:
        # Health reflects the primary; the mirror only softens reads
        return self.primary.ping()

    def list_records(self, collection: Collection) -> list[dict]:
        try:
            return self.primary.list_records(collection)
        except InfrastructureError as e:
            logger.warning(
                "Primary store read failed (%s), serving %s from fallback", e, collection.value
            )
            return self.secondary.list_records(collection)

    def get(self, collection: Collection, key: str) -> dict | None:
        try:
            return self.primary.get(collection, key)
        except InfrastructureError as e:
            logger.warning(
                "Primary store read failed (%s), serving %s from fallback", e, collection.value
            )
            return self.secondary.get(collection, key)

    def put(self, collection: Collection, key: str, record: dict) -> None:
        self.primary.put(collection, key, record)
        self._mirror("put", collection, key, record)

    def delete(self, collection: Collection, key: str) -> None:
        self.primary.delete(collection, key)
        self._mirror("delete", collection, key)

    def clear(self, collection: Collection) -> None:
        self.primary.clear(collection)
        self._mirror("clear", collection)

    def _mirror(self, operation: str, collection: Collection, *args) -> None:
        try:
            getattr(self.secondary, operation)(collection, *args)
        except InfrastructureError as e:
            logger.warning(
                "Mirror %s to fallback store failed for %s: %s", operation, collection.value, e
            )
