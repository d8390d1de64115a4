"""Storage adapters - Store implementations and backend selection."""

import logging

from src.config.settings import Settings
from src.domain.ports import Store

from .fallback import FallbackStore
from .file_store import JsonFileStore
from .redis_store import RedisStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> Store:
    """
    Build the Store selected by settings.

    - "auto": Redis in production, JSON files otherwise
    - "file" / "redis": forced backend

    A Redis store is wrapped in a FallbackStore mirroring to the JSON
    files when ``storage_fallback`` is enabled.
    """
    file_store = JsonFileStore(settings.data_dir)
    if not settings.uses_redis:
        logger.info("Using JSON file storage in %s", settings.data_dir)
        return file_store

    redis_store = RedisStore.from_url(settings.redis_url, prefix=settings.redis_key_prefix)
    if settings.storage_fallback:
        logger.info("Using Redis storage with JSON file fallback in %s", settings.data_dir)
        return FallbackStore(primary=redis_store, secondary=file_store)

    logger.info("Using Redis storage")
    return redis_store


__all__ = ["FallbackStore", "JsonFileStore", "RedisStore", "build_store"]
