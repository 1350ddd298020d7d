"""
StudySpark Backend — Storage Package
======================================

What:  Exposes the StorageRepository interface and picks the backend at startup.

Backend selection (build_storage):
    DATABASE_URL set    → DatabaseStorage (async SQLAlchemy)
    DATABASE_URL unset  → MemoryStorage   (data lost on restart, logged as WARNING)
"""

import logging
from typing import Optional

from studyspark.config import Settings, settings as default_settings
from studyspark.storage.base import StorageRepository
from studyspark.storage.memory import MemoryStorage
from studyspark.storage.sql import DatabaseStorage

logger = logging.getLogger(__name__)

__all__ = ["DatabaseStorage", "MemoryStorage", "StorageRepository", "build_storage"]


def build_storage(settings: Optional[Settings] = None) -> StorageRepository:
    """Choose the storage backend once, from configuration."""
    settings = settings or default_settings
    if settings.uses_database:
        logger.info("DATABASE_URL configured, using database-backed storage")
        return DatabaseStorage(settings.database_url)
    logger.warning(
        "DATABASE_URL not set, using in-memory storage. "
        "All data will be lost when the server restarts."
    )
    return MemoryStorage()
