"""Storage layer for ArchiveSearch.

Provides the persistence port and its in-memory and SQLite backends.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ArchiveSearch.storage.db import SqliteStorage
from ArchiveSearch.storage.memory import InMemoryStorage
from ArchiveSearch.storage.port import StoragePort, read_json, write_json
from ArchiveSearch.utils.log import log

if TYPE_CHECKING:
    from ArchiveSearch.config import AppConfig


def create_storage(config: AppConfig) -> InMemoryStorage | SqliteStorage:
    """Create the storage backend selected by `storage.backend`.

    Args:
        config: Application configuration containing storage settings.

    Returns:
        A fresh backend; SQLite backends should be closed by the caller.
    """
    if config.storage.backend == "memory":
        log.debug("Using in-memory storage")
        return InMemoryStorage()
    db_path = Path(config.storage.db_path)
    log.info("Session storage: %s", db_path)
    return SqliteStorage(db_path)


__all__ = [
    "StoragePort",
    "InMemoryStorage",
    "SqliteStorage",
    "read_json",
    "write_json",
    "create_storage",
]
