"""Session storage configuration (`storage` section)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ArchiveSearch.config.common import ConfigSection

STORAGE_BACKENDS = ("memory", "sqlite")


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Backend holding rows, parent selection and accordion state between runs."""

    backend: str
    db_path: str


def load_storage(raw: Mapping[str, Any]) -> StorageConfig:
    section = ConfigSection(raw, "storage", required=True)
    return StorageConfig(
        backend=section.choice("backend", STORAGE_BACKENDS, "sqlite"),
        db_path=section.text("db_path", "database/session.db"),
    )


def check_storage(config: StorageConfig) -> None:
    if config.backend == "sqlite" and not config.db_path.strip():
        raise ValueError("storage.db_path must not be empty for the sqlite backend")
