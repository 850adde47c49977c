"""Persistence port: string key/value storage used by the engine."""

from __future__ import annotations

import json
from typing import Any, Final, Iterable, Protocol

from ArchiveSearch.utils.log import log

SELECTED_FIELDS_KEY: Final[str] = "selectedFields"
SELECTED_PARENTS_KEY: Final[str] = "selectedSystemTypeValues"
ACCORDION_STATE_KEY: Final[str] = "savedAccordionState"
SAVED_GROUPS_KEY: Final[str] = "savedGroupFields"
SEARCH_NAME_KEY: Final[str] = "searchName"
SEARCH_NAME_ID_KEY: Final[str] = "searchNameId"
LEGACY_SAVED_SEARCH_KEY: Final[str] = "savedSearchFields"


class StoragePort(Protocol):
    """Host-supplied key/value backend. Values are strings."""

    def get_item(self, key: str) -> str | None:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError

    def keys(self) -> Iterable[str]:
        raise NotImplementedError


def read_json(storage: StoragePort, key: str, default: Any = None) -> Any:
    """Read and decode a JSON value.

    Missing keys and malformed JSON both yield `default`; malformed data is
    logged and otherwise treated as "nothing saved".
    """
    raw = storage.get_item(key)
    if raw is None or raw == "":
        return default
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as error:
        log.warning("Ignoring malformed saved state: key=%s error=%s", key, error)
        return default


def write_json(storage: StoragePort, key: str, value: Any) -> None:
    storage.set_item(key, json.dumps(value, ensure_ascii=False))
