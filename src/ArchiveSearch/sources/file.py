"""Catalog provider backed by a YAML or JSON document.

Expected layout::

    parents:        [{id, en, de}, ...]
    fields:         [{id, en, de, children: [...]}, ...]
    scoped_fields:  {<parent id>: [{id, en, de}, ...]}
    operators:      {stringOperations: [{id, en, de}, ...], ...}
    dropdowns:      {brandData: [{id, en, de}, ...], ...}
    saved_searches: <raw saved-group payload>

Entries may carry a plain `label` instead of per-locale keys.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import yaml

from ArchiveSearch.utils.log import log


class FileCatalogProvider:
    """Serve catalogs from a local document, localized on read."""

    name = "file"

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._document: dict[str, Any] | None = None

    @classmethod
    def from_mapping(cls, document: Mapping[str, Any]) -> FileCatalogProvider:
        provider = cls(Path("<memory>"))
        provider._document = dict(document)
        return provider

    def get_parent_catalog(self, locale: str) -> list[dict[str, Any]]:
        return localize_items(self._load().get("parents"), locale)

    def get_fields_by_locale(self, locale: str) -> list[dict[str, Any]]:
        return localize_items(self._load().get("fields"), locale)

    def get_scoped_fields(self, parent_ids: Sequence[str], locale: str) -> list[dict[str, Any]]:
        scoped = {str(key): items for key, items in (self._load().get("scoped_fields") or {}).items()}
        out: list[dict[str, Any]] = []
        for parent_id in parent_ids:
            out.extend(localize_items(scoped.get(str(parent_id).strip()), locale))
        return out

    def get_operator_catalog(self) -> dict[str, Any]:
        return dict(self._load().get("operators") or {})

    def get_dropdown_data(self, source: str, locale: str) -> list[dict[str, Any]]:
        dropdowns = self._load().get("dropdowns") or {}
        return localize_items(dropdowns.get(source), locale)

    def get_saved_searches(self) -> Any:
        return self._load().get("saved_searches")

    def close(self) -> None:
        self._document = None

    def _load(self) -> dict[str, Any]:
        if self._document is None:
            text = self.path.read_text(encoding="utf-8")
            if self.path.suffix.lower() == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
            if not isinstance(data, Mapping):
                raise ValueError(f"Catalog document must be a mapping: {self.path}")
            self._document = dict(data)
            log.debug("Catalog document loaded: %s", self.path)
        return self._document


def localize_items(items: Iterable[Any] | None, locale: str) -> list[dict[str, Any]]:
    """Resolve per-locale labels of catalog entries, recursing into children."""
    out: list[dict[str, Any]] = []
    for item in items or ():
        if not isinstance(item, Mapping) or item.get("id") is None:
            continue
        label = item.get("label") or item.get(locale) or item.get("en") or str(item["id"])
        entry: dict[str, Any] = {"id": str(item["id"]), "label": str(label)}
        children = item.get("children")
        if children:
            entry["children"] = localize_items(children, locale)
        out.append(entry)
    return out
