"""Saved-group payload normalization.

Saved searches arrive in several shapes: one `{groupTitle, groupFields}`
object, a list of such objects, or a legacy `{fields: [...]}` (or bare row
list) with no group wrapper. All of them are normalized into a tuple of
`SavedGroup` trees whose leaves carry deterministic unique ids.
"""

from __future__ import annotations

import hashlib
import json
from enum import Enum
from typing import Any, Mapping, Sequence

from ArchiveSearch.core.models import (
    FieldGroup,
    FieldIdentifier,
    LabeledRef,
    SavedField,
    SavedGroup,
    SelectionRow,
)
from ArchiveSearch.core.serialize import ref_from_raw, row_from_dict, row_to_dict
from ArchiveSearch.utils.log import log

DEFAULT_GROUP_TITLE = LabeledRef(id="default-group", label="Saved Groups")
DEFAULT_FIELD_GROUP_TITLE = LabeledRef(id="default-field-group", label="Search Criteria")


class PayloadShape(str, Enum):
    EMPTY = "empty"
    SINGLE_GROUP = "single_group"
    GROUP_LIST = "group_list"
    LEGACY_FIELDS = "legacy_fields"


def detect_shape(payload: Any) -> PayloadShape:
    """Classify a raw saved-group payload."""
    if not payload:
        return PayloadShape.EMPTY
    if isinstance(payload, Mapping):
        if payload.get("groupTitle") and isinstance(payload.get("groupFields"), list):
            return PayloadShape.SINGLE_GROUP
        if _field_groups_of(payload) is None and isinstance(payload.get("fields"), list):
            return PayloadShape.LEGACY_FIELDS
        return PayloadShape.GROUP_LIST
    if isinstance(payload, Sequence) and not isinstance(payload, (str, bytes)):
        if all(_looks_like_row(item) for item in payload):
            return PayloadShape.LEGACY_FIELDS
        return PayloadShape.GROUP_LIST
    return PayloadShape.EMPTY


def synthetic_unique_id(group_id: str, group_index: int, field_group_index: int, field_index: int) -> str:
    return f"field_{group_id}_{group_index}_{field_group_index}_{field_index}"


def content_key(payload: Any) -> str:
    """Return a SHA-256 digest of the payload's canonical JSON text."""
    text = json.dumps(payload, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class SavedGroupNormalizer:
    """Normalize saved-group payloads, caching results by content."""

    def __init__(self) -> None:
        self._cache: dict[str, tuple[SavedGroup, ...]] = {}

    def normalize(self, payload: Any) -> tuple[SavedGroup, ...]:
        """Convert any supported payload shape into canonical groups.

        Args:
            payload: Raw data as returned by the catalog provider or read
                from storage.

        Returns:
            Canonical groups; empty for empty or unrecognized input.
        """
        shape = detect_shape(payload)
        if shape is PayloadShape.EMPTY:
            return ()

        key = content_key(payload)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        if shape is PayloadShape.SINGLE_GROUP:
            raw_groups: list[Any] = [payload]
        elif shape is PayloadShape.LEGACY_FIELDS:
            raw_groups = [payload if isinstance(payload, Mapping) else {"fields": list(payload)}]
        elif isinstance(payload, Mapping):
            raw_groups = [payload]
        else:
            raw_groups = list(payload)

        groups = tuple(
            self._normalize_group(raw, index)
            for index, raw in enumerate(raw_groups)
            if isinstance(raw, Mapping)
        )
        log.debug("Saved groups normalized: shape=%s groups=%d", shape.value, len(groups))
        self._cache[key] = groups
        return groups

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def _normalize_group(self, raw: Mapping[str, Any], group_index: int) -> SavedGroup:
        title = ref_from_raw(raw.get("groupTitle")) or ref_from_raw(raw.get("title")) or DEFAULT_GROUP_TITLE
        field_groups_raw = _field_groups_of(raw)

        if field_groups_raw is None:
            fields_raw = raw.get("fields")
            if not isinstance(fields_raw, list):
                return SavedGroup(title=title)
            field_group = FieldGroup(
                title=DEFAULT_FIELD_GROUP_TITLE,
                fields=_saved_fields(fields_raw, title.id, group_index, 0),
            )
            return SavedGroup(title=title, field_groups=(field_group,))

        field_groups: list[FieldGroup] = []
        for fg_index, fg_raw in enumerate(field_groups_raw):
            if not isinstance(fg_raw, Mapping):
                continue
            fg_title = ref_from_raw(fg_raw.get("title")) or LabeledRef(
                id=f"group-{fg_index}",
                label=f"Group {fg_index + 1}",
            )
            fields_raw = fg_raw.get("fields")
            fields = _saved_fields(fields_raw, title.id, group_index, fg_index) if isinstance(fields_raw, list) else ()
            field_groups.append(FieldGroup(title=fg_title, fields=fields))
        return SavedGroup(title=title, field_groups=tuple(field_groups))


def _field_groups_of(raw: Mapping[str, Any]) -> list[Any] | None:
    for key in ("groupFields", "fieldGroups"):
        value = raw.get(key)
        if isinstance(value, list):
            return value
    return None


def _looks_like_row(item: Any) -> bool:
    return isinstance(item, Mapping) and "field" in item and not _field_groups_of(item)


def _saved_fields(
    fields_raw: Sequence[Any],
    group_id: str,
    group_index: int,
    field_group_index: int,
) -> tuple[SavedField, ...]:
    out: list[SavedField] = []
    for field_index, item in enumerate(fields_raw):
        if not isinstance(item, Mapping):
            continue
        try:
            row = row_from_dict(item)
        except ValueError as error:
            log.warning("Skipping saved field %s/%d/%d: %s", group_id, field_group_index, field_index, error)
            continue
        unique_id = row.row_id or synthetic_unique_id(group_id, group_index, field_group_index, field_index)
        out.append(SavedField(row=row, unique_id=unique_id))
    return tuple(out)


def field_identifier(field: SavedField | SelectionRow | None) -> FieldIdentifier | None:
    """Return the minimal identity persisted for a selected field."""
    if field is None:
        return None
    if isinstance(field, SavedField):
        if field.unique_id:
            return FieldIdentifier(unique_id=field.unique_id)
        row = field.row
    else:
        row = field
    if row.field.id:
        return FieldIdentifier(
            field_id=row.field.id,
            operator_id=row.operator.id if row.operator else None,
            value=row.value,
        )
    return FieldIdentifier(
        field_label=row.field.label,
        operator_label=row.operator.label if row.operator else None,
        value=row.value,
    )


def groups_to_payload(groups: Sequence[SavedGroup]) -> list[dict[str, Any]]:
    """Render canonical groups back into the `{groupTitle, groupFields}` form."""
    payload: list[dict[str, Any]] = []
    for group in groups:
        payload.append(
            {
                "groupTitle": group.title.to_dict(),
                "groupFields": [
                    {
                        "title": fg.title.to_dict(),
                        "fields": [dict(row_to_dict(saved.row), uniqueId=saved.unique_id) for saved in fg.fields],
                    }
                    for fg in group.field_groups
                ],
            }
        )
    return payload
