"""JSON mapping for persisted rows.

Persisted rows keep the camelCase keys of the storage format. Loading is
tolerant: unknown keys are ignored, the legacy `rowid` key is accepted, and
legacy rows whose field or operator is a bare string are lifted into refs.
"""

from __future__ import annotations

from typing import Any, Mapping

from ArchiveSearch.core.models import (
    EMPTY_PARENT,
    LabeledRef,
    SelectionRow,
    thaw_value,
)


def ref_from_raw(raw: Any) -> LabeledRef | None:
    """Build a ref from `{id, label}`, a bare string, or a ref."""
    if isinstance(raw, LabeledRef):
        return raw
    if isinstance(raw, Mapping):
        if raw.get("id") is None:
            return None
        return LabeledRef(id=str(raw["id"]), label=str(raw.get("label") or ""))
    if isinstance(raw, (str, int)) and not isinstance(raw, bool):
        text = str(raw)
        return LabeledRef(id=text, label=text)
    return None


def row_to_dict(row: SelectionRow) -> dict[str, Any]:
    value_touched = list(row.value_touched) if isinstance(row.value_touched, tuple) else row.value_touched
    return {
        "rowId": row.row_id,
        "parent": row.parent.to_dict(),
        "parentSelected": thaw_value(row.parent_selected),
        "field": row.field.to_dict(),
        "operator": row.operator.to_dict() if row.operator is not None else None,
        "value": thaw_value(row.value),
        "isParentArray": row.is_parent_array,
        "parentTouched": row.parent_touched,
        "operatorTouched": row.operator_touched,
        "valueTouched": value_touched,
        "currentLanguage": row.current_language,
    }


def row_from_dict(raw: Mapping[str, Any]) -> SelectionRow:
    """Parse one persisted or saved row.

    Raises:
        ValueError: If the row has no usable field.
    """
    field = ref_from_raw(raw.get("field"))
    if field is None:
        raise ValueError("row has no field")

    row_id = raw.get("rowId")
    if row_id is None:
        row_id = raw.get("rowid")

    value_touched = raw.get("valueTouched", False)
    if isinstance(value_touched, list):
        value_touched = tuple(bool(flag) for flag in value_touched)
    else:
        value_touched = bool(value_touched)

    return SelectionRow(
        field=field,
        parent=ref_from_raw(raw.get("parent")) or EMPTY_PARENT,
        row_id=str(row_id) if row_id is not None else "",
        parent_selected=raw.get("parentSelected"),
        operator=ref_from_raw(raw.get("operator")),
        value=raw.get("value"),
        is_parent_array=bool(raw.get("isParentArray", False)),
        parent_touched=bool(raw.get("parentTouched", False)),
        operator_touched=bool(raw.get("operatorTouched", False)),
        value_touched=value_touched,
        current_language=str(raw.get("currentLanguage") or ""),
    )
