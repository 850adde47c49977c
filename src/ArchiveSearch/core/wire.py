"""Serialization of rows into the backend wire format.

The transform is lossy by intent: object values collapse to their ids and
range values to a single `"-"`-joined string.
"""

from __future__ import annotations

from typing import Any, Iterable

from ArchiveSearch.core.models import (
    LabeledRef,
    SearchCriteria,
    SearchRequest,
    SelectionRow,
)

VALUE_SEPARATOR = "-"

_EMPTY_OPERATOR = LabeledRef(id="", label="")


def collapse_value(value: Any) -> Any:
    """Collapse a row value into its wire scalar.

    Args:
        value: Row value (None, scalar, ref, or tuple of those).

    Returns:
        Sequences joined with ``"-"`` after mapping refs to their ids,
        a single ref replaced by its id, scalars unchanged.
    """
    if isinstance(value, (tuple, list)):
        parts = [item.id if isinstance(item, LabeledRef) else item for item in value]
        return VALUE_SEPARATOR.join(_scalar_text(part) for part in parts)
    if isinstance(value, LabeledRef):
        return value.id
    return value


def row_to_criteria(row: SelectionRow) -> SearchCriteria:
    operator = row.operator if row.operator is not None else _EMPTY_OPERATOR
    return SearchCriteria(
        row_id=row.row_id or "",
        parent=LabeledRef(id=row.parent.id, label=row.parent.label),
        parent_selected=row.parent_selected,
        field=LabeledRef(id=row.field.id, label=row.field.label),
        operator=LabeledRef(id=operator.id or "", label=operator.label or ""),
        value=collapse_value(row.value),
    )


def convert_to_wire_format(rows: Iterable[SelectionRow]) -> list[SearchCriteria]:
    """Convert rows into wire criteria without touching the input."""
    return [row_to_criteria(row) for row in rows]


def build_search_request(title: LabeledRef, rows: Iterable[SelectionRow]) -> SearchRequest:
    return SearchRequest(title=title, fields=tuple(convert_to_wire_format(rows)))


def _scalar_text(value: Any) -> str:
    # Matches how the UI joined mixed arrays: None -> "", floats without a
    # fractional part lose the ".0".
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
