"""Row validation: parent, operator and value checks.

Validation never raises; failures are reported as `ValidationResult`.
"""

from __future__ import annotations

import re
from typing import Any, Sequence

from ArchiveSearch.core.controls import ValueControlResolver
from ArchiveSearch.core.models import (
    LabeledRef,
    RowFailure,
    SelectionRow,
    ValidationResult,
    ValueControl,
)

_NUMERIC_RE = re.compile(r"^-?\d*\.?\d+$")

CHECK_PARENT = "parent"
CHECK_OPERATOR = "operator"
CHECK_VALUE = "value"


def is_numeric(value: Any) -> bool:
    """Return True when `value` matches the strict numeric pattern.

    Numbers are checked through their text form, so ``0`` and ``"0"`` are
    both valid while ``""``, ``None`` and booleans are not.
    """
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return bool(_NUMERIC_RE.match(str(value)))


def is_present(value: Any) -> bool:
    """Return True for anything except None and the empty string."""
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, LabeledRef):
        return value.id != ""
    return True


def is_parent_valid(row: SelectionRow) -> bool:
    if row.parent is not None and row.parent.id:
        return True
    selected = row.parent_selected
    if selected is None:
        return False
    if isinstance(selected, LabeledRef):
        return bool(selected.id)
    return len(selected) > 0


def is_operator_valid(row: SelectionRow) -> bool:
    return row.operator is not None and bool(row.operator.id)


def is_value_valid(row: SelectionRow, control: ValueControl) -> bool:
    """Check the row value against its control shape."""
    if not control.show:
        return True

    value = row.value
    if control.is_similar:
        return _is_pair(value) and all(is_present(item) for item in value)

    if control.dual:
        if not _is_pair(value):
            return False
        if control.control_kind == "number":
            return all(is_numeric(item) for item in value)
        if control.control_kind in ("dropdown", "button"):
            return all(_is_filled(item) for item in value)
        return all(is_present(item) for item in value)

    if control.control_kind == "number":
        return is_numeric(value)
    if control.control_kind == "dropdown":
        if isinstance(value, tuple):
            return any(is_present(item) for item in value)
        return is_present(value)
    if control.control_kind == "button":
        return _is_filled(value)
    return is_present(value)


def validate_rows(
    rows: Sequence[SelectionRow],
    resolver: ValueControlResolver | None = None,
) -> ValidationResult:
    """Run all three checks over every row.

    Args:
        rows: Rows in display order.
        resolver: Control resolver; a default one is used when omitted.

    Returns:
        Aggregated result with one `RowFailure` per failing row.
    """
    resolver = resolver or ValueControlResolver()
    failures: list[RowFailure] = []
    for index, row in enumerate(rows):
        checks: list[str] = []
        if not is_parent_valid(row):
            checks.append(CHECK_PARENT)
        if not is_operator_valid(row):
            checks.append(CHECK_OPERATOR)
        if not is_value_valid(row, resolver.resolve(row)):
            checks.append(CHECK_VALUE)
        if checks:
            label = row.field.label or row.field.id
            failures.append(RowFailure(index=index, label=label, checks=tuple(checks)))
    return ValidationResult(
        is_valid=not failures,
        invalid_fields=tuple(failure.label for failure in failures),
        failures=tuple(failures),
    )


def touch_row(row: SelectionRow, control: ValueControl) -> SelectionRow:
    """Return a copy with every touched flag set."""
    value_touched: bool | tuple[bool, bool] = (True, True) if control.dual or control.is_similar else True
    return row.evolve(parent_touched=True, operator_touched=True, value_touched=value_touched)


def _is_pair(value: Any) -> bool:
    return isinstance(value, tuple) and len(value) == 2


def _is_filled(value: Any) -> bool:
    if isinstance(value, LabeledRef):
        return bool(value.id)
    return bool(value)
