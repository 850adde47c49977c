"""Plain-text rendering of rows, validation results and saved groups."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from ArchiveSearch.core.controls import ValueControlResolver
from ArchiveSearch.core.models import LabeledRef, SavedGroup, SelectionRow, ValidationResult
from ArchiveSearch.services.accordion import AccordionState, field_group_key, group_key


def _fmt_value(value: Any) -> str:
    """Format a row value for display.

    Args:
        value: Row value (None, scalar, ref or tuple).

    Returns:
        A short string; "-" when no value is set.
    """
    if value is None or value == "":
        return "-"
    if isinstance(value, LabeledRef):
        return value.label or value.id
    if isinstance(value, tuple):
        return " .. ".join(_fmt_value(item) for item in value)
    return str(value)


def _fmt_parent(row: SelectionRow) -> str:
    if row.is_parent_array:
        refs = row.parent_selected_refs()
        return ", ".join(ref.label or ref.id for ref in refs) or "-"
    return row.parent.label or row.parent.id or "-"


def render_rows(rows: Sequence[SelectionRow], resolver: ValueControlResolver | None = None) -> str:
    """Render rows into a numbered text block.

    Args:
        rows: Rows in display order.
        resolver: Used to show the control each row needs.

    Returns:
        Text ready to be printed.
    """
    if not rows:
        return "No rows selected."
    resolver = resolver or ValueControlResolver()
    lines: list[str] = []
    for idx, row in enumerate(rows):
        operator = row.operator.label or row.operator.id if row.operator else "-"
        control = resolver.resolve(row)
        kind = "hidden"
        if control.show:
            kind = control.control_kind + (" similar" if control.is_similar else " dual" if control.dual else "")
        lines.append(f"[{idx}] {row.field.label or row.field.id} ({row.field.id})")
        lines.append(f"    Parent: {_fmt_parent(row)}")
        lines.append(f"    Operator: {operator}  Value: {_fmt_value(row.value)}  Control: {kind}")
    return "\n".join(lines)


def render_validation(result: ValidationResult) -> str:
    if result.is_valid:
        return "All rows are valid."
    lines = ["Invalid rows:"]
    for failure in result.failures:
        lines.append(f"  [{failure.index}] {failure.label}: {', '.join(failure.checks)}")
    return "\n".join(lines)


def render_groups(groups: Iterable[SavedGroup], state: AccordionState) -> str:
    """Render the saved-group tree with expand and selection markers."""
    lines: list[str] = []
    selected = state.selected_field.unique_id if state.selected_field else None
    for group in groups:
        gid = group_key(group)
        expanded = state.is_group_expanded(gid)
        lines.append(f"{'-' if expanded else '+'} {group.title.label or gid} [{gid}]")
        if not expanded:
            continue
        for field_group in group.field_groups:
            fid = field_group_key(field_group)
            fg_expanded = state.is_field_group_expanded(fid)
            lines.append(f"  {'-' if fg_expanded else '+'} {field_group.title.label or fid} [{fid}]")
            if not fg_expanded:
                continue
            for saved in field_group.fields:
                marker = "*" if saved.unique_id == selected else " "
                row = saved.row
                operator = row.operator.label or row.operator.id if row.operator else "-"
                lines.append(
                    f"    {marker} {row.field.label or row.field.id} {operator} {_fmt_value(row.value)} [{saved.unique_id}]"
                )
    if state.error.has_error:
        lines.append(f"! {state.error.message}")
    return "\n".join(lines) if lines else "No saved groups."
