"""Value-control resolution.

Decides, from the field type and the chosen operator only, which value
control a row needs and which data source feeds a dropdown.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from ArchiveSearch.core.fields import (
    BRAND_SOURCE,
    DROPDOWN_SOURCES,
    FIELD_TYPES,
    FieldType,
    dropdown_source_for,
    resolve_field_type,
)
from ArchiveSearch.core.models import LabeledRef, SelectionRow, ValueControl
from ArchiveSearch.core.operators import (
    SELECT_SENTINEL,
    is_dual_operator,
    is_no_value_operator,
    is_similar_operator,
)
from ArchiveSearch.utils.log import log

HIDDEN = ValueControl()

_CONTROL_KINDS = {
    FieldType.DATE: "date",
    FieldType.NUMBER: "number",
    FieldType.DROPDOWN: "dropdown",
    FieldType.BUTTON: "button",
}


def control_kind_for(field_type: FieldType | str) -> str:
    """Map a field type to its primitive control kind.

    Boolean and time fields render as text here; toggle semantics for
    booleans belong to the caller.
    """
    try:
        resolved = FieldType(field_type)
    except ValueError:
        return "text"
    return _CONTROL_KINDS.get(resolved, "text")


class ValueControlResolver:
    """Resolve the control shape of a row.

    Args:
        field_types: Field id -> type table.
        dropdown_sources: Field id -> dropdown data source table.
        similar_source: Source attached to every "similar" control.
    """

    def __init__(
        self,
        field_types: Mapping[str, FieldType] = FIELD_TYPES,
        dropdown_sources: Mapping[str, str] = DROPDOWN_SOURCES,
        similar_source: str = BRAND_SOURCE,
    ) -> None:
        self.field_types = field_types
        self.dropdown_sources = dropdown_sources
        self.similar_source = similar_source

    def field_type(self, row: SelectionRow) -> FieldType:
        return resolve_field_type(row.field.id if row.field else None, self.field_types)

    def resolve(self, row: SelectionRow, field_type: FieldType | None = None) -> ValueControl:
        """Return the value control for a row.

        Args:
            row: The row to inspect.
            field_type: Already-resolved field type, looked up when omitted.

        Returns:
            Control shape. Hidden when no operator is chosen, the operator
            is the `select` sentinel, or it takes no value.
        """
        operator_id = (row.operator.id if row.operator else "").strip().lower()
        if not operator_id or operator_id == SELECT_SENTINEL:
            return HIDDEN
        if is_no_value_operator(operator_id):
            return HIDDEN

        resolved_type = field_type if field_type is not None else self.field_type(row)
        kind = control_kind_for(resolved_type)
        source = dropdown_source_for(row.field.id, self.dropdown_sources) if kind == "dropdown" else None

        if is_similar_operator(operator_id):
            return ValueControl(
                show=True,
                dual=False,
                is_similar=True,
                control_kind=kind,
                dropdown_source=source,
                similar_source=self.similar_source,
            )
        if is_dual_operator(operator_id):
            return ValueControl(show=True, dual=True, control_kind=kind, dropdown_source=source)
        return ValueControl(show=True, control_kind=kind, dropdown_source=source)

    def should_show_value_column(self, rows: Iterable[SelectionRow]) -> bool:
        """Return True when any row with a chosen operator shows a control."""
        for row in rows:
            if row.operator is None or not row.operator.id:
                continue
            if self.resolve(row).show:
                return True
        return False


class DropdownDataRegistry:
    """Item lists behind each dropdown data source key."""

    def __init__(self, dropdown_sources: Mapping[str, str] = DROPDOWN_SOURCES) -> None:
        self.dropdown_sources = dropdown_sources
        self._items: dict[str, tuple[LabeledRef, ...]] = {}

    def set_source(self, source: str, items: Sequence[LabeledRef | Mapping]) -> None:
        refs: list[LabeledRef] = []
        for item in items:
            if isinstance(item, LabeledRef):
                refs.append(item)
            elif isinstance(item, Mapping) and item.get("id") is not None:
                refs.append(LabeledRef(id=str(item["id"]), label=str(item.get("label") or "")))
        self._items[source] = tuple(refs)
        log.debug("Dropdown source loaded: source=%s count=%d", source, len(refs))

    def items_for_source(self, source: str | None) -> tuple[LabeledRef, ...]:
        if source is None:
            return ()
        items = self._items.get(source)
        if items is None:
            log.warning("No dropdown data for source %s, returning empty list", source)
            return ()
        return items

    def items_for_field(self, field_id: str) -> tuple[LabeledRef, ...]:
        return self.items_for_source(dropdown_source_for(field_id, self.dropdown_sources))

    def items_for_control(self, control: ValueControl) -> tuple[LabeledRef, ...]:
        return self.items_for_source(control.dropdown_source)
