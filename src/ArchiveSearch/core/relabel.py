"""Label refresh after a locale change.

Relabeling joins rows to freshly loaded catalogs by stable id and only ever
rewrites labels: ids, values and touched flags are carried over unchanged.
Applying it twice with the same catalogs gives the same rows as once.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from ArchiveSearch.core.models import LabeledRef, SelectionRow
from ArchiveSearch.core.operators import OperatorCatalog, placeholder_label

FieldCatalogMap = Mapping[str, Any]


def catalog_label(entry: Any) -> str | None:
    """Extract a non-empty label from a catalog entry (ref or mapping)."""
    if entry is None:
        return None
    if isinstance(entry, LabeledRef):
        label = entry.label
    elif isinstance(entry, Mapping):
        label = entry.get("label")
    else:
        label = getattr(entry, "label", None)
    return str(label) if label else None


def parent_index(parent_catalog: Iterable[LabeledRef | Mapping]) -> dict[str, str]:
    """Build an id -> label lookup from a parent catalog listing."""
    index: dict[str, str] = {}
    for item in parent_catalog:
        item_id = item.id if isinstance(item, LabeledRef) else item.get("id")
        label = catalog_label(item)
        if item_id is not None and label is not None:
            index[str(item_id)] = label
    return index


def relabel_field(field: LabeledRef, root_map: FieldCatalogMap, scoped_map: FieldCatalogMap) -> LabeledRef:
    if not field.id:
        return field
    label = catalog_label(root_map.get(field.id))
    if label is None:
        label = catalog_label(scoped_map.get(field.id))
    if label is None:
        return field
    return field.with_label(label)


def relabel_parent(parent: LabeledRef, parents: Mapping[str, str]) -> LabeledRef:
    if not parent.id or parent.id not in parents:
        return parent
    return parent.with_label(parents[parent.id])


def relabel_parent_selection(row: SelectionRow, parents: Mapping[str, str]) -> Any:
    selected = row.parent_selected
    if selected is None:
        return None
    if isinstance(selected, LabeledRef):
        return relabel_parent(selected, parents)
    return tuple(relabel_parent(item, parents) for item in selected)


def relabel_operator(
    operator: LabeledRef | None,
    operators: OperatorCatalog | None,
    locale: str,
) -> LabeledRef | None:
    if operator is None or not operator.id or operators is None:
        return operator
    match = operators.find(operator.id)
    if match is not None:
        return operator.with_label(match.label)
    return operator.with_label(placeholder_label(locale))


def relabel_row(
    row: SelectionRow,
    root_map: FieldCatalogMap,
    scoped_map: FieldCatalogMap,
    parents: Mapping[str, str],
    operators: OperatorCatalog | None,
    locale: str,
) -> SelectionRow:
    return row.evolve(
        field=relabel_field(row.field, root_map, scoped_map),
        parent=relabel_parent(row.parent, parents),
        parent_selected=relabel_parent_selection(row, parents),
        operator=relabel_operator(row.operator, operators, locale),
    )


def relabel_rows(
    rows: Sequence[SelectionRow],
    root_map: FieldCatalogMap,
    scoped_map: FieldCatalogMap,
    parent_catalog: Iterable[LabeledRef | Mapping],
    operators: OperatorCatalog | None,
    locale: str,
) -> list[SelectionRow]:
    """Relabel every row for `locale`.

    Args:
        rows: Current rows.
        root_map: Field id -> entry for the root catalog; consulted first.
        scoped_map: Field id -> entry for the parent-scoped catalog.
        parent_catalog: Parent refs loaded for the new locale.
        operators: Operator tables for the new locale; the operator step is
            skipped when None.
        locale: New display locale, used for the placeholder label.

    Returns:
        New row list in the same order.
    """
    parents = parent_index(parent_catalog)
    return [relabel_row(row, root_map, scoped_map, parents, operators, locale) for row in rows]
