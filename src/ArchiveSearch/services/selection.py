"""Selection store: the ordered row collection behind a search."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Sequence

from ArchiveSearch.core.controls import ValueControlResolver
from ArchiveSearch.core.models import (
    EMPTY_PARENT,
    LabeledRef,
    SearchCriteria,
    SelectionRow,
    ValidationResult,
    ValueControl,
)
from ArchiveSearch.core.observable import Observable
from ArchiveSearch.core.operators import OperatorCatalog, pick_default_operator
from ArchiveSearch.core.relabel import (
    FieldCatalogMap,
    parent_index,
    relabel_parent,
    relabel_parent_selection,
    relabel_rows,
)
from ArchiveSearch.core.serialize import ref_from_raw, row_from_dict, row_to_dict
from ArchiveSearch.core.validation import touch_row, validate_rows
from ArchiveSearch.core.wire import convert_to_wire_format
from ArchiveSearch.storage.port import (
    LEGACY_SAVED_SEARCH_KEY,
    SELECTED_FIELDS_KEY,
    StoragePort,
    read_json,
    write_json,
)
from ArchiveSearch.utils.log import log

Rows = tuple[SelectionRow, ...]


class SelectionStore(Observable[Rows]):
    """Ordered rows of the current search, persisted under `selectedFields`.

    The snapshot is an immutable tuple of immutable rows; every mutation
    publishes a new tuple and writes it to storage.

    Args:
        storage: Persistence backend.
        resolver: Control resolver used for defaults and validation.
        operator_catalog: Operator tables for the current locale. Without
            one, new rows start with no operator and the operator relabel
            step is skipped.
    """

    def __init__(
        self,
        storage: StoragePort,
        resolver: ValueControlResolver | None = None,
        operator_catalog: OperatorCatalog | None = None,
    ) -> None:
        super().__init__(())
        self.storage = storage
        self.resolver = resolver or ValueControlResolver()
        self.operator_catalog = operator_catalog

    @property
    def rows(self) -> Rows:
        return self.get_snapshot()

    def __len__(self) -> int:
        return len(self.get_snapshot())

    def row(self, index: int) -> SelectionRow | None:
        rows = self.get_snapshot()
        if 0 <= index < len(rows):
            return rows[index]
        return None

    def set_operator_catalog(self, catalog: OperatorCatalog | None) -> None:
        self.operator_catalog = catalog

    def operator_options(self, field_id: str) -> tuple[LabeledRef, ...]:
        """Return the operators offered for a field, empty without a catalog."""
        if self.operator_catalog is None:
            return ()
        field_type = self.resolver.field_type(SelectionRow(field=LabeledRef(id=field_id)))
        return self.operator_catalog.options_for(field_type)

    def add_field(
        self,
        field: LabeledRef,
        parent: LabeledRef = EMPTY_PARENT,
        path: str = "",
        locale: str = "en",
        is_parent_array: bool = False,
    ) -> SelectionRow:
        """Append a new row for `field` and return it.

        The row starts with an empty value and the default operator for the
        field type, or no operator when the catalog offers none of the
        default candidates.
        """
        probe = SelectionRow(field=field)
        field_type = self.resolver.field_type(probe)
        operator = None
        if self.operator_catalog is not None:
            operator = pick_default_operator(self.operator_catalog.options_for(field_type), field_type)

        row = SelectionRow(
            field=field,
            parent=parent or EMPTY_PARENT,
            parent_selected=(),
            operator=operator,
            value=None,
            is_parent_array=is_parent_array,
            current_language=locale,
        )
        log.debug(
            "Field added: field=%s type=%s operator=%s path=%s",
            field.id,
            field_type.value,
            operator.id if operator else None,
            path,
        )
        self._commit(self.get_snapshot() + (row,))
        return row

    def delete_field(self, index: int) -> bool:
        rows = self.get_snapshot()
        if not 0 <= index < len(rows):
            log.debug("Ignoring delete at out-of-range index %d (rows=%d)", index, len(rows))
            return False
        self._commit(rows[:index] + rows[index + 1:])
        return True

    def clear_fields(self) -> None:
        """Drop all rows and both persistence keys."""
        self._publish(())
        self.storage.remove_item(SELECTED_FIELDS_KEY)
        self.storage.remove_item(LEGACY_SAVED_SEARCH_KEY)
        log.debug("Selection cleared")

    def replace_rows(self, rows: Iterable[SelectionRow]) -> None:
        self._commit(tuple(rows))

    def set_parent(self, index: int, parent: LabeledRef | Mapping[str, Any] | str) -> bool:
        ref = ref_from_raw(parent) or EMPTY_PARENT
        return self._update(index, lambda row: row.evolve(parent=ref, is_parent_array=False, parent_touched=True))

    def set_parent_selection(self, index: int, items: Sequence[LabeledRef | Mapping[str, Any]]) -> bool:
        """Make a multi-valued parent selection authoritative for a row.

        The first selected item is mirrored into `parent`.
        """
        refs = tuple(ref for ref in (ref_from_raw(item) for item in items) if ref is not None)
        first = refs[0] if refs else EMPTY_PARENT
        return self._update(
            index,
            lambda row: row.evolve(
                parent_selected=refs,
                parent=first,
                is_parent_array=True,
                parent_touched=True,
            ),
        )

    def set_operator(self, index: int, operator: LabeledRef | str | None) -> bool:
        """Change a row's operator.

        A bare id is resolved against the operator catalog. The value is
        cleared when the new operator needs a different control shape.
        """
        ref = self._operator_ref(operator)

        def change(row: SelectionRow) -> SelectionRow:
            before = self.resolver.resolve(row)
            updated = row.evolve(operator=ref, operator_touched=True)
            if _shape(before) != _shape(self.resolver.resolve(updated)):
                updated = updated.evolve(value=None, value_touched=False)
            return updated

        return self._update(index, change)

    def set_value(self, index: int, value: Any) -> bool:
        def change(row: SelectionRow) -> SelectionRow:
            control = self.resolver.resolve(row)
            touched: bool | tuple[bool, bool] = (True, True) if control.dual or control.is_similar else True
            return row.evolve(value=value, value_touched=touched)

        return self._update(index, change)

    def control_for(self, index: int) -> ValueControl | None:
        row = self.row(index)
        if row is None:
            return None
        return self.resolver.resolve(row)

    def should_show_value_column(self) -> bool:
        return self.resolver.should_show_value_column(self.get_snapshot())

    def validate_all(self) -> ValidationResult:
        """Validate every row and mark all of them touched."""
        rows = self.get_snapshot()
        result = validate_rows(rows, self.resolver)
        if rows:
            self._commit(tuple(touch_row(row, self.resolver.resolve(row)) for row in rows))
        if not result.is_valid:
            log.debug("Validation failed for: %s", ", ".join(result.invalid_fields))
        return result

    def update_field_labels(
        self,
        root_map: FieldCatalogMap,
        scoped_map: FieldCatalogMap,
        parent_catalog: Iterable[LabeledRef | Mapping[str, Any]],
        locale: str,
    ) -> None:
        """Relabel all rows for `locale` from freshly loaded catalogs."""
        rows = self.get_snapshot()
        if not rows:
            return
        relabeled = relabel_rows(rows, root_map, scoped_map, parent_catalog, self.operator_catalog, locale)
        self._commit(tuple(row.evolve(current_language=locale) for row in relabeled))

    def update_parent_selection_labels(self, parent_catalog: Iterable[LabeledRef | Mapping[str, Any]]) -> None:
        rows = self.get_snapshot()
        if not rows:
            return
        parents = parent_index(parent_catalog)
        self._commit(
            tuple(
                row.evolve(
                    parent=relabel_parent(row.parent, parents),
                    parent_selected=relabel_parent_selection(row, parents),
                )
                for row in rows
            )
        )

    def convert_to_wire_format(self, rows: Sequence[SelectionRow] | None = None) -> list[SearchCriteria]:
        return convert_to_wire_format(self.get_snapshot() if rows is None else rows)

    def parent_ids(self) -> list[str]:
        """Return the distinct parent ids referenced by the rows, in order."""
        seen: dict[str, None] = {}
        for row in self.get_snapshot():
            if row.parent.id:
                seen.setdefault(row.parent.id, None)
            for ref in row.parent_selected_refs():
                if ref.id:
                    seen.setdefault(ref.id, None)
        return list(seen)

    def load_from_persistence(self, locale: str) -> Rows:
        """Restore rows saved under `selectedFields`.

        Malformed data yields an empty collection. Restored rows are stamped
        with `locale`; storage is not rewritten.
        """
        raw = read_json(self.storage, SELECTED_FIELDS_KEY, [])
        if not isinstance(raw, list):
            log.warning("Ignoring saved selection: expected a list, got %s", type(raw).__name__)
            raw = []

        rows: list[SelectionRow] = []
        for position, item in enumerate(raw):
            if not isinstance(item, Mapping):
                log.warning("Skipping saved row %d: not an object", position)
                continue
            try:
                rows.append(row_from_dict(item).evolve(current_language=locale))
            except ValueError as error:
                log.warning("Skipping saved row %d: %s", position, error)

        log.debug("Selection restored: rows=%d locale=%s", len(rows), locale)
        self._publish(tuple(rows))
        return self.get_snapshot()

    def _operator_ref(self, operator: LabeledRef | str | None) -> LabeledRef | None:
        if operator is None or isinstance(operator, LabeledRef):
            return operator
        if self.operator_catalog is not None:
            found = self.operator_catalog.find(operator)
            if found is not None:
                return found
        return LabeledRef(id=operator, label=operator)

    def _update(self, index: int, change: Callable[[SelectionRow], SelectionRow]) -> bool:
        rows = self.get_snapshot()
        if not 0 <= index < len(rows):
            log.debug("Ignoring update at out-of-range index %d (rows=%d)", index, len(rows))
            return False
        self._commit(rows[:index] + (change(rows[index]),) + rows[index + 1:])
        return True

    def _commit(self, rows: Rows) -> None:
        write_json(self.storage, SELECTED_FIELDS_KEY, [row_to_dict(row) for row in rows])
        self._publish(rows)


def _shape(control: ValueControl) -> tuple[bool, bool, bool, str]:
    return (control.show, control.dual, control.is_similar, control.control_kind)
