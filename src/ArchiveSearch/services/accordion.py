"""Expand/collapse and selection state over saved-group trees."""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Sequence

from ArchiveSearch.core.models import ErrorState, FieldGroup, FieldIdentifier, SavedField, SavedGroup
from ArchiveSearch.core.observable import Observable
from ArchiveSearch.services.saved_groups import field_identifier
from ArchiveSearch.storage.port import ACCORDION_STATE_KEY, StoragePort, write_json
from ArchiveSearch.utils.log import log

RESTORE_ERROR_MESSAGE = "Failed to restore saved state"
DEFAULT_GROUP_ID = "default"
UNNAMED_FIELD_GROUP_ID = "unnamed"


@dataclass(frozen=True, slots=True)
class AccordionState:
    """Snapshot of the tracker.

    Expansion ids keep insertion order so the persisted lists are stable.
    """

    expanded_groups: tuple[str, ...] = ()
    expanded_fields: tuple[str, ...] = ()
    selected_field: SavedField | None = None
    error: ErrorState = ErrorState()

    def is_group_expanded(self, group_id: str) -> bool:
        return group_id in self.expanded_groups

    def is_field_group_expanded(self, field_group_id: str) -> bool:
        return field_group_id in self.expanded_fields


def group_key(group: SavedGroup) -> str:
    return group.title.id or DEFAULT_GROUP_ID


def field_group_key(field_group: FieldGroup) -> str:
    return field_group.title.id or UNNAMED_FIELD_GROUP_ID


class AccordionStateTracker(Observable[AccordionState]):
    """Track expanded nodes and the selected leaf of the saved-group tree.

    Collapsing a group or a field group that contains the selected field
    clears the selection. Every mutation persists
    `{expandedGroups, expandedFields, selectedField}` under
    `savedAccordionState`, with the selection stored as a minimal
    identifier.
    """

    def __init__(self, storage: StoragePort, groups: Iterable[SavedGroup] = ()) -> None:
        super().__init__(AccordionState())
        self.storage = storage
        self._groups: tuple[SavedGroup, ...] = tuple(groups)
        self._pending_selection: FieldIdentifier | None = None
        self._restore_state()

    @property
    def groups(self) -> tuple[SavedGroup, ...]:
        return self._groups

    @property
    def pending_selection(self) -> FieldIdentifier | None:
        """Identifier restored from storage that has not been resolved yet."""
        return self._pending_selection

    def load_groups(self, groups: Iterable[SavedGroup]) -> None:
        self._groups = tuple(groups)

    def toggle_group(self, group_id: str, groups: Sequence[SavedGroup] | None = None) -> None:
        if not group_id:
            return
        state = self.get_snapshot()
        tree = self._groups if groups is None else tuple(groups)

        if group_id not in state.expanded_groups:
            self._commit(replace(state, expanded_groups=state.expanded_groups + (group_id,)))
            return

        expanded_groups = tuple(gid for gid in state.expanded_groups if gid != group_id)
        expanded_fields = state.expanded_fields
        selected = state.selected_field
        # Untitled groups all share the default id, so one collapse hides every match.
        for group in (g for g in tree if group_key(g) == group_id):
            closed = {field_group_key(fg) for fg in group.field_groups}
            expanded_fields = tuple(fid for fid in expanded_fields if fid not in closed)
            if selected is not None and _contains(group.iter_fields(), selected):
                log.debug("Selection cleared by collapsing group %s", group_id)
                selected = None
        self._commit(
            replace(
                state,
                expanded_groups=expanded_groups,
                expanded_fields=expanded_fields,
                selected_field=selected,
            )
        )

    def toggle_field(self, field_group_id: str, groups: Sequence[SavedGroup] | None = None) -> None:
        if not field_group_id:
            return
        state = self.get_snapshot()

        if field_group_id not in state.expanded_fields:
            self._commit(replace(state, expanded_fields=state.expanded_fields + (field_group_id,)))
            return

        selected = state.selected_field
        tree = self._groups if groups is None else tuple(groups)
        if selected is not None:
            for group in tree:
                for field_group in group.field_groups:
                    if field_group_key(field_group) == field_group_id and _contains(field_group.fields, selected):
                        log.debug("Selection cleared by collapsing field group %s", field_group_id)
                        selected = None
        self._commit(
            replace(
                state,
                expanded_fields=tuple(fid for fid in state.expanded_fields if fid != field_group_id),
                selected_field=selected,
            )
        )

    def select_field(self, field: SavedField | None) -> None:
        self._pending_selection = None
        self._commit(replace(self.get_snapshot(), selected_field=field))

    def clear_selected_field(self) -> None:
        self.select_field(None)

    def is_field_selected(self, field: SavedField) -> bool:
        selected = self.get_snapshot().selected_field
        return selected is not None and selected.unique_id == field.unique_id

    def reset(self) -> None:
        """Drop all state, including the persisted copy."""
        self._pending_selection = None
        self._publish(AccordionState())
        self.storage.remove_item(ACCORDION_STATE_KEY)

    def find_field(
        self,
        identifier: FieldIdentifier | Mapping[str, Any] | None,
        groups: Sequence[SavedGroup] | None = None,
    ) -> SavedField | None:
        """Locate a field by unique id, else by field/operator/value.

        Args:
            identifier: Identifier object or its persisted dict form.
            groups: Tree to search; defaults to the loaded groups.
        """
        if identifier is None:
            return None
        if isinstance(identifier, Mapping):
            identifier = FieldIdentifier.from_dict(identifier)
        tree = self._groups if groups is None else tuple(groups)

        if identifier.unique_id:
            for group in tree:
                for saved in group.iter_fields():
                    if saved.unique_id == identifier.unique_id:
                        return saved

        for group in tree:
            for saved in group.iter_fields():
                if _matches(saved, identifier):
                    return saved
        return None

    def restore_selection(self, groups: Sequence[SavedGroup] | None = None) -> SavedField | None:
        """Resolve the selection restored from storage against a tree."""
        if groups is not None:
            self.load_groups(groups)
        if self._pending_selection is None:
            return self.get_snapshot().selected_field
        found = self.find_field(self._pending_selection)
        if found is None:
            log.debug("Saved selection not found in loaded groups")
            return None
        self._pending_selection = None
        self._publish(replace(self.get_snapshot(), selected_field=found))
        return found

    def _restore_state(self) -> None:
        raw = self.storage.get_item(ACCORDION_STATE_KEY)
        if not raw:
            return
        try:
            data = json.loads(raw)
            if not isinstance(data, Mapping):
                raise ValueError("accordion state must be an object")
            expanded_groups = _id_tuple(data.get("expandedGroups"), "expandedGroups")
            expanded_fields = _id_tuple(data.get("expandedFields"), "expandedFields")
            selected = data.get("selectedField")
            self._pending_selection = FieldIdentifier.from_dict(selected) if isinstance(selected, Mapping) and selected else None
        except (TypeError, ValueError) as error:
            log.warning("Failed to restore accordion state: %s", error)
            self._publish(AccordionState(error=ErrorState(has_error=True, message=RESTORE_ERROR_MESSAGE)))
            return
        self._publish(AccordionState(expanded_groups=expanded_groups, expanded_fields=expanded_fields))

    def _commit(self, state: AccordionState) -> None:
        identifier = field_identifier(state.selected_field)
        write_json(
            self.storage,
            ACCORDION_STATE_KEY,
            {
                "expandedGroups": list(state.expanded_groups),
                "expandedFields": list(state.expanded_fields),
                "selectedField": identifier.to_dict() if identifier is not None else None,
            },
        )
        self._publish(state)


def _contains(fields: Iterable[SavedField], selected: SavedField) -> bool:
    return any(saved.unique_id == selected.unique_id for saved in fields)


def _matches(saved: SavedField, identifier: FieldIdentifier) -> bool:
    row = saved.row
    if identifier.value is not None and identifier.value != "" and row.value != identifier.value:
        return False
    if identifier.field_id:
        if row.field.id != identifier.field_id:
            return False
        return not identifier.operator_id or (row.operator is not None and row.operator.id == identifier.operator_id)
    if identifier.field_label:
        operator_label = row.operator.label if row.operator is not None else None
        return row.field.label == identifier.field_label and operator_label == identifier.operator_label
    return False


def _id_tuple(value: Any, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise TypeError(f"{key} must be a list")
    return tuple(str(item) for item in value)
