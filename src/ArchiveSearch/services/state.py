"""Persisted search-page state outside the row collection."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from ArchiveSearch.core.models import LabeledRef, ParentSelection, SavedGroup, freeze_parent_selection, thaw_value
from ArchiveSearch.core.observable import Observable
from ArchiveSearch.services.saved_groups import SavedGroupNormalizer
from ArchiveSearch.storage.port import (
    ACCORDION_STATE_KEY,
    SAVED_GROUPS_KEY,
    SEARCH_NAME_ID_KEY,
    SEARCH_NAME_KEY,
    SELECTED_FIELDS_KEY,
    SELECTED_PARENTS_KEY,
    StoragePort,
    read_json,
    write_json,
)
from ArchiveSearch.utils.log import log

ACCORDION_KEY_PREFIX = "accordion-"
ACCORDION_KEY_MARKERS = ("-system-", "-first-")


@dataclass(frozen=True, slots=True)
class SearchState:
    selected_parents: ParentSelection = None
    search_name: str = ""
    search_name_id: str = ""
    saved_groups: tuple[SavedGroup, ...] = ()


def is_accordion_key(key: str) -> bool:
    """Return True for keys written by accordion widgets."""
    return key.startswith(ACCORDION_KEY_PREFIX) or any(marker in key for marker in ACCORDION_KEY_MARKERS)


class SearchStateManager(Observable[SearchState]):
    """Selected parents ("system types"), search name and saved groups.

    State is loaded from storage on construction. `reset_all_state` backs
    the "Clear" action: it drops the parent selection and every
    selection-related key, but keeps the saved groups.
    """

    def __init__(self, storage: StoragePort, normalizer: SavedGroupNormalizer | None = None) -> None:
        super().__init__(SearchState())
        self.storage = storage
        self.normalizer = normalizer or SavedGroupNormalizer()
        self._load()

    def _load(self) -> None:
        parents = freeze_parent_selection(read_json(self.storage, SELECTED_PARENTS_KEY, None))
        groups = self.normalizer.normalize(read_json(self.storage, SAVED_GROUPS_KEY, None))
        self._publish(
            SearchState(
                selected_parents=parents,
                search_name=self.storage.get_item(SEARCH_NAME_KEY) or "",
                search_name_id=self.storage.get_item(SEARCH_NAME_ID_KEY) or "",
                saved_groups=groups,
            )
        )

    @property
    def selected_parents(self) -> ParentSelection:
        return self.get_snapshot().selected_parents

    def selected_parent_ids(self) -> list[str]:
        selected = self.selected_parents
        if selected is None:
            return []
        refs = (selected,) if isinstance(selected, LabeledRef) else selected
        return [ref.id for ref in refs if ref.id]

    def set_selected_parents(self, value: Any) -> None:
        """Store a parent ref, a list of refs, or None to clear."""
        frozen = freeze_parent_selection(value)
        if frozen is None:
            self.storage.remove_item(SELECTED_PARENTS_KEY)
        else:
            write_json(self.storage, SELECTED_PARENTS_KEY, thaw_value(frozen))
        self._publish(replace(self.get_snapshot(), selected_parents=frozen))

    def set_search_name(self, name: str, name_id: str = "") -> None:
        self.storage.set_item(SEARCH_NAME_KEY, name)
        self.storage.set_item(SEARCH_NAME_ID_KEY, name_id)
        self._publish(replace(self.get_snapshot(), search_name=name, search_name_id=name_id))

    def clear_search_name(self) -> None:
        self.storage.remove_item(SEARCH_NAME_KEY)
        self.storage.remove_item(SEARCH_NAME_ID_KEY)
        self._publish(replace(self.get_snapshot(), search_name="", search_name_id=""))

    @property
    def saved_groups(self) -> tuple[SavedGroup, ...]:
        return self.get_snapshot().saved_groups

    def set_saved_groups(self, payload: Any) -> tuple[SavedGroup, ...]:
        """Persist a raw saved-group payload and publish its normalized form."""
        groups = self.normalizer.normalize(payload)
        if payload is None:
            self.storage.remove_item(SAVED_GROUPS_KEY)
        else:
            write_json(self.storage, SAVED_GROUPS_KEY, payload)
        self._publish(replace(self.get_snapshot(), saved_groups=groups))
        return groups

    def reset_all_state(self) -> list[str]:
        """Clear parent selection and selection-related storage.

        Returns:
            Accordion widget keys that were removed.
        """
        self.set_selected_parents(None)
        self.storage.remove_item(ACCORDION_STATE_KEY)
        self.storage.remove_item(SELECTED_FIELDS_KEY)

        removed = [key for key in list(self.storage.keys()) if is_accordion_key(key)]
        for key in removed:
            self.storage.remove_item(key)
        log.debug("Search state reset: removed %d accordion keys", len(removed))
        return removed
