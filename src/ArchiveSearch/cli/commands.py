"""Command implementations for the ArchiveSearch CLI.

Each command works on an `EngineSession` and returns the text to print,
keeping parameter parsing in the click layer.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Sequence

from ArchiveSearch.cli.render import render_groups, render_rows, render_validation
from ArchiveSearch.config import AppConfig
from ArchiveSearch.core.models import EMPTY_PARENT, LabeledRef
from ArchiveSearch.core.relabel import catalog_label
from ArchiveSearch.core.wire import build_search_request
from ArchiveSearch.services.accordion import AccordionStateTracker
from ArchiveSearch.services.catalog import CatalogBundle, CatalogService, LocaleSession
from ArchiveSearch.services.selection import SelectionStore
from ArchiveSearch.services.state import SearchStateManager
from ArchiveSearch.storage.port import StoragePort
from ArchiveSearch.utils.log import log


@dataclass(slots=True)
class EngineSession:
    """Engine components wired for one CLI invocation."""

    config: AppConfig
    storage: StoragePort
    catalog: CatalogService
    store: SelectionStore
    state: SearchStateManager
    accordion: AccordionStateTracker
    locale: str
    bundle: CatalogBundle | None = None

    def field_ref(self, field_id: str, label: str | None = None) -> LabeledRef:
        """Build a field ref, taking the label from the loaded catalogs."""
        if label:
            return LabeledRef(id=field_id, label=label)
        if self.bundle is not None:
            for catalog in (self.bundle.root_map, self.bundle.scoped_map):
                found = catalog_label(catalog.get(field_id))
                if found:
                    return LabeledRef(id=field_id, label=found)
        return LabeledRef(id=field_id, label=field_id)

    def parent_ref(self, parent_id: str, label: str | None = None) -> LabeledRef:
        if label:
            return LabeledRef(id=parent_id, label=label)
        if self.bundle is not None:
            for parent in self.bundle.parents:
                if parent.id == parent_id:
                    return parent
        return LabeledRef(id=parent_id, label=parent_id)


@dataclass(slots=True)
class RowsCommand:
    session: EngineSession

    def execute(self) -> str:
        return render_rows(self.session.store.rows, self.session.store.resolver)


@dataclass(slots=True)
class AddCommand:
    """Append a row for a field, optionally under a parent."""

    session: EngineSession
    field_id: str
    label: str | None = None
    parent_ids: Sequence[str] = ()
    path: str = ""

    def execute(self) -> str:
        session = self.session
        parents = [session.parent_ref(pid) for pid in self.parent_ids if pid]
        row = session.store.add_field(
            session.field_ref(self.field_id, self.label),
            parents[0] if len(parents) == 1 else EMPTY_PARENT,
            path=self.path,
            locale=session.locale,
            is_parent_array=len(parents) > 1,
        )
        index = len(session.store) - 1
        if len(parents) > 1:
            session.store.set_parent_selection(index, parents)
        log.info("Added row %d: field=%s operator=%s", index, row.field.id, row.operator.id if row.operator else "-")
        return render_rows(session.store.rows, session.store.resolver)


@dataclass(slots=True)
class SetCommand:
    """Edit parent, operator and/or value of one row."""

    session: EngineSession
    index: int
    parent_ids: Sequence[str] = ()
    operator_id: str | None = None
    values: Sequence[str] = ()

    def execute(self) -> str:
        store = self.session.store
        if store.row(self.index) is None:
            raise IndexError(f"No row at index {self.index}")
        if self.parent_ids:
            parents = [self.session.parent_ref(pid) for pid in self.parent_ids]
            if len(parents) == 1:
                store.set_parent(self.index, parents[0])
            else:
                store.set_parent_selection(self.index, parents)
        if self.operator_id:
            store.set_operator(self.index, self.operator_id)
        if self.values:
            store.set_value(self.index, _coerce_value(self.values))
        return render_rows(store.rows, store.resolver)


@dataclass(slots=True)
class DeleteCommand:
    session: EngineSession
    index: int

    def execute(self) -> str:
        if not self.session.store.delete_field(self.index):
            log.warning("No row at index %d, nothing deleted", self.index)
        return render_rows(self.session.store.rows, self.session.store.resolver)


@dataclass(slots=True)
class ClearCommand:
    """Drop all rows and reset the persisted search-page state."""

    session: EngineSession

    def execute(self) -> str:
        self.session.store.clear_fields()
        removed = self.session.state.reset_all_state()
        self.session.accordion.reset()
        log.info("Cleared selection (%d widget keys removed)", len(removed))
        return "Selection cleared."


@dataclass(slots=True)
class ValidateCommand:
    session: EngineSession

    def execute(self) -> tuple[bool, str]:
        result = self.session.store.validate_all()
        return result.is_valid, render_validation(result)


@dataclass(slots=True)
class ExportCommand:
    """Render the current rows as a wire-format search request."""

    session: EngineSession
    title: str | None = None
    title_id: str | None = None

    def execute(self) -> str:
        state = self.session.state.get_snapshot()
        title = LabeledRef(
            id=self.title_id if self.title_id is not None else state.search_name_id,
            label=self.title if self.title is not None else state.search_name,
        )
        if self.title is not None:
            self.session.state.set_search_name(title.label, title.id)
        request = build_search_request(title, self.session.store.rows)
        return json.dumps(request.to_dict(), ensure_ascii=False, indent=2)


@dataclass(slots=True)
class RelabelCommand:
    """Switch the display locale and refresh all row labels."""

    session: EngineSession
    locale: str

    def execute(self) -> str:
        supported = self.session.config.locale.supported
        if self.locale not in supported:
            raise ValueError(f"Unsupported locale {self.locale!r}; expected one of {', '.join(supported)}")
        locale_session = LocaleSession(self.session.catalog, self.session.store, locale=self.session.locale)
        try:
            applied = locale_session.change_locale(self.locale)
        finally:
            locale_session.close()
        if not applied:
            error = self.session.catalog.error
            raise RuntimeError(error.message or f"Catalogs for {self.locale} could not be applied")
        self.session.locale = self.locale
        self.session.bundle = self.session.catalog.last_bundle
        return render_rows(self.session.store.rows, self.session.store.resolver)


@dataclass(slots=True)
class GroupsCommand:
    """Load saved groups and drive their expand/select state."""

    session: EngineSession
    refresh: bool = False
    toggle_groups: Sequence[str] = ()
    toggle_fields: Sequence[str] = ()
    select: str | None = None
    load_into_rows: bool = False

    def execute(self) -> str:
        session = self.session
        groups = session.state.saved_groups
        if self.refresh or not groups:
            payload = session.catalog.load_saved_searches()
            if payload is not None:
                groups = session.state.set_saved_groups(payload)

        tracker = session.accordion
        tracker.restore_selection(groups)
        for group_id in self.toggle_groups:
            tracker.toggle_group(group_id)
        for field_group_id in self.toggle_fields:
            tracker.toggle_field(field_group_id)
        if self.select is not None:
            found = tracker.find_field({"uniqueId": self.select})
            if found is None:
                raise LookupError(f"No saved field with id {self.select!r}")
            tracker.select_field(found)
            if self.load_into_rows:
                session.store.replace_rows([found.row.evolve(current_language=session.locale)])
        return render_groups(groups, tracker.get_snapshot())


def _coerce_value(values: Sequence[str]) -> Any:
    if len(values) == 1:
        return values[0]
    return tuple(values)
