"""Tests for saved-group accordion expansion and selection tracking."""

from __future__ import annotations

import json
import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ArchiveSearch.services.accordion import (
    RESTORE_ERROR_MESSAGE,
    AccordionStateTracker,
    group_key,
)
from ArchiveSearch.services.saved_groups import DEFAULT_GROUP_TITLE, SavedGroupNormalizer
from ArchiveSearch.storage.memory import InMemoryStorage
from ArchiveSearch.storage.port import ACCORDION_STATE_KEY

_PAYLOAD = [
    {
        "groupTitle": {"id": "g1", "label": "Personnel"},
        "groupFields": [
            {
                "title": {"id": "fg1", "label": "Age checks"},
                "fields": [
                    {
                        "rowId": "r-1",
                        "field": {"id": "Age", "label": "Age"},
                        "operator": {"id": "between", "label": "Between"},
                        "value": ["20", "30"],
                    },
                    {
                        "field": {"id": "Name", "label": "Name"},
                        "operator": {"id": "equals", "label": "Equals"},
                        "value": "Smith",
                    },
                ],
            },
            {
                "title": {"id": "fg2", "label": "Other"},
                "fields": [{"field": {"id": "Phone", "label": "Phone"}, "operator": {"id": "empty", "label": "Empty"}}],
            },
        ],
    },
    {
        "groupTitle": {"id": "g2", "label": "Legacy"},
        "groupFields": [{"title": {"id": "fg3", "label": "Docs"}, "fields": [{"field": {"id": "Document", "label": "Document"}}]}],
    },
]

GROUPS = SavedGroupNormalizer().normalize(_PAYLOAD)
AGE_FIELD = GROUPS[0].field_groups[0].fields[0]
NAME_FIELD = GROUPS[0].field_groups[0].fields[1]
DOC_FIELD = GROUPS[1].field_groups[0].fields[0]


class TestToggle(unittest.TestCase):
    def setUp(self) -> None:
        self.storage = InMemoryStorage()
        self.tracker = AccordionStateTracker(self.storage, GROUPS)

    def saved(self) -> dict:
        return json.loads(self.storage.get_item(ACCORDION_STATE_KEY))

    def test_expand_and_persist(self) -> None:
        self.tracker.toggle_group("g1")
        self.tracker.toggle_field("fg1")

        state = self.tracker.get_snapshot()
        self.assertTrue(state.is_group_expanded("g1"))
        self.assertTrue(state.is_field_group_expanded("fg1"))
        self.assertEqual(self.saved(), {"expandedGroups": ["g1"], "expandedFields": ["fg1"], "selectedField": None})

    def test_collapsing_group_clears_contained_selection(self) -> None:
        self.tracker.toggle_group("g1")
        self.tracker.toggle_field("fg1")
        self.tracker.toggle_field("fg3")
        self.tracker.select_field(AGE_FIELD)

        self.tracker.toggle_group("g1")

        state = self.tracker.get_snapshot()
        self.assertFalse(state.is_group_expanded("g1"))
        self.assertEqual(state.expanded_fields, ("fg3",))
        self.assertIsNone(state.selected_field)
        self.assertIsNone(self.saved()["selectedField"])

    def test_collapsing_shared_default_id_clears_selection_in_any_group(self) -> None:
        groups = SavedGroupNormalizer().normalize(
            [
                {"fields": [{"field": {"id": "Age", "label": "Age"}}]},
                {"fields": [{"field": {"id": "Name", "label": "Name"}}]},
            ]
        )
        self.assertEqual({group_key(g) for g in groups}, {DEFAULT_GROUP_TITLE.id})
        tracker = AccordionStateTracker(InMemoryStorage(), groups)
        name_field = groups[1].field_groups[0].fields[0]

        tracker.toggle_group(DEFAULT_GROUP_TITLE.id)
        tracker.select_field(name_field)
        tracker.toggle_group(DEFAULT_GROUP_TITLE.id)

        state = tracker.get_snapshot()
        self.assertEqual(state.expanded_groups, ())
        self.assertIsNone(state.selected_field)

    def test_collapsing_other_group_keeps_selection(self) -> None:
        self.tracker.toggle_group("g2")
        self.tracker.select_field(AGE_FIELD)
        self.tracker.toggle_group("g2")
        self.assertIs(self.tracker.get_snapshot().selected_field, AGE_FIELD)

    def test_collapsing_field_group_clears_contained_selection(self) -> None:
        self.tracker.toggle_field("fg1")
        self.tracker.toggle_field("fg2")
        self.tracker.select_field(NAME_FIELD)

        self.tracker.toggle_field("fg2")
        self.assertIs(self.tracker.get_snapshot().selected_field, NAME_FIELD)

        self.tracker.toggle_field("fg1")
        self.assertIsNone(self.tracker.get_snapshot().selected_field)

    def test_empty_ids_are_ignored(self) -> None:
        self.tracker.toggle_group("")
        self.tracker.toggle_field("")
        self.assertIsNone(self.storage.get_item(ACCORDION_STATE_KEY))

    def test_selection_helpers(self) -> None:
        self.tracker.select_field(DOC_FIELD)
        self.assertTrue(self.tracker.is_field_selected(DOC_FIELD))
        self.assertFalse(self.tracker.is_field_selected(AGE_FIELD))
        self.assertEqual(self.saved()["selectedField"], {"uniqueId": DOC_FIELD.unique_id})

        self.tracker.clear_selected_field()
        self.assertIsNone(self.tracker.get_snapshot().selected_field)

    def test_reset_removes_persisted_state(self) -> None:
        self.tracker.toggle_group("g1")
        self.tracker.reset()
        self.assertEqual(self.tracker.get_snapshot().expanded_groups, ())
        self.assertNotIn(ACCORDION_STATE_KEY, self.storage)


class TestFindField(unittest.TestCase):
    def setUp(self) -> None:
        self.tracker = AccordionStateTracker(InMemoryStorage(), GROUPS)

    def test_by_unique_id(self) -> None:
        self.assertIs(self.tracker.find_field({"uniqueId": "r-1"}), AGE_FIELD)

    def test_by_field_operator_and_value(self) -> None:
        found = self.tracker.find_field({"fieldId": "Name", "operatorId": "equals", "value": "Smith"})
        self.assertIs(found, NAME_FIELD)
        self.assertIs(self.tracker.find_field({"fieldId": "Age", "value": ["20", "30"]}), AGE_FIELD)
        self.assertIsNone(self.tracker.find_field({"fieldId": "Name", "value": "Jones"}))

    def test_by_labels(self) -> None:
        found = self.tracker.find_field({"field": "Phone", "operator": "Empty"})
        self.assertEqual(found.row.field.id, "Phone")

    def test_stale_unique_id_falls_back(self) -> None:
        found = self.tracker.find_field({"uniqueId": "gone", "fieldId": "Document"})
        self.assertIs(found, DOC_FIELD)

    def test_nothing_to_find(self) -> None:
        self.assertIsNone(self.tracker.find_field(None))
        self.assertIsNone(self.tracker.find_field({"uniqueId": "missing"}))


class TestRestore(unittest.TestCase):
    def test_restores_expansion_and_resolves_selection_later(self) -> None:
        storage = InMemoryStorage()
        writer = AccordionStateTracker(storage, GROUPS)
        writer.toggle_group("g1")
        writer.toggle_field("fg1")
        writer.select_field(AGE_FIELD)

        reader = AccordionStateTracker(storage)
        state = reader.get_snapshot()
        self.assertEqual(state.expanded_groups, ("g1",))
        self.assertIsNone(state.selected_field)
        self.assertEqual(reader.pending_selection.unique_id, "r-1")

        self.assertEqual(reader.restore_selection(GROUPS), AGE_FIELD)
        self.assertIsNone(reader.pending_selection)
        self.assertEqual(reader.get_snapshot().selected_field, AGE_FIELD)

    def test_unresolved_selection_stays_pending(self) -> None:
        storage = InMemoryStorage({ACCORDION_STATE_KEY: json.dumps({"selectedField": {"uniqueId": "missing"}})})
        tracker = AccordionStateTracker(storage)
        self.assertIsNone(tracker.restore_selection(GROUPS))
        self.assertIsNotNone(tracker.pending_selection)

    def test_malformed_state_sets_error(self) -> None:
        for raw in ("{broken", json.dumps([1, 2]), json.dumps({"expandedGroups": "g1"})):
            storage = InMemoryStorage({ACCORDION_STATE_KEY: raw})
            with self.assertLogs("ArchiveSearch", level="WARNING"):
                tracker = AccordionStateTracker(storage)
            error = tracker.get_snapshot().error
            self.assertTrue(error.has_error)
            self.assertEqual(error.message, RESTORE_ERROR_MESSAGE)


if __name__ == "__main__":
    unittest.main()
