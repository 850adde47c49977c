"""Tests for saved-group payload normalization."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ArchiveSearch.core.models import FieldIdentifier, LabeledRef, SelectionRow
from ArchiveSearch.services.saved_groups import (
    DEFAULT_FIELD_GROUP_TITLE,
    DEFAULT_GROUP_TITLE,
    PayloadShape,
    SavedGroupNormalizer,
    content_key,
    detect_shape,
    field_identifier,
    groups_to_payload,
)


def _field(field_id: str, operator: str = "equals", value=None, **extra) -> dict:
    item = {
        "field": {"id": field_id, "label": field_id},
        "operator": {"id": operator, "label": operator.title()},
        "value": value,
    }
    item.update(extra)
    return item


_SINGLE = {
    "groupTitle": {"id": "g1", "label": "Personnel"},
    "groupFields": [
        {
            "title": {"id": "fg1", "label": "Age checks"},
            "fields": [_field("Age", "between", ["20", "30"], rowId="r-1"), _field("Name", value="Smith")],
        },
        {"fields": [_field("Phone")]},
    ],
}

_LEGACY = {"title": {"id": "g2", "label": "Legacy"}, "fields": [_field("Document", "empty")]}


class TestDetectShape(unittest.TestCase):
    def test_shapes(self) -> None:
        self.assertIs(detect_shape(None), PayloadShape.EMPTY)
        self.assertIs(detect_shape([]), PayloadShape.EMPTY)
        self.assertIs(detect_shape({}), PayloadShape.EMPTY)
        self.assertIs(detect_shape(_SINGLE), PayloadShape.SINGLE_GROUP)
        self.assertIs(detect_shape([_SINGLE, _LEGACY]), PayloadShape.GROUP_LIST)
        self.assertIs(detect_shape(_LEGACY), PayloadShape.LEGACY_FIELDS)
        self.assertIs(detect_shape([_field("Age"), _field("Name")]), PayloadShape.LEGACY_FIELDS)
        self.assertIs(detect_shape("text"), PayloadShape.EMPTY)


class TestNormalize(unittest.TestCase):
    def setUp(self) -> None:
        self.normalizer = SavedGroupNormalizer()

    def test_single_group_is_fully_normalized(self) -> None:
        (group,) = self.normalizer.normalize(_SINGLE)

        self.assertEqual(group.title, LabeledRef("g1", "Personnel"))
        self.assertEqual(len(group.field_groups), 2)
        first, second = group.field_groups
        self.assertEqual(first.title, LabeledRef("fg1", "Age checks"))
        self.assertEqual([saved.unique_id for saved in first.fields], ["r-1", "field_g1_0_0_1"])
        self.assertEqual(first.fields[0].row.value, ("20", "30"))
        self.assertEqual(second.title, LabeledRef("group-1", "Group 2"))
        self.assertEqual(second.fields[0].unique_id, "field_g1_0_1_0")

    def test_group_list_mixes_shapes(self) -> None:
        groups = self.normalizer.normalize([_SINGLE, _LEGACY, "junk"])

        self.assertEqual([group.title.id for group in groups], ["g1", "g2"])
        legacy = groups[1]
        self.assertEqual(legacy.field_groups[0].title, DEFAULT_FIELD_GROUP_TITLE)
        self.assertEqual(legacy.field_groups[0].fields[0].unique_id, "field_g2_1_0_0")

    def test_bare_row_list_gets_default_titles(self) -> None:
        (group,) = self.normalizer.normalize([_field("Age"), _field("Name")])
        self.assertEqual(group.title, DEFAULT_GROUP_TITLE)
        self.assertEqual(group.field_groups[0].title, DEFAULT_FIELD_GROUP_TITLE)
        self.assertEqual(
            [saved.unique_id for saved in group.field_groups[0].fields],
            ["field_default-group_0_0_0", "field_default-group_0_0_1"],
        )

    def test_fieldgroups_alias_and_invalid_rows(self) -> None:
        payload = [{"title": "Flat", "fieldGroups": [{"title": {"id": "x", "label": "X"}, "fields": [{"value": 1}, _field("Age")]}]}]
        (group,) = self.normalizer.normalize(payload)
        self.assertEqual(group.title, LabeledRef("Flat", "Flat"))
        self.assertEqual([saved.row.field.id for saved in group.field_groups[0].fields], ["Age"])

    def test_ids_are_deterministic_and_results_cached(self) -> None:
        first = self.normalizer.normalize(_SINGLE)
        self.assertEqual(self.normalizer.cache_size, 1)
        self.assertIs(self.normalizer.normalize(dict(_SINGLE)), first)

        fresh = SavedGroupNormalizer().normalize(_SINGLE)
        self.assertEqual(fresh, first)

        self.normalizer.clear_cache()
        self.assertEqual(self.normalizer.cache_size, 0)

    def test_content_key_ignores_key_order(self) -> None:
        self.assertEqual(content_key({"a": 1, "b": [1, 2]}), content_key({"b": [1, 2], "a": 1}))
        self.assertNotEqual(content_key({"a": 1}), content_key({"a": 2}))

    def test_empty_payload(self) -> None:
        self.assertEqual(self.normalizer.normalize(None), ())
        self.assertEqual(self.normalizer.cache_size, 0)

    def test_payload_round_trip_keeps_unique_ids(self) -> None:
        groups = self.normalizer.normalize(_SINGLE)
        payload = groups_to_payload(groups)

        self.assertEqual(payload[0]["groupTitle"], {"id": "g1", "label": "Personnel"})
        self.assertEqual(payload[0]["groupFields"][0]["fields"][1]["uniqueId"], "field_g1_0_0_1")
        again = SavedGroupNormalizer().normalize(payload)
        self.assertEqual(again[0].field_groups[0].fields[0].unique_id, "r-1")


class TestFieldIdentifier(unittest.TestCase):
    def test_saved_field_uses_unique_id(self) -> None:
        (group,) = SavedGroupNormalizer().normalize(_SINGLE)
        identifier = field_identifier(group.field_groups[0].fields[0])
        self.assertEqual(identifier.to_dict(), {"uniqueId": "r-1"})

    def test_row_falls_back_to_ids_then_labels(self) -> None:
        row = SelectionRow(field=LabeledRef("Age", "Age"), operator=LabeledRef("equals", "Equals"), value="25")
        self.assertEqual(field_identifier(row).to_dict(), {"fieldId": "Age", "operatorId": "equals", "value": "25"})

        unnamed = SelectionRow(field=LabeledRef("", "Free text"), value="x")
        self.assertEqual(field_identifier(unnamed).to_dict(), {"field": "Free text", "operator": None, "value": "x"})
        self.assertIsNone(field_identifier(None))

    def test_identifier_from_dict(self) -> None:
        identifier = FieldIdentifier.from_dict({"fieldId": "Age", "operatorId": "between", "value": ["20", "30"]})
        self.assertEqual(identifier.value, ("20", "30"))
        self.assertIsNone(identifier.unique_id)


if __name__ == "__main__":
    unittest.main()
