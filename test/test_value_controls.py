"""Tests for value-control resolution, default operators and dropdown data."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ArchiveSearch.core.controls import DropdownDataRegistry, ValueControlResolver, control_kind_for
from ArchiveSearch.core.fields import BRAND_SOURCE, FieldType, dropdown_source_for, resolve_field_type
from ArchiveSearch.core.models import LabeledRef, SelectionRow
from ArchiveSearch.core.operators import (
    OperatorCatalog,
    is_dual_operator,
    pick_default_operator,
    placeholder_label,
)


def _row(field_id: str, operator: str | None) -> SelectionRow:
    return SelectionRow(
        field=LabeledRef(field_id, field_id),
        operator=LabeledRef(operator, operator) if operator is not None else None,
    )


class TestFieldTypes(unittest.TestCase):
    def test_lookup_is_exact_on_string_id(self) -> None:
        self.assertIs(resolve_field_type("Age"), FieldType.NUMBER)
        self.assertIs(resolve_field_type("-31"), FieldType.DROPDOWN)
        self.assertIs(resolve_field_type("-1"), FieldType.BUTTON)
        self.assertIs(resolve_field_type("Document"), FieldType.DATE)
        self.assertIs(resolve_field_type("age"), FieldType.TEXT)
        self.assertIs(resolve_field_type(None), FieldType.TEXT)

    def test_dropdown_source_falls_back_to_brand(self) -> None:
        self.assertEqual(dropdown_source_for("DD-EN-2"), "stateData")
        self.assertEqual(dropdown_source_for("status"), "statusData")
        self.assertEqual(dropdown_source_for("unknown"), BRAND_SOURCE)
        self.assertEqual(dropdown_source_for(""), BRAND_SOURCE)

    def test_control_kind_mapping(self) -> None:
        self.assertEqual(control_kind_for(FieldType.NUMBER), "number")
        self.assertEqual(control_kind_for(FieldType.BOOLEAN), "text")
        self.assertEqual(control_kind_for(FieldType.TIME), "text")
        self.assertEqual(control_kind_for("bogus"), "text")


class TestValueControlResolver(unittest.TestCase):
    def setUp(self) -> None:
        self.resolver = ValueControlResolver()

    def test_hidden_without_operator_or_for_sentinel(self) -> None:
        for operator in (None, "", "select", " SELECT "):
            self.assertFalse(self.resolver.resolve(_row("Age", operator)).show, operator)

    def test_no_value_operators_hide_the_control(self) -> None:
        for operator in ("empty", "not_empty", "yes", "no"):
            self.assertFalse(self.resolver.resolve(_row("Name", operator)).show, operator)

    def test_similar_wins_over_dual(self) -> None:
        control = self.resolver.resolve(_row("Name", "similar"))
        self.assertTrue(control.show)
        self.assertTrue(control.is_similar)
        self.assertFalse(control.dual)
        self.assertEqual(control.similar_source, BRAND_SOURCE)
        self.assertTrue(is_dual_operator("similar"))

    def test_dual_range_on_number_field(self) -> None:
        control = self.resolver.resolve(_row("Age", "between"))
        self.assertTrue(control.show)
        self.assertTrue(control.dual)
        self.assertEqual(control.control_kind, "number")

    def test_dropdown_carries_source(self) -> None:
        control = self.resolver.resolve(_row("PinCode", "equals"))
        self.assertEqual(control.control_kind, "dropdown")
        self.assertEqual(control.dropdown_source, BRAND_SOURCE)
        self.assertIsNone(self.resolver.resolve(_row("Name", "equals")).dropdown_source)

    def test_custom_tables(self) -> None:
        resolver = ValueControlResolver(field_types={"x": FieldType.DROPDOWN}, dropdown_sources={"x": "typeData"})
        control = resolver.resolve(_row("x", "in"))
        self.assertEqual(control.dropdown_source, "typeData")

    def test_should_show_value_column(self) -> None:
        self.assertFalse(self.resolver.should_show_value_column([]))
        self.assertFalse(self.resolver.should_show_value_column([_row("Age", None), _row("Name", "empty")]))
        self.assertTrue(self.resolver.should_show_value_column([_row("Name", "empty"), _row("Age", "less")]))


class TestDefaultOperator(unittest.TestCase):
    def test_prefers_equals_then_empty(self) -> None:
        offered = [LabeledRef("empty", "Empty"), LabeledRef("equals", "Equals")]
        self.assertEqual(pick_default_operator(offered, FieldType.NUMBER).id, "equals")
        self.assertEqual(pick_default_operator(offered[:1], FieldType.TEXT).id, "empty")

    def test_boolean_prefers_yes(self) -> None:
        offered = [LabeledRef("equals", "Equals"), LabeledRef("yes", "Yes")]
        self.assertEqual(pick_default_operator(offered, FieldType.BOOLEAN).id, "yes")

    def test_none_when_nothing_matches(self) -> None:
        self.assertIsNone(pick_default_operator([LabeledRef("less", "Less")], FieldType.NUMBER))
        self.assertIsNone(pick_default_operator([], FieldType.TEXT))

    def test_placeholder_label_per_locale(self) -> None:
        self.assertEqual(placeholder_label("de"), "Auswählen")
        self.assertEqual(placeholder_label("fr"), "Select")
        self.assertEqual(placeholder_label(None), "Select")


class TestOperatorCatalog(unittest.TestCase):
    def test_from_mapping_resolves_localized_labels(self) -> None:
        catalog = OperatorCatalog.from_mapping(
            {
                "numberOperations": [{"id": "equals", "en": "Equals", "de": "Gleich"}, {"label": "no id"}],
                "boolOperations": [{"id": "yes", "label": "Ja"}],
                "stringOperations": "not a list",
            },
            locale="de",
        )
        self.assertEqual(catalog.number_operations, (LabeledRef("equals", "Gleich"),))
        self.assertEqual(catalog.bool_operations, (LabeledRef("yes", "Ja"),))
        self.assertEqual(catalog.string_operations, ())
        self.assertEqual(catalog.options_for(FieldType.BOOLEAN), catalog.bool_operations)
        self.assertEqual(catalog.options_for(FieldType.DROPDOWN), catalog.string_operations)
        self.assertEqual(catalog.find("equals").label, "Gleich")
        self.assertIsNone(catalog.find("missing"))
        self.assertFalse(catalog.is_empty())
        self.assertTrue(OperatorCatalog.from_mapping(None).is_empty())


class TestDropdownDataRegistry(unittest.TestCase):
    def test_items_by_source_and_field(self) -> None:
        registry = DropdownDataRegistry()
        registry.set_source("stateData", [{"id": "s1", "label": "Open"}, LabeledRef("s2", "Closed"), {"label": "x"}])

        self.assertEqual(registry.items_for_source("stateData"), (LabeledRef("s1", "Open"), LabeledRef("s2", "Closed")))
        self.assertEqual(len(registry.items_for_field("DD-EN-2")), 2)
        self.assertEqual(registry.items_for_field("DD-EN-1"), ())
        self.assertEqual(registry.items_for_source(None), ())


if __name__ == "__main__":
    unittest.main()
