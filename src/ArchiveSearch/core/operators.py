"""Operator catalog: operator kinds, value-arity subsets and defaults."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Iterable, Mapping, Sequence

from ArchiveSearch.core.fields import FieldType
from ArchiveSearch.core.models import LabeledRef


class OperatorType(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "notequals"
    GREATER = "greater"
    LESS = "less"
    GREATER_EQUALS = "greaterequals"
    LESS_EQUALS = "lessequals"
    CONTAINS = "contains"
    STARTS_WITH = "startswith"
    ENDS_WITH = "endswith"
    BETWEEN = "between"
    IN = "in"
    NOT_IN = "notin"
    SELECT = "select"
    EMPTY = "empty"
    NOT_EMPTY = "not_empty"
    YES = "yes"
    NO = "no"
    NOT_BETWEEN = "not_between"
    SIMILAR = "similar"
    CONTAINS_DATE = "contains_date"


SELECT_SENTINEL: Final[str] = OperatorType.SELECT.value

DUAL_OPERATORS: Final[frozenset[str]] = frozenset(
    op.value
    for op in (
        OperatorType.BETWEEN,
        OperatorType.NOT_BETWEEN,
        OperatorType.SIMILAR,
        OperatorType.CONTAINS_DATE,
    )
)

NO_VALUE_OPERATORS: Final[frozenset[str]] = frozenset(
    op.value
    for op in (
        OperatorType.EMPTY,
        OperatorType.NOT_EMPTY,
        OperatorType.YES,
        OperatorType.NO,
    )
)

SIMILAR_OPERATORS: Final[frozenset[str]] = frozenset({OperatorType.SIMILAR.value})

_DEFAULT_PRIORITY: Final[tuple[str, ...]] = (OperatorType.EQUALS.value, OperatorType.EMPTY.value)
_PRIORITY_BY_TYPE: Final[dict[FieldType, tuple[str, ...]]] = {
    FieldType.TEXT: _DEFAULT_PRIORITY,
    FieldType.NUMBER: _DEFAULT_PRIORITY,
    FieldType.DATE: _DEFAULT_PRIORITY,
    FieldType.DROPDOWN: _DEFAULT_PRIORITY,
    FieldType.BOOLEAN: (OperatorType.YES.value, OperatorType.EQUALS.value, OperatorType.EMPTY.value),
}

PLACEHOLDER_LABELS: Final[dict[str, str]] = {"en": "Select", "de": "Auswählen"}

CATEGORY_KEYS: Final[tuple[str, ...]] = (
    "stringOperations",
    "numberOperations",
    "dateOperations",
    "boolOperations",
    "timeOperations",
)


def _norm(operator_id: str | None) -> str:
    return (operator_id or "").strip().lower()


def is_no_value_operator(operator_id: str | None) -> bool:
    return _norm(operator_id) in NO_VALUE_OPERATORS


def is_dual_operator(operator_id: str | None) -> bool:
    return _norm(operator_id) in DUAL_OPERATORS


def is_similar_operator(operator_id: str | None) -> bool:
    return _norm(operator_id) in SIMILAR_OPERATORS


def placeholder_label(locale: str | None) -> str:
    """Return the locale-specific "nothing chosen" operator label."""
    return PLACEHOLDER_LABELS.get((locale or "en").lower(), PLACEHOLDER_LABELS["en"])


def default_operator_priority(field_type: FieldType | str) -> tuple[str, ...]:
    """Return candidate default operator ids for a field type, best first."""
    try:
        resolved = FieldType(field_type)
    except ValueError:
        return _DEFAULT_PRIORITY
    return _PRIORITY_BY_TYPE.get(resolved, _DEFAULT_PRIORITY)


def pick_default_operator(
    available: Iterable[LabeledRef],
    field_type: FieldType | str,
) -> LabeledRef | None:
    """Pick the default operator for a new row.

    Args:
        available: Operators offered for the field.
        field_type: Semantic type of the field.

    Returns:
        The first priority candidate present in `available`, or None when
        none of them is offered.
    """
    by_id = {_norm(op.id): op for op in available}
    for candidate in default_operator_priority(field_type):
        if candidate in by_id:
            return by_id[candidate]
    return None


@dataclass(frozen=True, slots=True)
class OperatorCatalog:
    """Per-category operator tables for one locale."""

    string_operations: tuple[LabeledRef, ...] = ()
    number_operations: tuple[LabeledRef, ...] = ()
    date_operations: tuple[LabeledRef, ...] = ()
    bool_operations: tuple[LabeledRef, ...] = ()
    time_operations: tuple[LabeledRef, ...] = ()
    locale: str = "en"

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None, locale: str = "en") -> OperatorCatalog:
        """Build a catalog from the provider's raw operator payload.

        Missing categories become empty tables. Item labels come from the
        item's `label`, else its locale key, else its `en` key.
        """
        raw = raw or {}
        tables = [_parse_operator_items(raw.get(key), locale) for key in CATEGORY_KEYS]
        return cls(*tables, locale=locale)

    def tables(self) -> tuple[tuple[LabeledRef, ...], ...]:
        return (
            self.string_operations,
            self.number_operations,
            self.date_operations,
            self.bool_operations,
            self.time_operations,
        )

    def options_for(self, field_type: FieldType | str) -> tuple[LabeledRef, ...]:
        """Return the operators offered for a field type."""
        try:
            resolved = FieldType(field_type)
        except ValueError:
            return self.string_operations
        if resolved is FieldType.BOOLEAN:
            return self.bool_operations
        if resolved is FieldType.NUMBER:
            return self.number_operations
        if resolved is FieldType.DATE:
            return self.date_operations
        if resolved is FieldType.TIME:
            return self.time_operations
        return self.string_operations

    def find(self, operator_id: str | None) -> LabeledRef | None:
        """Find an operator by id across all category tables."""
        wanted = _norm(operator_id)
        if not wanted:
            return None
        for table in self.tables():
            for op in table:
                if _norm(op.id) == wanted:
                    return op
        return None

    def is_empty(self) -> bool:
        return not any(self.tables())


def _parse_operator_items(value: Any, locale: str) -> tuple[LabeledRef, ...]:
    if not isinstance(value, Sequence) or isinstance(value, str):
        return ()
    out: list[LabeledRef] = []
    for item in value:
        if isinstance(item, LabeledRef):
            out.append(item)
            continue
        if not isinstance(item, Mapping) or not item.get("id"):
            continue
        label = item.get("label") or item.get(locale) or item.get("en") or str(item["id"])
        out.append(LabeledRef(id=str(item["id"]), label=str(label)))
    return tuple(out)
