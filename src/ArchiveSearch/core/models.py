from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Sequence, Union


@dataclass(frozen=True, slots=True)
class LabeledRef:
    """Stable identifier plus a locale-dependent display label.

    Identity is `id`. The label may change on every locale switch and must
    always be re-derivable from the id alone.
    """

    id: str
    label: str = ""

    def with_label(self, label: str) -> LabeledRef:
        return LabeledRef(id=self.id, label=label)

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "label": self.label}


FieldRef = LabeledRef
OperatorRef = LabeledRef
ParentRef = LabeledRef
DropdownItem = LabeledRef

EMPTY_PARENT = LabeledRef(id="", label="")

Scalar = Union[str, int, float, bool]
Value = Union[None, Scalar, LabeledRef, tuple]
ParentSelection = Union[None, LabeledRef, tuple]
Touched = Union[bool, tuple]


@dataclass(frozen=True, slots=True)
class SelectionRow:
    """One search condition: parent, field, operator and value.

    Rows are immutable. Editing operations return a modified copy, which
    keeps change notifications of the owning store accurate.

    Attributes:
        row_id: Stable id, empty for rows never persisted by the backend.
        parent: Originating field group ("archival type"); empty id when the
            field comes from the root catalog.
        parent_selected: Multi-valued parent selection, either a tuple of
            refs or a single ref.
        field: Chosen field.
        operator: Chosen operator or None.
        value: None, a scalar, a ref, or a tuple of those (two elements
            encode dual values such as ranges).
        is_parent_array: True when `parent_selected` is the authoritative
            parent representation.
        parent_touched: Whether the parent editor was touched.
        operator_touched: Whether the operator editor was touched.
        value_touched: Touched flag, or one flag per dual value.
        current_language: Locale the labels were last resolved for.
    """

    field: LabeledRef
    parent: LabeledRef = EMPTY_PARENT
    row_id: str = ""
    parent_selected: ParentSelection = None
    operator: Optional[LabeledRef] = None
    value: Value = None
    is_parent_array: bool = False
    parent_touched: bool = False
    operator_touched: bool = False
    value_touched: Touched = False
    current_language: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", freeze_value(self.value))
        object.__setattr__(self, "parent_selected", freeze_parent_selection(self.parent_selected))
        if isinstance(self.value_touched, list):
            object.__setattr__(self, "value_touched", tuple(bool(v) for v in self.value_touched))

    def evolve(self, **changes: Any) -> SelectionRow:
        """Return a copy with the given attributes replaced."""
        return replace(self, **changes)

    def parent_selected_refs(self) -> tuple[LabeledRef, ...]:
        """Return `parent_selected` as a tuple regardless of its shape."""
        if self.parent_selected is None:
            return ()
        if isinstance(self.parent_selected, LabeledRef):
            return (self.parent_selected,)
        return tuple(self.parent_selected)


@dataclass(frozen=True, slots=True)
class SearchCriteria:
    """Wire representation of one row, with values collapsed to ids."""

    row_id: str
    parent: LabeledRef
    parent_selected: ParentSelection
    field: LabeledRef
    operator: LabeledRef
    value: Optional[Scalar]

    def to_dict(self) -> dict[str, Any]:
        return {
            "rowId": self.row_id,
            "parent": self.parent.to_dict(),
            "parentSelected": thaw_value(self.parent_selected),
            "field": self.field.to_dict(),
            "operator": self.operator.to_dict(),
            "value": self.value,
        }


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """Named set of criteria handed to a backend search executor."""

    title: LabeledRef
    fields: Sequence[SearchCriteria] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title.to_dict(),
            "fields": [criteria.to_dict() for criteria in self.fields],
        }


@dataclass(frozen=True, slots=True)
class SavedField:
    """Leaf of a normalized saved-group tree."""

    row: SelectionRow
    unique_id: str


@dataclass(frozen=True, slots=True)
class FieldGroup:
    title: LabeledRef
    fields: tuple[SavedField, ...] = ()


@dataclass(frozen=True, slots=True)
class SavedGroup:
    title: LabeledRef
    field_groups: tuple[FieldGroup, ...] = ()

    def iter_fields(self):
        for field_group in self.field_groups:
            yield from field_group.fields


@dataclass(frozen=True, slots=True)
class ValueControl:
    """Control shape a row needs for value entry.

    Attributes:
        show: Whether any value control is shown.
        dual: Whether two values (a range) are expected.
        is_similar: Whether the compound "similar" control is used.
        control_kind: One of text/number/date/dropdown/button.
        dropdown_source: Data source key feeding a dropdown control.
        similar_source: Secondary category source for the similar control.
    """

    show: bool = False
    dual: bool = False
    is_similar: bool = False
    control_kind: str = "text"
    dropdown_source: Optional[str] = None
    similar_source: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RowFailure:
    index: int
    label: str
    checks: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Structured outcome of validating a row list.

    Attributes:
        is_valid: True when no row failed any check.
        invalid_fields: Display labels of failing rows, in row order.
        failures: Per-row failures tagged with the failed checks
            (`parent`, `operator`, `value`).
    """

    is_valid: bool
    invalid_fields: tuple[str, ...] = ()
    failures: tuple[RowFailure, ...] = ()

    @property
    def invalid_indices(self) -> frozenset[int]:
        return frozenset(failure.index for failure in self.failures)


@dataclass(frozen=True, slots=True)
class ErrorState:
    has_error: bool = False
    message: str = ""


@dataclass(frozen=True, slots=True)
class FieldIdentifier:
    """Minimal persisted identity of a selected saved field.

    Either the unique id, the field/operator ids plus value, or, for rows
    without a field id, the field/operator labels plus value.
    """

    unique_id: Optional[str] = None
    field_id: Optional[str] = None
    operator_id: Optional[str] = None
    field_label: Optional[str] = None
    operator_label: Optional[str] = None
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        if self.unique_id:
            return {"uniqueId": self.unique_id}
        if self.field_id:
            return {
                "fieldId": self.field_id,
                "operatorId": self.operator_id,
                "value": thaw_value(self.value),
            }
        return {
            "field": self.field_label,
            "operator": self.operator_label,
            "value": thaw_value(self.value),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> FieldIdentifier:
        return cls(
            unique_id=raw.get("uniqueId") or None,
            field_id=raw.get("fieldId") or None,
            operator_id=raw.get("operatorId") or None,
            field_label=raw.get("field") if isinstance(raw.get("field"), str) else None,
            operator_label=raw.get("operator") if isinstance(raw.get("operator"), str) else None,
            value=freeze_value(raw.get("value")),
        )


def freeze_value(raw: Any) -> Any:
    """Convert JSON-like values into the immutable row representation.

    Lists become tuples and objects carrying an `id` become `LabeledRef`.
    Scalars (including None) pass through unchanged.
    """
    if isinstance(raw, LabeledRef) or raw is None:
        return raw
    if isinstance(raw, Mapping):
        if "id" in raw:
            return LabeledRef(id=str(raw["id"]), label=str(raw.get("label") or ""))
        return None
    if isinstance(raw, (list, tuple)):
        return tuple(freeze_value(item) for item in raw)
    return raw


def freeze_parent_selection(raw: Any) -> ParentSelection:
    frozen = freeze_value(raw)
    if frozen is None or isinstance(frozen, LabeledRef):
        return frozen
    if isinstance(frozen, tuple):
        return tuple(item for item in frozen if isinstance(item, LabeledRef))
    return None


def thaw_value(value: Any) -> Any:
    """Inverse of `freeze_value`, producing JSON-serializable data."""
    if isinstance(value, LabeledRef):
        return value.to_dict()
    if isinstance(value, tuple):
        return [thaw_value(item) for item in value]
    return value
