"""Static field catalog: field id -> semantic type and dropdown data source."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Final, Mapping


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    BOOLEAN = "boolean"
    DROPDOWN = "dropdown"
    BUTTON = "button"


_NUMBER_FIELDS = ("Age", "Phone", "-21", "-22", "-23", "-24", "-25", "26", "27", "28", "29", "30")
_TEXT_FIELDS = ("Name", "Image", "-11", "-12", "-13", "-14", "15", "16", "17", "18", "19", "20")
_DATE_FIELDS = (
    "Document", "DT-EN-1", "-42", "DT-EN-3", "DT-EN-4", "45",
    "DT-EN-6", "47", "DT-EN-8", "49", "DT-EN-10",
)
_DROPDOWN_FIELDS = ("PinCode", "-31", "-32", "-33", "-34", "-35", "36", "37", "38", "39", "40")
_BUTTON_FIELDS = ("-1", "-2", "-3", "-4", "-5", "-6", "-7", "-8", "-9", "-10")


def _build_type_table() -> dict[str, FieldType]:
    table: dict[str, FieldType] = {}
    for field_type, ids in (
        (FieldType.NUMBER, _NUMBER_FIELDS),
        (FieldType.TEXT, _TEXT_FIELDS),
        (FieldType.DATE, _DATE_FIELDS),
        (FieldType.DROPDOWN, _DROPDOWN_FIELDS),
        (FieldType.BUTTON, _BUTTON_FIELDS),
    ):
        for field_id in ids:
            table[field_id] = field_type
    return table


FIELD_TYPES: Final[Mapping[str, FieldType]] = MappingProxyType(_build_type_table())

BRAND_SOURCE: Final[str] = "brandData"
STATE_SOURCE: Final[str] = "stateData"
DEFAULT_DROPDOWN_SOURCE: Final[str] = BRAND_SOURCE

DROPDOWN_SOURCES: Final[Mapping[str, str]] = MappingProxyType(
    {
        "DD-EN-1": BRAND_SOURCE,
        "DD-EN-2": STATE_SOURCE,
        "DD-EN-3": STATE_SOURCE,
        "DD-EN-4": BRAND_SOURCE,
        "DD-EN-5": BRAND_SOURCE,
        "DD-EN-6": STATE_SOURCE,
        "DD-EN-7": BRAND_SOURCE,
        "DD-EN-8": STATE_SOURCE,
        "DD-EN-9": BRAND_SOURCE,
        "DD-EN-10": STATE_SOURCE,
        "status": "statusData",
        "category": "categoryData",
        "type": "typeData",
    }
)


def resolve_field_type(field_id: str | None, table: Mapping[str, FieldType] = FIELD_TYPES) -> FieldType:
    """Return the semantic type of a field.

    Lookup is exact on the stringified id; unknown or empty ids are text.
    """
    if not field_id:
        return FieldType.TEXT
    return table.get(str(field_id), FieldType.TEXT)


def dropdown_source_for(field_id: str | None, sources: Mapping[str, str] = DROPDOWN_SOURCES) -> str:
    """Return the dropdown data source key feeding a field."""
    if not field_id:
        return DEFAULT_DROPDOWN_SOURCE
    return sources.get(str(field_id), DEFAULT_DROPDOWN_SOURCE)
