from __future__ import annotations

"""Typed access to one section of the raw configuration mapping."""

from typing import Any, Iterable, Mapping

_MISSING = object()


class ConfigSection:
    """Read and type-check the fields of one config section.

    Every error names the full dotted key (``section.field``) so a bad
    config file can be fixed without reading the loader.

    Args:
        raw: Root configuration mapping.
        name: Section name.
        required: Whether the section must be present.

    Raises:
        ValueError: If a required section is missing.
        TypeError: If the section is not a mapping.
    """

    def __init__(self, raw: Mapping[str, Any], name: str, *, required: bool) -> None:
        section = raw.get(name)
        if section is None:
            if required:
                raise ValueError(f"Missing required config: {name}")
            section = {}
        if not isinstance(section, Mapping):
            raise TypeError(f"{name} must be an object")
        self.name = name
        self._values = section

    def key(self, field: str) -> str:
        return f"{self.name}.{field}"

    def value(self, field: str, default: Any = _MISSING) -> Any:
        """Return a raw field value; null values count as missing."""
        value = self._values.get(field)
        if value is not None:
            return value
        if default is _MISSING:
            raise ValueError(f"Missing required config: {self.key(field)}")
        return default

    def text(self, field: str, default: Any = _MISSING) -> str:
        value = self.value(field, default)
        if not isinstance(value, str):
            raise TypeError(f"{self.key(field)} must be a string")
        return value

    def flag(self, field: str, default: Any = _MISSING) -> bool:
        value = self.value(field, default)
        if not isinstance(value, bool):
            raise TypeError(f"{self.key(field)} must be a boolean")
        return value

    def number(self, field: str, default: Any = _MISSING) -> float:
        value = self.value(field, default)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{self.key(field)} must be a number")
        return float(value)

    def choice(self, field: str, choices: Iterable[str], default: Any = _MISSING) -> str:
        """Return a lower-cased string that must be one of `choices`."""
        text = self.text(field, default).strip().lower()
        allowed = sorted(choices)
        if text not in allowed:
            raise ValueError(f"{self.key(field)} must be one of {allowed}")
        return text

    def text_list(self, field: str, default: Any = _MISSING) -> list[str]:
        value = self.value(field, default)
        if not isinstance(value, list):
            raise TypeError(f"{self.key(field)} must be a list")
        for idx, item in enumerate(value):
            if not isinstance(item, str):
                raise TypeError(f"{self.key(field)}[{idx}] must be a string")
        return list(value)
