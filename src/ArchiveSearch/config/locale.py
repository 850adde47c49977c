"""Display locale configuration (`locale` section)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ArchiveSearch.config.common import ConfigSection


@dataclass(frozen=True, slots=True)
class LocaleConfig:
    default: str
    supported: tuple[str, ...]


def load_locale(raw: Mapping[str, Any]) -> LocaleConfig:
    section = ConfigSection(raw, "locale", required=False)
    codes: list[str] = []
    for item in section.text_list("supported", ["en", "de"]):
        code = item.strip().lower()
        if code and code not in codes:
            codes.append(code)
    return LocaleConfig(
        default=section.text("default", "en").strip().lower(),
        supported=tuple(codes),
    )


def check_locale(config: LocaleConfig) -> None:
    if not config.supported:
        raise ValueError("locale.supported must include at least one locale")
    if not config.default:
        raise ValueError("locale.default must not be empty")
