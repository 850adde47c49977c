"""Logging configuration (`log` section)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ArchiveSearch.config.common import ConfigSection

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """Console level and optional per-action log files.

    Attributes:
        level: Console log level name, upper-cased.
        to_file: Mirror each CLI action into its own log file.
        dir: Base directory for those files.
    """

    level: str
    to_file: bool
    dir: str


def load_runtime(raw: Mapping[str, Any]) -> RuntimeConfig:
    log_section = ConfigSection(raw, "log", required=True)
    return RuntimeConfig(
        level=log_section.text("level").strip().upper(),
        to_file=log_section.flag("to_file", False),
        dir=log_section.text("dir", "log"),
    )


def check_runtime(config: RuntimeConfig) -> None:
    if config.level not in LOG_LEVELS:
        raise ValueError(f"log.level must be one of {list(LOG_LEVELS)}")
    if config.to_file and not config.dir.strip():
        raise ValueError("log.dir must not be empty when log.to_file is enabled")
