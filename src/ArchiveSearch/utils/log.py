"""Package logger for ArchiveSearch.

Console lines look like ``10-18 14:02:11 [WARN] message``. A CLI action may
also mirror everything (DEBUG and up) into ``<dir>/<action>/<action>_<ts>.log``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Final

LOGGER_NAME: Final[str] = "ArchiveSearch"

log = logging.getLogger(LOGGER_NAME)


class ShortLevelFormatter(logging.Formatter):
    """Formatter exposing a four-letter `%(short_level)s` field."""

    SHORT_NAMES: Final[dict[int, str]] = {
        logging.DEBUG: "DEBG",
        logging.WARNING: "WARN",
        logging.ERROR: "ERRO",
        logging.CRITICAL: "ERRO",
    }

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s [%(short_level)s] %(message)s", datefmt="%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - stdlib override
        record.short_level = self.SHORT_NAMES.get(record.levelno, record.levelname[:4])
        return super().format(record)


def action_log_path(log_dir: str, action: str, *, now: datetime | None = None) -> Path:
    stamp = (now or datetime.now()).strftime("%m%d%H%M%S")
    return Path(log_dir or "log") / action / f"{action}_{stamp}.log"


def configure_logging(
    *,
    level: str = "INFO",
    action: str | None = None,
    log_to_file: bool = False,
    log_dir: str = "log",
) -> Path | None:
    """Replace the package logger's handlers.

    Args:
        level: Console level name; unknown names fall back to INFO.
        action: CLI action name; required for the file mirror.
        log_to_file: Open a per-action log file next to the console stream.
        log_dir: Base directory for per-action files.

    Returns:
        The log file path when a file handler was attached, else None.
    """
    console_level = logging.getLevelName((level or "INFO").upper())
    if not isinstance(console_level, int):
        console_level = logging.INFO

    for stale in list(log.handlers):
        log.removeHandler(stale)
        stale.close()

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(ShortLevelFormatter())
    log.addHandler(console)

    log_path: Path | None = None
    if log_to_file and action:
        log_path = action_log_path(log_dir, action)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        mirror = logging.FileHandler(log_path, encoding="utf-8")
        mirror.setLevel(logging.DEBUG)
        mirror.setFormatter(ShortLevelFormatter())
        log.addHandler(mirror)

    log.setLevel(logging.DEBUG)
    log.propagate = False
    return log_path
