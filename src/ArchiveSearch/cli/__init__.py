"""CLI package for ArchiveSearch command orchestration.

Click wiring lives in `ui`, lifecycle and error handling in `runner`, and
the per-command logic in `commands`.
"""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from ArchiveSearch.cli.runner import CommandRunner
from ArchiveSearch.cli.ui import cli


def main() -> None:
    """Run ArchiveSearch CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()
