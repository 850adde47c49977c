"""Command runner for coordinating CLI execution.

Manages component lifecycle, resource cleanup, logging configuration,
and error handling for command execution.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

import click

from ArchiveSearch.cli.commands import EngineSession
from ArchiveSearch.config import AppConfig
from ArchiveSearch.services import create_catalog_service
from ArchiveSearch.services.accordion import AccordionStateTracker
from ArchiveSearch.services.selection import SelectionStore
from ArchiveSearch.services.state import SearchStateManager
from ArchiveSearch.storage import create_storage
from ArchiveSearch.utils.log import configure_logging, log

T = TypeVar("T")


class CommandRunner:
    """Orchestrates command execution with proper resource management.

    Handles logging configuration, engine wiring from config, catalog
    loading, and error handling for CLI commands.
    """

    def __init__(self, config: AppConfig, locale: str | None = None) -> None:
        """Initialize command runner.

        Args:
            config: Application configuration.
            locale: Display locale; defaults to `locale.default`.
        """
        self.config = config
        self.locale = locale or config.locale.default

    def run(self, action: str, command: Callable[[EngineSession], T]) -> T:
        """Execute a command against a freshly opened session.

        Args:
            action: The CLI command name (e.g., 'add').
            command: Callable receiving the session and producing output.

        Raises:
            click.Abort: When the command fails.
        """
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )
        try:
            with self.open_session() as session:
                return command(session)
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action.capitalize(), e)
            raise click.Abort from e

    @contextmanager
    def open_session(self) -> Iterator[EngineSession]:
        """Wire storage, catalogs and engine services for one invocation."""
        storage = create_storage(self.config)
        catalog = create_catalog_service(self.config)
        try:
            store = SelectionStore(storage)
            store.load_from_persistence(self.locale)
            state = SearchStateManager(storage)

            bundle = catalog.fetch_bundle(self.locale, store.parent_ids() or state.selected_parent_ids())
            if bundle is not None:
                store.set_operator_catalog(bundle.operators)
            else:
                log.warning("Continuing without catalogs: %s", catalog.error.message)

            accordion = AccordionStateTracker(storage, state.saved_groups)
            yield EngineSession(
                config=self.config,
                storage=storage,
                catalog=catalog,
                store=store,
                state=state,
                accordion=accordion,
                locale=self.locale,
                bundle=bundle,
            )
        finally:
            catalog.close()
            close = getattr(storage, "close", None)
            if callable(close):
                close()
