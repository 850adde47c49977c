"""Engine services for ArchiveSearch.

Stateful components built on the core: the selection store, saved-group
normalization and accordion state, search state, and catalog loading.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ArchiveSearch.services.accordion import AccordionState, AccordionStateTracker
from ArchiveSearch.services.catalog import (
    CatalogBundle,
    CatalogProvider,
    CatalogService,
    CatalogState,
    LocaleSession,
    extract_fields_to_map,
)
from ArchiveSearch.services.saved_groups import PayloadShape, SavedGroupNormalizer, detect_shape, field_identifier
from ArchiveSearch.services.selection import SelectionStore
from ArchiveSearch.services.state import SearchState, SearchStateManager

if TYPE_CHECKING:
    from ArchiveSearch.config import AppConfig


def create_catalog_service(config: AppConfig) -> CatalogService:
    """Create a catalog service backed by the configured provider.

    Args:
        config: Application configuration containing catalog settings.

    Returns:
        Configured CatalogService instance.
    """
    from ArchiveSearch.sources.registry import build_provider

    return CatalogService(build_provider(config.catalog.provider, config=config))


__all__ = [
    "AccordionState",
    "AccordionStateTracker",
    "CatalogBundle",
    "CatalogProvider",
    "CatalogService",
    "CatalogState",
    "LocaleSession",
    "PayloadShape",
    "SavedGroupNormalizer",
    "SearchState",
    "SearchStateManager",
    "SelectionStore",
    "create_catalog_service",
    "detect_shape",
    "extract_fields_to_map",
    "field_identifier",
]
