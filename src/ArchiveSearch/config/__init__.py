from __future__ import annotations

"""Public configuration API for ArchiveSearch."""

from ArchiveSearch.config.app import (
    AppConfig,
    check_cross_domain,
    load_config,
    load_config_with_defaults,
    parse_config_dict,
)
from ArchiveSearch.config.catalog import CatalogConfig
from ArchiveSearch.config.locale import LocaleConfig
from ArchiveSearch.config.runtime import RuntimeConfig
from ArchiveSearch.config.storage import StorageConfig

__all__ = [
    "RuntimeConfig",
    "LocaleConfig",
    "CatalogConfig",
    "StorageConfig",
    "AppConfig",
    "load_config",
    "load_config_with_defaults",
    "parse_config_dict",
    "check_cross_domain",
]
