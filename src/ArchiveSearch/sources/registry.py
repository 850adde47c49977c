"""Provider registry and builders for catalog providers."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ArchiveSearch.config import AppConfig
    from ArchiveSearch.services.catalog import CatalogProvider

ProviderBuilder = Callable[["AppConfig"], "CatalogProvider"]


def build_provider(provider_name: str, *, config: AppConfig) -> CatalogProvider:
    """Build a catalog provider from its registered name.

    Args:
        provider_name: Provider identifier from ``catalog.provider``.
        config: Parsed application configuration.

    Returns:
        Initialized provider implementation.

    Raises:
        ValueError: If ``provider_name`` is not registered.
    """
    builder = _provider_builders().get(provider_name)
    if builder is None:
        raise ValueError(f"Unsupported provider in config.catalog.provider: {provider_name}")
    return builder(config)


def supported_provider_names() -> tuple[str, ...]:
    """Return all provider names that can be built by the registry."""
    return tuple(_provider_builders().keys())


def _provider_builders() -> dict[str, ProviderBuilder]:
    return {
        "file": _build_file_provider,
        "http": _build_http_provider,
    }


def _build_file_provider(config: AppConfig) -> CatalogProvider:
    from ArchiveSearch.sources.file import FileCatalogProvider

    return FileCatalogProvider(Path(config.catalog.path))


def _build_http_provider(config: AppConfig) -> CatalogProvider:
    from ArchiveSearch.sources.http import HttpCatalogProvider

    return HttpCatalogProvider(
        base_url=config.catalog.base_url,
        timeout=config.catalog.timeout,
        api_key=config.catalog.api_key,
    )
