"""Catalog provider configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from ArchiveSearch.config.common import ConfigSection
from ArchiveSearch.sources.registry import supported_provider_names


@dataclass(frozen=True, slots=True)
class CatalogConfig:
    """Where field, parent and operator catalogs come from.

    Attributes:
        provider: Registered provider name (`file` or `http`).
        path: Catalog file for the file provider.
        base_url: API root for the http provider.
        timeout: HTTP timeout in seconds.
        api_key_env: Environment variable holding the API token.
        api_key: Token resolved from the environment, if any.
    """

    provider: str
    path: str
    base_url: str
    timeout: float
    api_key_env: str
    api_key: str | None = None


def load_catalog(raw: Mapping[str, Any], env: Mapping[str, str] | None = None) -> CatalogConfig:
    """Load the `catalog` section.

    Args:
        raw: Root configuration mapping.
        env: Environment used to resolve the API key; defaults to
            ``os.environ``.
    """
    section = ConfigSection(raw, "catalog", required=True)
    env = os.environ if env is None else env
    api_key_env = section.text("api_key_env", "ARCHIVE_API_KEY")
    return CatalogConfig(
        provider=section.choice("provider", supported_provider_names(), "file"),
        path=section.text("path", ""),
        base_url=section.text("base_url", ""),
        timeout=section.number("timeout", 30),
        api_key_env=api_key_env,
        api_key=env.get(api_key_env) or None,
    )


def check_catalog(config: CatalogConfig) -> None:
    if config.timeout <= 0:
        raise ValueError("catalog.timeout must be positive")
