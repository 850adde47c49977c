from __future__ import annotations

"""Root configuration: YAML files layered over defaults, parsed per section."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from ArchiveSearch.config.catalog import CatalogConfig, check_catalog, load_catalog
from ArchiveSearch.config.locale import LocaleConfig, check_locale, load_locale
from ArchiveSearch.config.runtime import RuntimeConfig, check_runtime, load_runtime
from ArchiveSearch.config.storage import StorageConfig, check_storage, load_storage

DEFAULT_CONFIG_PATH = Path("config/default.yml")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Every config section the CLI and services read."""

    runtime: RuntimeConfig
    locale: LocaleConfig
    catalog: CatalogConfig
    storage: StorageConfig


def parse_config_dict(raw: Mapping[str, Any]) -> AppConfig:
    """Build an AppConfig from an already merged mapping.

    Each section is loaded and checked on its own first; constraints that
    span sections are checked last.
    """
    runtime = load_runtime(raw)
    check_runtime(runtime)
    locale = load_locale(raw)
    check_locale(locale)
    catalog = load_catalog(raw)
    check_catalog(catalog)
    storage = load_storage(raw)
    check_storage(storage)

    config = AppConfig(runtime=runtime, locale=locale, catalog=catalog, storage=storage)
    check_cross_domain(config)
    return config


def load_config(path: Path) -> AppConfig:
    """Parse a single YAML file with no defaults layered underneath."""
    return parse_config_dict(_read_yaml(path))


def load_config_with_defaults(config_path: Path, default_path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Layer `config_path` over `default_path`; override keys win."""
    layered = _read_yaml(default_path)
    if Path(config_path) != Path(default_path):
        layered = merge_config_dicts(layered, _read_yaml(config_path))
    return parse_config_dict(layered)


def check_cross_domain(config: AppConfig) -> None:
    locale, catalog = config.locale, config.catalog
    if locale.default not in locale.supported:
        raise ValueError("locale.default must be listed in locale.supported")
    required_source = {"file": ("path", catalog.path), "http": ("base_url", catalog.base_url)}
    field, value = required_source.get(catalog.provider, ("", "-"))
    if not value.strip():
        raise ValueError(f"catalog.provider={catalog.provider} requires catalog.{field}")


def merge_config_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge nested mappings; any other override value replaces the base."""
    result: dict[str, Any] = dict(base)
    for key, incoming in override.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(incoming, Mapping):
            incoming = merge_config_dicts(current, incoming)
        result[key] = incoming
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    document = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if document is None:
        return {}
    if not isinstance(document, Mapping):
        raise ValueError(f"Config root must be a mapping/object: {path}")
    return dict(document)
