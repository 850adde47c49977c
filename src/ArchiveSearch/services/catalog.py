"""Catalog loading and locale switching."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Protocol, Sequence

from ArchiveSearch.core.controls import DropdownDataRegistry
from ArchiveSearch.core.models import ErrorState, LabeledRef
from ArchiveSearch.core.observable import Observable
from ArchiveSearch.core.operators import OperatorCatalog
from ArchiveSearch.utils.log import log

if TYPE_CHECKING:
    from ArchiveSearch.services.selection import SelectionStore

FIELDS_ERROR_MESSAGE = "Failed to load field data. Please try again."
SAVED_SEARCHES_ERROR_MESSAGE = "Failed to load saved searches. Please try again."


class CatalogProvider(Protocol):
    """Protocol for a source of per-locale catalogs."""

    name: str

    def get_parent_catalog(self, locale: str) -> list[dict[str, Any]]:
        """Return the archival types ("system types") for a locale."""
        raise NotImplementedError

    def get_fields_by_locale(self, locale: str) -> list[dict[str, Any]]:
        """Return the root field catalog, possibly nested via `children`."""
        raise NotImplementedError

    def get_scoped_fields(self, parent_ids: Sequence[str], locale: str) -> list[dict[str, Any]]:
        """Return the fields offered under the given parents."""
        raise NotImplementedError

    def get_operator_catalog(self) -> dict[str, Any]:
        """Return the raw per-category operator tables."""
        raise NotImplementedError

    def get_dropdown_data(self, source: str, locale: str) -> list[dict[str, Any]]:
        """Return the items of one dropdown data source."""
        raise NotImplementedError

    def get_saved_searches(self) -> Any:
        """Return the raw saved-group payload."""
        raise NotImplementedError

    def close(self) -> None:
        """Close resources held by provider."""
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class CatalogState:
    loading: bool = False
    error: ErrorState = ErrorState()


@dataclass(frozen=True, slots=True)
class CatalogBundle:
    """Everything the relabel step needs for one locale."""

    locale: str
    parents: tuple[LabeledRef, ...] = ()
    root_map: Mapping[str, Any] = field(default_factory=dict)
    scoped_map: Mapping[str, Any] = field(default_factory=dict)
    operators: OperatorCatalog = OperatorCatalog()


def extract_fields_to_map(items: Iterable[Any]) -> dict[str, dict[str, Any]]:
    """Index catalog entries by id, descending into nested `children`."""
    fields: dict[str, dict[str, Any]] = {}
    for item in items or ():
        if not isinstance(item, Mapping):
            continue
        if item.get("id") is not None:
            fields[str(item["id"])] = dict(item)
        children = item.get("children")
        if children:
            fields.update(extract_fields_to_map(children))
    return fields


def refs_from_items(items: Iterable[Any]) -> tuple[LabeledRef, ...]:
    refs: list[LabeledRef] = []
    for item in items or ():
        if isinstance(item, LabeledRef):
            refs.append(item)
        elif isinstance(item, Mapping) and item.get("id") is not None:
            refs.append(LabeledRef(id=str(item["id"]), label=str(item.get("label") or "")))
    return tuple(refs)


class CatalogService(Observable[CatalogState]):
    """Load catalogs from a provider and expose loading/error state.

    Fetch failures never propagate: they are logged, published as
    `CatalogState.error`, and the last good bundle stays available.
    """

    def __init__(self, provider: CatalogProvider) -> None:
        super().__init__(CatalogState())
        self.provider = provider
        self.last_bundle: CatalogBundle | None = None

    @property
    def error(self) -> ErrorState:
        return self.get_snapshot().error

    def fetch_bundle(self, locale: str, parent_ids: Sequence[str] = ()) -> CatalogBundle | None:
        """Fetch the catalogs for `locale`.

        Args:
            locale: Target display locale.
            parent_ids: Parents whose scoped fields are needed.

        Returns:
            The new bundle, or None when the root catalogs failed to load.
        """
        self._publish(CatalogState(loading=True, error=ErrorState()))
        provider_name = getattr(self.provider, "name", "unknown")
        try:
            parents = refs_from_items(self.provider.get_parent_catalog(locale))
            root_map = extract_fields_to_map(self.provider.get_fields_by_locale(locale))
            operators = OperatorCatalog.from_mapping(self.provider.get_operator_catalog(), locale)
        except Exception as error:  # noqa: BLE001 - catalog failure becomes error state
            log.warning("Catalog fetch failed: provider=%s locale=%s error=%s", provider_name, locale, error)
            self._publish(CatalogState(loading=False, error=ErrorState(has_error=True, message=FIELDS_ERROR_MESSAGE)))
            return None

        bundle = CatalogBundle(
            locale=locale,
            parents=parents,
            root_map=root_map,
            scoped_map=self._load_scoped(parent_ids, locale),
            operators=operators,
        )
        self.last_bundle = bundle
        log.debug(
            "Catalog bundle loaded: locale=%s parents=%d fields=%d scoped=%d",
            locale,
            len(parents),
            len(root_map),
            len(bundle.scoped_map),
        )
        self._publish(CatalogState())
        return bundle

    def _load_scoped(self, parent_ids: Sequence[str], locale: str) -> dict[str, dict[str, Any]]:
        ids = [pid for pid in parent_ids if pid]
        scoped: dict[str, dict[str, Any]] = {}
        for parent_id in ids:
            try:
                items = self.provider.get_scoped_fields([parent_id], locale)
            except Exception as error:  # noqa: BLE001 - one parent failing must not drop the others
                log.warning("Scoped field fetch failed: parent=%s error=%s", parent_id, error)
                continue
            scoped.update(extract_fields_to_map(items))
        return scoped

    def load_dropdowns(self, registry: DropdownDataRegistry, sources: Iterable[str], locale: str) -> None:
        """Fill `registry` with the items of every source in `sources`."""
        for source in sources:
            try:
                items = self.provider.get_dropdown_data(source, locale)
            except Exception as error:  # noqa: BLE001 - missing dropdown data is not fatal
                log.warning("Dropdown fetch failed: source=%s error=%s", source, error)
                continue
            registry.set_source(source, refs_from_items(items))

    def load_saved_searches(self) -> Any:
        try:
            return self.provider.get_saved_searches()
        except Exception as error:  # noqa: BLE001 - catalog failure becomes error state
            log.warning("Saved search fetch failed: error=%s", error)
            self._publish(CatalogState(error=ErrorState(has_error=True, message=SAVED_SEARCHES_ERROR_MESSAGE)))
            return None

    def clear_error(self) -> None:
        self._publish(CatalogState())

    def close(self) -> None:
        self.provider.close()


class LocaleSession:
    """Serialize locale changes for one selection store.

    Every locale request gets a sequence token. A fetched bundle is applied
    only while its token is the latest one and the session is open, so a
    slow response for an older locale never overwrites a newer one.
    """

    def __init__(self, catalog: CatalogService, store: SelectionStore, locale: str = "en") -> None:
        self.catalog = catalog
        self.store = store
        self.locale = locale
        self._sequence = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def request_locale(self, locale: str) -> int:
        """Start a locale change and return its token.

        Raises:
            RuntimeError: If the session was closed.
        """
        if self._closed:
            raise RuntimeError("Locale session is closed")
        self._sequence += 1
        log.debug("Locale requested: locale=%s token=%d", locale, self._sequence)
        return self._sequence

    def is_current(self, token: int) -> bool:
        return not self._closed and token == self._sequence

    def apply_catalogs(self, token: int, bundle: CatalogBundle | None) -> bool:
        """Relabel the store from `bundle` if `token` is still current.

        Returns:
            True when the bundle was applied.
        """
        if not self.is_current(token):
            log.debug("Discarding stale catalog response: token=%d latest=%d", token, self._sequence)
            return False
        if bundle is None:
            return False
        self.store.set_operator_catalog(bundle.operators)
        self.store.update_field_labels(bundle.root_map, bundle.scoped_map, bundle.parents, bundle.locale)
        self.locale = bundle.locale
        log.info("Locale applied: locale=%s", bundle.locale)
        return True

    def change_locale(self, locale: str, parent_ids: Sequence[str] | None = None) -> bool:
        """Fetch catalogs for `locale` and relabel the store.

        Args:
            locale: Target locale.
            parent_ids: Parents for the scoped catalog; defaults to the
                parents referenced by the store's rows.
        """
        token = self.request_locale(locale)
        if parent_ids is None:
            parent_ids = self.store.parent_ids()
        bundle = self.catalog.fetch_bundle(locale, parent_ids)
        return self.apply_catalogs(token, bundle)

    def close(self) -> None:
        self._closed = True
