"""Archive catalog API client.

Calls the archive's catalog endpoints over HTTP with retry/backoff and
returns decoded JSON. Mapping into engine types happens in the catalog
service.
"""

from __future__ import annotations

import random
import time
from typing import Any, Sequence

import requests

from ArchiveSearch.utils.log import log

DEFAULT_TIMEOUT = 30.0
MAX_ATTEMPTS = 4
BASE_PAUSE = 1.0
MAX_SLEEP = 15
TOO_MANY_REQUESTS_BASE_PAUSE = 3.0
TOO_MANY_REQUESTS_MAX_SLEEP = 60.0

RETRYABLE_STATUS = {429, 500, 502, 503, 504}

HEADERS = {
    "User-Agent": "archive-search/0.1",
    "Accept": "application/json",
}


class HttpCatalogProvider:
    """Catalog provider for the archive HTTP API."""

    name = "http"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        api_key: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or DEFAULT_TIMEOUT
        self._session = session or requests.Session()
        self._headers = dict(HEADERS)
        if api_key:
            self._headers["Authorization"] = f"Bearer {api_key}"

    def close(self) -> None:
        """Close the underlying HTTP session and release pooled connections."""
        self._session.close()

    def __enter__(self) -> HttpCatalogProvider:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def get_parent_catalog(self, locale: str) -> list[dict[str, Any]]:
        return _as_list(self._get_json("/system-types", params={"lang": locale}))

    def get_fields_by_locale(self, locale: str) -> list[dict[str, Any]]:
        return _as_list(self._get_json("/fields", params={"lang": locale}))

    def get_scoped_fields(self, parent_ids: Sequence[str], locale: str) -> list[dict[str, Any]]:
        out: list[dict[str, Any]] = []
        for parent_id in parent_ids:
            out.extend(_as_list(self._get_json(f"/system-types/{parent_id}/fields", params={"lang": locale})))
        return out

    def get_operator_catalog(self) -> dict[str, Any]:
        data = self._get_json("/operators")
        return data if isinstance(data, dict) else {}

    def get_dropdown_data(self, source: str, locale: str) -> list[dict[str, Any]]:
        return _as_list(self._get_json(f"/dropdowns/{source}", params={"lang": locale}))

    def get_saved_searches(self) -> Any:
        return self._get_json("/saved-searches")

    def _get_json(self, path: str, *, params: dict[str, str] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        resp = self._request(url, params or {})
        resp.raise_for_status()
        log.debug("Catalog response ok: url=%s status=%s bytes=%s", url, resp.status_code, len(resp.content))
        return resp.json()

    def _request(self, url: str, params: dict[str, str]) -> requests.Response:
        """GET `url`, retrying transport errors and transient status codes.

        Non-retryable responses (including 4xx) are returned as-is so the
        caller decides how to surface them. After the last attempt the most
        recent error is raised.
        """
        failure: requests.exceptions.RequestException | None = None
        for attempt in range(1, MAX_ATTEMPTS + 1):
            status: int | None = None
            log.debug("Catalog request attempt %d/%d to %s", attempt, MAX_ATTEMPTS, url)
            try:
                resp = self._session.get(url, params=params, headers=self._headers, timeout=self.timeout)
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as exc:
                failure = exc
            else:
                if resp.status_code not in RETRYABLE_STATUS:
                    return resp
                status = resp.status_code
                failure = requests.exceptions.HTTPError(f"HTTP {status}", response=resp)

            if attempt == MAX_ATTEMPTS:
                break
            log.debug("Catalog retrying after attempt %d (error=%s)", attempt, failure)
            self._sleep_backoff(attempt, status_code=status)

        log.warning("Catalog request failed after %d attempts: %s", MAX_ATTEMPTS, url)
        raise failure

    @staticmethod
    def _sleep_backoff(attempt: int, *, status_code: int | None = None) -> None:
        """Exponential pause; rate-limited responses wait longer and skip jitter."""
        if status_code == 429:
            pause = TOO_MANY_REQUESTS_BASE_PAUSE * 2 ** (attempt - 1)
            time.sleep(min(pause, TOO_MANY_REQUESTS_MAX_SLEEP))
        else:
            pause = BASE_PAUSE * 2 ** (attempt - 1) + random.uniform(0, 0.5)
            time.sleep(min(pause, MAX_SLEEP))


def _as_list(data: Any) -> list[dict[str, Any]]:
    """Accept a bare JSON array or an ``{"items": [...]}`` envelope."""
    if isinstance(data, dict):
        data = data.get("items")
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]
