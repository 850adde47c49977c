"""Tests for the HTTP catalog provider's request and retry handling."""

from __future__ import annotations

import json
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

import requests

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ArchiveSearch.sources.http import MAX_ATTEMPTS, HttpCatalogProvider


def _response(status: int, payload=None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.url = "https://archive.example.org/api"
    resp._content = json.dumps(payload if payload is not None else {}).encode("utf-8")
    return resp


class _FakeSession:
    def __init__(self, outcomes) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict] = []
        self.closed = False

    def get(self, url, *, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:
        self.closed = True


class TestHttpCatalogProvider(unittest.TestCase):
    def _provider(self, outcomes, **kwargs) -> tuple[HttpCatalogProvider, _FakeSession]:
        session = _FakeSession(outcomes)
        provider = HttpCatalogProvider("https://archive.example.org/api/", session=session, **kwargs)
        return provider, session

    def test_endpoints_and_locale_params(self) -> None:
        provider, session = self._provider(
            [
                _response(200, [{"id": "100", "label": "Personalakten"}, "junk"]),
                _response(200, {"items": [{"id": "Age", "label": "Alter"}]}),
                _response(200, [{"id": "x", "label": "X"}]),
                _response(200, {"numberOperations": []}),
                _response(200, [{"id": "b1", "label": "Acme"}]),
            ]
        )

        self.assertEqual(provider.get_parent_catalog("de"), [{"id": "100", "label": "Personalakten"}])
        self.assertEqual(provider.get_fields_by_locale("de"), [{"id": "Age", "label": "Alter"}])
        self.assertEqual(provider.get_scoped_fields(["100"], "de"), [{"id": "x", "label": "X"}])
        self.assertEqual(provider.get_operator_catalog(), {"numberOperations": []})
        self.assertEqual(provider.get_dropdown_data("brandData", "de"), [{"id": "b1", "label": "Acme"}])

        urls = [call["url"] for call in session.calls]
        self.assertEqual(
            urls,
            [
                "https://archive.example.org/api/system-types",
                "https://archive.example.org/api/fields",
                "https://archive.example.org/api/system-types/100/fields",
                "https://archive.example.org/api/operators",
                "https://archive.example.org/api/dropdowns/brandData",
            ],
        )
        self.assertEqual(session.calls[0]["params"], {"lang": "de"})
        self.assertEqual(session.calls[3]["params"], {})
        self.assertNotIn("Authorization", session.calls[0]["headers"])

    def test_api_key_sent_as_bearer_token(self) -> None:
        provider, session = self._provider([_response(200, [])], api_key="secret", timeout=5.0)
        provider.get_saved_searches()
        self.assertEqual(session.calls[0]["headers"]["Authorization"], "Bearer secret")
        self.assertEqual(session.calls[0]["timeout"], 5.0)

    def test_retries_transient_failures(self) -> None:
        provider, session = self._provider(
            [
                requests.exceptions.ConnectionError("reset"),
                _response(503),
                _response(429),
                _response(200, [{"id": "1", "label": "One"}]),
            ]
        )
        with patch.object(HttpCatalogProvider, "_sleep_backoff") as sleep:
            self.assertEqual(provider.get_parent_catalog("en"), [{"id": "1", "label": "One"}])

        self.assertEqual(len(session.calls), 4)
        self.assertEqual(sleep.call_count, 3)
        self.assertEqual(sleep.call_args_list[2].kwargs["status_code"], 429)

    def test_exhausted_retries_raise_last_error(self) -> None:
        provider, session = self._provider([_response(500) for _ in range(MAX_ATTEMPTS)])
        with patch.object(HttpCatalogProvider, "_sleep_backoff") as sleep:
            with self.assertRaises(requests.exceptions.HTTPError):
                provider.get_fields_by_locale("en")
        self.assertEqual(len(session.calls), MAX_ATTEMPTS)
        self.assertEqual(sleep.call_count, MAX_ATTEMPTS - 1)

    def test_client_error_is_not_retried(self) -> None:
        provider, session = self._provider([_response(404)])
        with patch.object(HttpCatalogProvider, "_sleep_backoff") as sleep:
            with self.assertRaises(requests.exceptions.HTTPError):
                provider.get_operator_catalog()
        self.assertEqual(len(session.calls), 1)
        sleep.assert_not_called()

    def test_context_manager_closes_session(self) -> None:
        provider, session = self._provider([])
        with provider:
            pass
        self.assertTrue(session.closed)


if __name__ == "__main__":
    unittest.main()
