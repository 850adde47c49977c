"""Tests for config override behavior with defaults."""

import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ArchiveSearch.config import load_config, load_config_with_defaults


_BASE_YAML = """
log:
  level: INFO
  to_file: false
  dir: log

locale:
  default: en
  supported: [en, de]

catalog:
  provider: file
  path: config/catalog.yml
  base_url: ""
  timeout: 30
  api_key_env: ARCHIVE_API_KEY

storage:
  backend: sqlite
  db_path: database/session.db
"""


class TestConfigOverride(unittest.TestCase):
    def _write(self, tmp: str, name: str, text: str) -> Path:
        path = Path(tmp) / name
        path.write_text(text, encoding="utf-8")
        return path

    def test_override_merges_with_defaults(self) -> None:
        override_yaml = """
log:
  level: DEBUG

locale:
  default: de

storage:
  backend: memory
"""
        with tempfile.TemporaryDirectory() as tmp:
            default_path = self._write(tmp, "default.yml", _BASE_YAML)
            override_path = self._write(tmp, "override.yml", override_yaml)

            cfg = load_config_with_defaults(override_path, default_path=default_path)

        self.assertEqual(cfg.runtime.level, "DEBUG")
        self.assertFalse(cfg.runtime.to_file)
        self.assertEqual(cfg.locale.default, "de")
        self.assertEqual(cfg.locale.supported, ("en", "de"))
        self.assertEqual(cfg.storage.backend, "memory")
        self.assertEqual(cfg.storage.db_path, "database/session.db")
        self.assertEqual(cfg.catalog.path, "config/catalog.yml")

    def test_empty_override_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            default_path = self._write(tmp, "default.yml", _BASE_YAML)
            override_path = self._write(tmp, "override.yml", "{}")

            cfg = load_config_with_defaults(override_path, default_path=default_path)

        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.catalog.provider, "file")
        self.assertEqual(cfg.storage.backend, "sqlite")

    def test_load_config_reads_single_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self._write(tmp, "only.yml", _BASE_YAML)
            cfg = load_config(path)
        self.assertEqual(cfg.locale.default, "en")

    def test_non_mapping_root_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self._write(tmp, "bad.yml", "- just\n- a list\n")
            with self.assertRaisesRegex(ValueError, "mapping"):
                load_config(path)

    def test_shipped_default_config_parses(self) -> None:
        cfg = load_config(REPO_ROOT / "config" / "default.yml")
        self.assertEqual(cfg.catalog.provider, "file")
        self.assertEqual(cfg.locale.supported, ("en", "de"))


if __name__ == "__main__":
    unittest.main()
