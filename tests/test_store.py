"""Tests for clash_patch.store."""

from pathlib import Path

import pytest

from clash_patch.errors import ConfigDirectoryUnavailable, ConfigError, ConfigNotFound
from clash_patch.settings import default_config
from clash_patch.store import ConfigStore


class TestConfigStore:
    def test_load_missing(self, tmp_path: Path) -> None:
        store = ConfigStore(tmp_path / "conf")
        assert not store.exists()
        with pytest.raises(ConfigNotFound):
            store.load()

    def test_save_creates_directory(self, tmp_path: Path) -> None:
        store = ConfigStore(tmp_path / "a" / "b")
        assert store.save("mode: rule\n") is None
        assert store.load() == "mode: rule\n"
        assert store.path.name == "config.yaml"

    def test_backup_keeps_previous_text(self, tmp_path: Path) -> None:
        store = ConfigStore(tmp_path)
        store.save("mode: rule\n")
        bak = store.save("mode: global\n", backup=True)
        assert bak is not None
        assert bak.name.startswith("config.yaml.bak.")
        assert bak.read_text(encoding="utf-8") == "mode: rule\n"
        assert store.load() == "mode: global\n"

    def test_directory_is_a_file(self, tmp_path: Path) -> None:
        blocker = tmp_path / "conf"
        blocker.write_text("x", encoding="utf-8")
        with pytest.raises(ConfigError):
            ConfigStore(blocker).save("mode: rule\n")
        with pytest.raises(ConfigDirectoryUnavailable):
            ConfigStore(blocker).ensure_directory()

    def test_sanitize_in_place(self, tmp_path: Path) -> None:
        store = ConfigStore(tmp_path)
        store.save("dns:\n  fallback-filter:\n    geoip: true\n")
        assert store.sanitize() is True
        assert store.load() == "geo-auto-update: false\n\ndns:\n  fallback-filter:\n    geoip: false\n"
        assert store.sanitize() is False

    def test_sanitize_clean_file_is_not_rewritten(self, tmp_path: Path) -> None:
        store = ConfigStore(tmp_path)
        store.save(default_config())
        before = store.path.stat().st_mtime_ns
        assert store.sanitize() is False
        assert store.path.stat().st_mtime_ns == before
