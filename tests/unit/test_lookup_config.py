"""Tests for iprisk.toml loading."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from iprisk.utils.config import load_lookup_config, load_lookup_settings


def _write_config(path: Path, body: str) -> Path:
    path.write_text(body, encoding="utf-8")
    return path


class TestLoadLookupConfig:
    """Test reading the [lookup] table."""

    def test_reads_known_keys(self, tmp_path: Path) -> None:
        """Known keys are returned as-is."""
        config_file = _write_config(
            tmp_path / "iprisk.toml",
            """
[lookup]
cache_ttl_seconds = 300
providers = ["ipapi.co", "ip-api"]
reverse_dns = true
""",
        )

        assert load_lookup_config(config_file) == {
            "cache_ttl_seconds": 300,
            "providers": ["ipapi.co", "ip-api"],
            "reverse_dns": True,
        }

    def test_unknown_keys_are_ignored_with_warning(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Unknown keys are dropped and logged."""
        config_file = _write_config(tmp_path / "iprisk.toml", "[lookup]\nrate_burst = 3\ncolour = 'blue'\n")

        with caplog.at_level(logging.WARNING, logger="iprisk.utils.config"):
            config = load_lookup_config(config_file)

        assert config == {"rate_burst": 3}
        assert "colour" in caplog.text

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file yields None."""
        assert load_lookup_config(tmp_path / "absent.toml") is None

    def test_missing_lookup_table(self, tmp_path: Path) -> None:
        """A file without [lookup] yields None."""
        config_file = _write_config(tmp_path / "iprisk.toml", "[other]\nkey = 1\n")

        assert load_lookup_config(config_file) is None

    def test_malformed_toml(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Parse errors are logged and treated as no config."""
        config_file = _write_config(tmp_path / "iprisk.toml", "[lookup\nbroken = \n")

        with caplog.at_level(logging.WARNING, logger="iprisk.utils.config"):
            assert load_lookup_config(config_file) is None

        assert "Failed to parse" in caplog.text

    def test_default_locations(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """config/iprisk.toml is preferred over ./iprisk.toml."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config").mkdir()
        _write_config(tmp_path / "config" / "iprisk.toml", "[lookup]\nmax_retries = 4\n")
        _write_config(tmp_path / "iprisk.toml", "[lookup]\nmax_retries = 1\n")

        assert load_lookup_config() == {"max_retries": 4}


class TestLoadLookupSettings:
    """Test building settings from TOML, environment and overrides."""

    def test_overrides_beat_toml_and_toml_beats_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Precedence is overrides, then TOML, then environment."""
        config_file = _write_config(tmp_path / "iprisk.toml", "[lookup]\ncache_ttl_seconds = 300\nrate_burst = 2\n")
        monkeypatch.setenv("IPRISK_CACHE_TTL", "60")
        monkeypatch.setenv("IPRISK_RATE_BURST", "8")
        monkeypatch.setenv("IPRISK_MAX_RETRIES", "5")

        settings = load_lookup_settings({"rate_burst": 10, "cache_dir": None}, path=config_file)

        assert settings.rate_burst == 10
        assert settings.cache_ttl_seconds == 300
        assert settings.max_retries == 5

    def test_without_any_file(self, tmp_path: Path) -> None:
        """Missing files fall back to defaults."""
        settings = load_lookup_settings(path=tmp_path / "absent.toml")

        assert settings.cache_ttl_seconds == 86400
