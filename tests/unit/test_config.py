"""Tests for configuration management."""

from pathlib import Path

import pytest

from keepwarm.config import KeepwarmSettings, get_settings, reset_settings


class TestResolvedApiUrl:
    """Tests for KeepwarmSettings.resolved_api_url."""

    def test_production_by_default(self) -> None:
        settings = get_settings()
        assert settings.resolved_api_url == "https://collaborative-whiteboard-i6ri.onrender.com"

    def test_localhost_uses_local_backend(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KEEPWARM_PAGE_HOSTNAME", "localhost")
        reset_settings()
        assert get_settings().resolved_api_url == "http://localhost:5050"

    def test_other_hostname_uses_production(self) -> None:
        settings = KeepwarmSettings(page_hostname="board.example.com")
        assert settings.resolved_api_url == settings.production_api_url

    def test_explicit_api_url_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KEEPWARM_API_URL", "http://staging:8080")
        monkeypatch.setenv("KEEPWARM_PAGE_HOSTNAME", "localhost")
        reset_settings()
        assert get_settings().resolved_api_url == "http://staging:8080"


class TestSettings:
    """Tests for settings loading."""

    def test_defaults(self) -> None:
        settings = get_settings()
        assert settings.interval_ms == 600_000
        assert settings.request_timeout == 30.0
        assert settings.log_format == "console"

    def test_config_dir_from_env(self, isolated_config: Path) -> None:
        assert get_settings().config_dir == isolated_config

    def test_interval_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KEEPWARM_INTERVAL_MS", "60000")
        reset_settings()
        assert get_settings().interval_ms == 60_000

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_reset_settings(self) -> None:
        first = get_settings()
        reset_settings()
        assert get_settings() is not first
