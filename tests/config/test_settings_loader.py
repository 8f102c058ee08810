"""Tests for settings loading and saving."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import toml

from tenderdesk.config.loader import SettingsLoader, load_settings
from tenderdesk.config.models import CacheSettings, LoggingSettings, Settings
from tenderdesk.shared.errors import ApplicationError, ErrorCode


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from an empty directory with an empty home."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ("TENDERDESK_API__SUPABASE_URL", "TENDERDESK_API__SUPABASE_KEY", "TENDERDESK_CACHE__STALE_TIME"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


class TestLoadSettings:
    def test_defaults(self, isolated_cwd: Path) -> None:
        settings = load_settings()

        assert settings.cache.stale_time == 30.0
        assert settings.cache.gc_time == 300.0
        assert settings.app.currency == "ZAR"
        assert not settings.api.is_configured

    def test_environment_variables(self, isolated_cwd: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TENDERDESK_API__SUPABASE_URL", "https://project.supabase.co")
        monkeypatch.setenv("TENDERDESK_API__SUPABASE_KEY", "anon-key")
        monkeypatch.setenv("TENDERDESK_CACHE__STALE_TIME", "5")

        settings = load_settings()

        assert settings.api.is_configured
        assert settings.cache.stale_time == 5.0

    def test_dotenv_file(self, isolated_cwd: Path) -> None:
        (isolated_cwd / ".env").write_text("TENDERDESK_API__SUPABASE_URL=https://from-dotenv.supabase.co\n", encoding="utf-8")

        try:
            settings = load_settings()
        finally:
            os.environ.pop("TENDERDESK_API__SUPABASE_URL", None)

        assert settings.api.supabase_url == "https://from-dotenv.supabase.co"

    def test_default_config_location(self, isolated_cwd: Path) -> None:
        config_dir = isolated_cwd / "config"
        config_dir.mkdir()
        (config_dir / "config.toml").write_text('[cache]\neviction = "none"\n', encoding="utf-8")

        assert load_settings().cache.eviction == "none"

    def test_explicit_missing_file(self, isolated_cwd: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(isolated_cwd / "missing.toml")

    def test_invalid_file(self, isolated_cwd: Path) -> None:
        config_path = isolated_cwd / "bad.toml"
        config_path.write_text('[logging]\nlevel = "LOUD"\n', encoding="utf-8")

        with pytest.raises(ApplicationError) as exc_info:
            load_settings(config_path)

        assert exc_info.value.code == ErrorCode.CONFIG_ERROR


class TestSettingsModels:
    def test_api_key_masked_in_repr(self) -> None:
        settings = Settings(api={"supabase_url": "https://x.supabase.co", "supabase_key": "secret"})

        assert "secret" not in repr(settings.api)
        assert "****" in repr(settings.api)

    def test_log_level_normalized(self) -> None:
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_stale_time_none_allowed(self) -> None:
        assert CacheSettings(stale_time=None).stale_time is None

    def test_toml_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.toml"
        Settings(billing={"pro_monthly_price_id": "price_pro_m"}).to_toml_file(path)

        raw = toml.load(path)
        assert raw["billing"]["pro_monthly_price_id"] == "price_pro_m"
        assert Settings.from_toml_file(path).billing.pro_monthly_price_id == "price_pro_m"


class TestSettingsLoader:
    def test_instance_is_cached(self, isolated_cwd: Path) -> None:
        loader = SettingsLoader()

        assert loader.get_config() is loader.get_config()
        assert loader.reload_config() is not None

    def test_update_and_save(self, isolated_cwd: Path) -> None:
        loader = SettingsLoader()
        path = isolated_cwd / "saved.toml"

        def updater(settings: Settings) -> None:
            settings.cache.stale_time = 60.0

        loader.update_and_save_config(updater, path)

        assert loader.get_config().cache.stale_time == 60.0
        assert toml.load(path)["cache"]["stale_time"] == 60.0

    def test_update_rejects_invalid_values(self, isolated_cwd: Path) -> None:
        loader = SettingsLoader()
        original = loader.get_config()

        def updater(settings: Settings) -> None:
            settings.logging.level = "LOUD"

        with pytest.raises(ApplicationError):
            loader.update_and_save_config(updater, isolated_cwd / "saved.toml")

        assert loader.get_config() is original
        assert not (isolated_cwd / "saved.toml").exists()
