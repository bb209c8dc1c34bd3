"""Tests for settings management."""
import json
from pathlib import Path

import worldforge.settings as settings_module
from worldforge.settings import UserSettings, campaigns_root, load_user_settings, save_user_settings


class TestUserSettings:
    """Test UserSettings dataclass."""

    def test_default_settings(self):
        """Test default settings values."""
        settings = UserSettings()
        assert settings.default_preset == "mythic"
        assert settings.default_randomization_mode == "fixed"
        assert settings.default_world_size == "medium"
        assert settings.default_faction_complexity == "medium"
        assert settings.log_level == "INFO"
        assert settings.campaigns_dir is None


class TestLoadUserSettings:
    """Test loading user settings."""

    def test_load_nonexistent_file(self):
        """Test loading when config file doesn't exist."""
        assert load_user_settings() == UserSettings()

    def test_load_valid_config(self):
        """Test loading valid config file."""
        settings_module.CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        settings_module.CONFIG_PATH.write_text(
            json.dumps({"default_preset": "grim", "default_world_size": "large"}), encoding="utf-8"
        )
        settings = load_user_settings()
        assert settings.default_preset == "grim"
        assert settings.default_world_size == "large"
        assert settings.log_level == "INFO"

    def test_load_corrupted_config(self):
        """Test that corrupted JSON falls back to defaults."""
        settings_module.CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        settings_module.CONFIG_PATH.write_text("{broken", encoding="utf-8")
        assert load_user_settings() == UserSettings()

    def test_load_unknown_keys(self):
        """Test that unrecognized keys fall back to defaults."""
        settings_module.CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        settings_module.CONFIG_PATH.write_text(json.dumps({"text_provider": "openai"}), encoding="utf-8")
        assert load_user_settings() == UserSettings()

    def test_env_overrides(self, monkeypatch, tmp_path):
        """Test that environment variables win over the config file."""
        save_user_settings(UserSettings(default_preset="grim"))
        monkeypatch.setenv("WORLDFORGE_DEFAULT_PRESET", "anime")
        monkeypatch.setenv("WORLDFORGE_CAMPAIGNS_DIR", str(tmp_path / "elsewhere"))
        settings = load_user_settings()
        assert settings.default_preset == "anime"
        assert settings.campaigns_dir == str(tmp_path / "elsewhere")


class TestSaveUserSettings:
    """Test saving user settings."""

    def test_save_and_reload(self):
        """Test a saved config loads back unchanged."""
        original = UserSettings(default_preset="cozy", log_level="DEBUG", campaigns_dir="/tmp/worlds")
        save_user_settings(original)
        assert settings_module.CONFIG_PATH.exists()
        assert load_user_settings() == original


class TestCampaignsRoot:
    """Test where campaigns are stored."""

    def test_default_is_cwd(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        assert campaigns_root(UserSettings()) == Path(tmp_path).resolve() / "campaigns"

    def test_configured_dir(self, tmp_path):
        assert campaigns_root(UserSettings(campaigns_dir=str(tmp_path / "worlds"))) == tmp_path / "worlds"
