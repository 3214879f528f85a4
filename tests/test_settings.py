"""Tests for settings loading and validation."""

import json
from datetime import timezone

import pytest

from mongopeek.config.settings import EditorSettings, Settings, get_config_path, load_settings, save_settings
from mongopeek.exceptions import ConfigurationError


class TestLoadSettings:
    """Reading config.json from the config directory."""

    def test_defaults_when_missing(self, tmp_path):
        settings = load_settings(tmp_path)
        assert settings.timezone == "UTC"
        assert settings.history_size == 10
        assert settings.log_level == "INFO"
        assert settings.sort_keys is False
        assert settings.history_path == tmp_path / "history.txt"
        assert settings.compiler_config().default_timezone == timezone.utc

    def test_values_from_file(self, tmp_path):
        get_config_path(tmp_path).write_text(
            json.dumps({"timezone": "Europe/Warsaw", "history_size": 3, "log_level": "debug"})
        )
        settings = load_settings(tmp_path)
        assert settings.history_size == 3
        assert settings.log_level == "DEBUG"
        assert str(settings.compiler_config().default_timezone) == "Europe/Warsaw"

    def test_corrupt_file_falls_back_to_defaults(self, tmp_path):
        get_config_path(tmp_path).write_text("{not json")
        assert load_settings(tmp_path).history_size == 10

    @pytest.mark.parametrize(
        "data,setting",
        [
            ({"timezone": "Mars/Olympus"}, "timezone"),
            ({"history_size": 0}, "history_size"),
            ({"history_size": "ten"}, "history_size"),
            ({"log_level": "LOUD"}, "log_level"),
            ({"editor": "vim"}, "editor"),
        ],
    )
    def test_invalid_values(self, tmp_path, data, setting):
        get_config_path(tmp_path).write_text(json.dumps(data))
        with pytest.raises(ConfigurationError) as exc:
            load_settings(tmp_path)
        assert exc.value.context["setting"] == setting

    def test_save_then_load(self, tmp_path):
        settings = Settings(config_dir=tmp_path, editor=EditorSettings(command="nano"), sort_keys=True)
        save_settings(settings)
        loaded = load_settings(tmp_path)
        assert loaded.editor.command == "nano"
        assert loaded.sort_keys is True


class TestEditorSettings:
    """Resolving the editor command."""

    def test_explicit_command_wins(self, monkeypatch):
        monkeypatch.setenv("EDITOR", "emacs")
        assert EditorSettings(command="code --wait").resolve_command() == "code --wait"

    def test_environment_variable(self, monkeypatch):
        monkeypatch.setenv("MY_EDITOR", "nano")
        assert EditorSettings(env="MY_EDITOR").resolve_command() == "nano"

    def test_fallback_to_vi(self, monkeypatch):
        monkeypatch.delenv("EDITOR", raising=False)
        assert EditorSettings().resolve_command() == "vi"
