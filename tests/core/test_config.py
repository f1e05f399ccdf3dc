#!/usr/bin/env python3
"""Tests for ConfigManager."""

from pathlib import Path

import pytest

from filesets.core.config import (
    ConfigError,
    ConfigManager,
    ConfigSource,
    get_config_manager,
    set_global_config,
)
from filesets.core.constants import ConfigKey, ErrorCode, SettingsFile


@pytest.fixture
def config():
    return ConfigManager(load_environment=False)


class TestDefaults:
    """Compiled defaults."""

    def test_default_values(self, config):
        assert config.get(ConfigKey.SETTINGS_DIRECTORY) == "~/.config/filesets"
        assert config.get(ConfigKey.CASE_SENSITIVE) is False
        assert config.get(ConfigKey.LOG_LEVEL) == "INFO"

    def test_missing_key_returns_default(self, config):
        assert config.get("nope.missing", "fallback") == "fallback"

    def test_settings_directory_expands_user(self, config):
        assert config.settings_directory() == Path("~/.config/filesets").expanduser()

    def test_legacy_file_defaults_to_settings_directory(self, config, tmp_path):
        config.set(ConfigKey.SETTINGS_DIRECTORY, str(tmp_path))
        assert config.legacy_file() == tmp_path / SettingsFile.LEGACY_INTERESTING_FILES_SETS

    def test_legacy_file_override(self, config, tmp_path):
        config.set(ConfigKey.LEGACY_FILE, str(tmp_path / "old.xml"))
        assert config.legacy_file() == tmp_path / "old.xml"


class TestLoadFile:
    """YAML user configuration."""

    def test_load_with_root_key(self, config, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("filesets:\n  matching:\n    case_sensitive: true\n")

        config.load_file(str(path))

        assert config.case_sensitive() is True
        assert config.get(ConfigKey.LOG_LEVEL) == "INFO"

    def test_load_without_root_key(self, config, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("settings:\n  directory: /srv/filesets\n")

        config.load_file(str(path))

        assert config.settings_directory() == Path("/srv/filesets")

    def test_empty_file(self, config, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        config.load_file(str(path))

        assert config.get(ConfigKey.LOG_LEVEL) == "INFO"

    def test_missing_file(self, config, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            config.load_file(str(tmp_path / "missing.yaml"))
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_invalid_yaml(self, config, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("settings: [unclosed\n")

        with pytest.raises(ConfigError, match="YAML parse error"):
            config.load_file(str(path))

    def test_non_mapping(self, config, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="Invalid config format"):
            config.load_file(str(path))

    def test_constructor_loads_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("logging:\n  level: DEBUG\n")

        config = ConfigManager(str(path), load_environment=False)

        assert config.get(ConfigKey.LOG_LEVEL) == "DEBUG"


class TestPrecedence:
    """Source precedence."""

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("matching:\n  case_sensitive: false\n")
        monkeypatch.setenv("FILESETS_MATCHING_CASE_SENSITIVE", "true")

        config = ConfigManager(str(path))

        assert config.case_sensitive() is True

    def test_environment_keeps_key_underscores(self, monkeypatch):
        monkeypatch.setenv("FILESETS_SETTINGS_LEGACY_FILE", "/tmp/old.xml")

        config = ConfigManager()

        assert config.get(ConfigKey.LEGACY_FILE) == "/tmp/old.xml"

    def test_environment_values_parsed(self, monkeypatch):
        monkeypatch.setenv("FILESETS_TUNING_RETRIES", "3")
        monkeypatch.setenv("FILESETS_TUNING_RATIO", "0.5")

        config = ConfigManager()

        assert config.get("tuning.retries") == 3
        assert config.get("tuning.ratio") == 0.5

    def test_environment_ignored_when_disabled(self, monkeypatch):
        monkeypatch.setenv("FILESETS_LOGGING_LEVEL", "ERROR")
        assert ConfigManager(load_environment=False).get(ConfigKey.LOG_LEVEL) == "INFO"

    def test_runtime_overrides_everything(self, monkeypatch):
        monkeypatch.setenv("FILESETS_LOGGING_LEVEL", "ERROR")
        config = ConfigManager()

        config.set(ConfigKey.LOG_LEVEL, "DEBUG")

        assert config.get(ConfigKey.LOG_LEVEL) == "DEBUG"

    def test_load_dict(self, config):
        config.load_dict({"matching": {"case_sensitive": True}})
        assert config.case_sensitive() is True

    def test_get_all_merges_sources(self, config):
        config.set(ConfigKey.LOG_FILE, "/var/log/filesets.log")

        merged = config.get_all()

        assert merged["logging"] == {"level": "INFO", "file": "/var/log/filesets.log"}
        assert "filesets" not in merged

    def test_clear_keeps_defaults(self, config):
        config.set(ConfigKey.LOG_LEVEL, "DEBUG")
        config.clear()
        assert config.get(ConfigKey.LOG_LEVEL) == "INFO"

    def test_clear_single_source(self, config):
        config.set(ConfigKey.LOG_LEVEL, "DEBUG")
        config.clear(ConfigSource.USER_CONFIG)
        assert config.get(ConfigKey.LOG_LEVEL) == "DEBUG"


class TestGlobalConfig:
    """Global configuration instance."""

    def test_get_returns_same_instance(self):
        assert get_config_manager() is get_config_manager()

    def test_set_global(self, config):
        set_global_config(config)
        assert get_config_manager() is config
