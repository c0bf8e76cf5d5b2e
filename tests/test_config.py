"""Tests for recorder configuration and settings loading."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from recce import (
    ConfigLoadError,
    RecceSettings,
    RecorderConfig,
    load_settings,
    resolve_config,
    with_group,
    with_host,
    with_output_directory,
    with_port,
    with_prefix,
)


class TestResolveConfig:
    def test_defaults(self):
        config = resolve_config()

        assert config == RecorderConfig(
            host="http://localhost",
            port="8080",
            group="rest",
            output_dir="recordings",
            prefix="rec",
        )

    def test_each_option_sets_its_field(self):
        config = resolve_config(
            with_host("https://api.example.com"),
            with_port("443"),
            with_group("tasks/create"),
            with_output_directory(Path("out")),
            with_prefix("custom"),
        )

        assert config.host == "https://api.example.com"
        assert config.port == "443"
        assert config.group == "tasks/create"
        assert config.output_dir == "out"
        assert config.prefix == "custom"

    def test_later_options_win(self):
        config = resolve_config(with_group("first"), with_port("1"), with_group("second"))

        assert config.group == "second"
        assert config.port == "1"

    def test_empty_group_is_accepted(self):
        assert resolve_config(with_group("")).group == ""

    def test_config_is_frozen(self):
        config = resolve_config()
        with pytest.raises(FrozenInstanceError):
            config.group = "other"  # type: ignore[misc]

    def test_explicit_settings_replace_defaults(self):
        settings = RecceSettings(host="http://api", output_dir="build/rec")

        config = resolve_config(with_port("9000"), settings=settings)

        assert config.host == "http://api"
        assert config.output_dir == "build/rec"
        assert config.port == "9000"

    def test_env_overrides_defaults(self, monkeypatch):
        monkeypatch.setenv("RECCE_OUTPUT_DIR", "env-recordings")
        monkeypatch.setenv("RECCE_PORT", "3000")

        config = resolve_config()

        assert config.output_dir == "env-recordings"
        assert config.port == "3000"

    def test_options_override_env(self, monkeypatch):
        monkeypatch.setenv("RECCE_GROUP", "from-env")

        assert resolve_config(with_group("from-option")).group == "from-option"


class TestLoadSettings:
    def test_missing_path_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.yaml")

        assert settings.to_config() == RecorderConfig()

    def test_none_gives_defaults(self):
        assert load_settings(None).to_config() == RecorderConfig()

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "recce.yaml"
        path.write_text("host: http://staging\nport: 9090\ngroup: smoke\n")

        settings = load_settings(path)

        assert settings.host == "http://staging"
        assert settings.port == "9090"
        assert settings.group == "smoke"
        assert settings.output_dir == "recordings"

    def test_env_beats_file(self, tmp_path, monkeypatch):
        path = tmp_path / "recce.yaml"
        path.write_text("port: 9090\n")
        monkeypatch.setenv("RECCE_PORT", "7070")

        assert load_settings(path).port == "7070"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "recce.yaml"
        path.write_text("")

        assert load_settings(path).to_config() == RecorderConfig()

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "recce.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigLoadError) as exc_info:
            load_settings(path)
        assert "mapping" in exc_info.value.message
        assert exc_info.value.context.path == str(path)

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "recce.yaml"
        path.write_text("host: [unclosed\n")

        with pytest.raises(ConfigLoadError) as exc_info:
            load_settings(path)
        assert exc_info.value.cause is not None
