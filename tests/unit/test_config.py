"""Tests for aipolish.core.config."""

from pathlib import Path

from aipolish.core.config import DEFAULTS, _deep_merge, config_path, load_config, resolve_home


class TestDeepMerge:
    def test_simple_override(self):
        base = {"a": 1, "b": 2}
        override = {"b": 3}
        result = _deep_merge(base, override)
        assert result == {"a": 1, "b": 3}

    def test_nested_merge(self):
        base = {"openai": {"model": "gpt-4", "temperature": 0.7}}
        override = {"openai": {"model": "gpt-4o"}}
        result = _deep_merge(base, override)
        assert result["openai"]["model"] == "gpt-4o"
        assert result["openai"]["temperature"] == 0.7

    def test_does_not_mutate_base(self):
        base = {"a": {"b": 1}}
        override = {"a": {"b": 2}}
        _deep_merge(base, override)
        assert base["a"]["b"] == 1


class TestLoadConfig:
    def test_returns_defaults_when_no_file(self, tmp_path: Path):
        config = load_config(tmp_path / "nonexistent.yaml")
        assert config["openai"]["model"] == "gpt-4"
        assert config["openai"]["temperature"] == 0.7
        assert config["openai"]["max_output_tokens"] == 1000
        assert config["openai"]["token_budget"] == 8192
        assert config["instruction"] == DEFAULTS["instruction"]

    def test_loads_and_merges(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("openai:\n  model: gpt-4o\n  timeout: null\n")

        config = load_config(config_file)
        assert config["openai"]["model"] == "gpt-4o"
        assert config["openai"]["timeout"] is None
        # Defaults preserved for unset keys
        assert config["openai"]["base_url"] == "https://api.openai.com"

    def test_home_env_override(self, tmp_path: Path, monkeypatch):
        custom_home = tmp_path / "custom"
        monkeypatch.setenv("AIPOLISH_HOME", str(custom_home))

        assert resolve_home() == custom_home.resolve()
        assert config_path() == custom_home.resolve() / "config.yaml"

    def test_handles_empty_file(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        config = load_config(config_file)
        assert config["openai"]["model"] == DEFAULTS["openai"]["model"]

    def test_handles_corrupt_yaml(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(": : : invalid yaml [[[")

        config = load_config(config_file)
        assert "openai" in config

    def test_handles_non_mapping(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n")

        config = load_config(config_file)
        assert config["openai"]["model"] == "gpt-4"

