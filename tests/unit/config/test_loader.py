"""Tests for TOML configuration loading."""

from pathlib import Path

import pytest

from canvaspartner.config.loader import deep_merge, get_environment, load_config


class TestDeepMerge:
    def test_nested_values_are_merged(self) -> None:
        base = {"agent": {"max_rounds": 10, "tool_choice": "auto"}, "debug": False}
        override = {"agent": {"max_rounds": 3}, "debug": True}

        assert deep_merge(base, override) == {
            "agent": {"max_rounds": 3, "tool_choice": "auto"},
            "debug": True,
        }

    def test_inputs_are_not_mutated(self) -> None:
        base = {"a": {"b": 1}}
        deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


class TestLoadConfig:
    def test_environment_file_overrides_default(
        self, test_config_dir: Path, mock_toml_files, env_override
    ) -> None:
        mock_toml_files(
            {
                "default.toml": "[agent]\nmax_rounds = 10\ntitle_max_length = 50\n",
                "staging.toml": "[agent]\nmax_rounds = 4\n",
            }
        )

        with env_override(
            {"CANVASPARTNER_CONFIG_DIR": str(test_config_dir), "CANVASPARTNER_ENV": "staging"}
        ):
            config = load_config()

        assert config["agent"] == {"max_rounds": 4, "title_max_length": 50}

    def test_missing_environment_file_is_optional(
        self, test_config_dir: Path, mock_toml_files, env_override
    ) -> None:
        mock_toml_files({"default.toml": "debug = true\n"})

        with env_override(
            {"CANVASPARTNER_CONFIG_DIR": str(test_config_dir), "CANVASPARTNER_ENV": "nowhere"}
        ):
            assert load_config() == {"debug": True}

    def test_missing_default_file_raises(self, test_config_dir: Path, env_override) -> None:
        with env_override({"CANVASPARTNER_CONFIG_DIR": str(test_config_dir)}):
            with pytest.raises(FileNotFoundError):
                load_config()

    def test_environment_name(self, env_override) -> None:
        with env_override({"CANVASPARTNER_ENV": "production"}):
            assert get_environment() == "production"
