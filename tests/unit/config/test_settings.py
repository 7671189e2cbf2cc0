"""Tests for the Settings model and get_settings."""

import pytest
from pydantic import ValidationError

from canvaspartner.config import get_settings, reload_settings
from canvaspartner.config.models.agent import AgentConfig
from canvaspartner.config.models.providers import LLMProviderConfig


class TestSettings:
    def test_test_environment_uses_offline_backends(self) -> None:
        settings = get_settings()

        assert settings.providers.llm.provider == "mock"
        assert settings.providers.search.provider == "none"
        assert settings.storage.backend == "inmemory"

    def test_default_file_values_are_loaded(self) -> None:
        settings = get_settings()

        assert settings.agent.max_rounds == 10
        assert settings.agent.title_max_length == 50

    def test_environment_variables_win(self, env_override) -> None:
        with env_override({"CANVASPARTNER_AGENT__MAX_ROUNDS": "3"}):
            settings = reload_settings()

        assert settings.agent.max_rounds == 3

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


class TestConfigModels:
    def test_max_rounds_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            AgentConfig(max_rounds=0)

    def test_unknown_provider_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LLMProviderConfig(provider="carrier-pigeon")
