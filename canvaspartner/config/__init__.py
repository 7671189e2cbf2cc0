"""Configuration loading for canvaspartner.

Usage:
    from canvaspartner.config import get_settings

    settings = get_settings()
    max_rounds = settings.agent.max_rounds
"""

from functools import lru_cache

from canvaspartner.config.loader import load_config
from canvaspartner.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    Cached for the lifetime of the process; call
    `get_settings.cache_clear()` to reload.
    """
    set_toml_config(load_config())
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
