"""Configuration loading for DeepCurrent.

Configuration is loaded from TOML files with environment variable overrides.

Usage:
    from deepcurrent.config import get_settings

    settings = get_settings()
    min_episodes = settings.evolution.min_episodes
"""

from functools import lru_cache

from deepcurrent.config.loader import load_config
from deepcurrent.config.settings import Settings, set_toml_config
from deepcurrent.observability.logging import get_logger


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml (base configuration)
    3. config/{DEEPCURRENT_ENV}.toml (environment overrides)
    4. DEEPCURRENT_* environment variables (runtime overrides)

    The result is cached for the lifetime of the process.
    Call `get_settings.cache_clear()` to reload configuration.
    """
    try:
        set_toml_config(load_config())
    except FileNotFoundError as e:
        # Defaults and environment variables still apply
        get_logger(__name__).warning("config_file_not_found", error=str(e))
        set_toml_config({})
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
