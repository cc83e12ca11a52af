"""Layered TOML configuration.

``config/default.toml`` is the base layer; ``config/{DEEPCURRENT_ENV}.toml``
is merged over it when present. Environment variables are applied later by
the pydantic-settings sources in ``settings.py``.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "DEEPCURRENT_CONFIG_DIR"
ENVIRONMENT_ENV = "DEEPCURRENT_ENV"
DEFAULT_ENVIRONMENT = "development"
BASE_LAYER = "default.toml"

# How many directories above the working directory are searched for config/
_SEARCH_DEPTH = 5


def get_config_dir() -> Path:
    """Directory holding the TOML layers.

    DEEPCURRENT_CONFIG_DIR wins and must exist; otherwise the nearest
    ``config/`` at or above the working directory is used.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.exists():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    cwd = Path.cwd()
    for candidate in [cwd, *cwd.parents][:_SEARCH_DEPTH]:
        if (candidate / "config").exists():
            return candidate / "config"
    return Path("config")


def get_environment() -> str:
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")
    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; tables merge, scalars replace."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def config_layers(config_dir: Path, environment: str) -> list[Path]:
    """Existing layer files in merge order.

    Raises:
        FileNotFoundError: If the base layer is missing
    """
    base = config_dir / BASE_LAYER
    if not base.exists():
        raise FileNotFoundError(
            f"Default configuration file not found: {base}. "
            f"Create config/{BASE_LAYER} or set {CONFIG_DIR_ENV}."
        )
    overlay = config_dir / f"{environment}.toml"
    return [base, overlay] if overlay.exists() else [base]


def load_config(
    config_dir: Path | None = None, environment: str | None = None
) -> dict[str, Any]:
    """Merge the TOML layers for an environment into one mapping."""
    layers = config_layers(config_dir or get_config_dir(), environment or get_environment())
    config: dict[str, Any] = {}
    for layer in layers:
        config = deep_merge(config, load_toml(layer))
    return config
