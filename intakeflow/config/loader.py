"""TOML layers behind intakeflow settings.

`config/default.toml` holds the shipped defaults for the `[observability]`,
`[stages]` and `[user_data]` sections; `config/{INTAKEFLOW_ENV}.toml`
overrides them per deployment. Both files are optional, the models in
`intakeflow.config.models` carry code defaults for every value.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from intakeflow.config.settings import Settings
from intakeflow.observability.logging import get_logger

logger = get_logger(__name__)

CONFIG_DIR_ENV = "INTAKEFLOW_CONFIG_DIR"
ENVIRONMENT_ENV = "INTAKEFLOW_ENV"
DEFAULT_ENVIRONMENT = "development"


def get_config_dir() -> Path:
    """Locate the directory holding the TOML layers.

    INTAKEFLOW_CONFIG_DIR wins when set and must exist. Otherwise the
    nearest `config/` directory from the working directory upwards is used,
    so tests and hosts started from a subdirectory find the same files.
    """
    config_dir_env = os.environ.get(CONFIG_DIR_ENV)
    if config_dir_env:
        path = Path(config_dir_env)
        if not path.exists():
            raise FileNotFoundError(f"Config directory not found: {config_dir_env}")
        return path

    current = Path.cwd()
    for _ in range(5):
        config_path = current / "config"
        if config_path.exists():
            return config_path
        current = current.parent

    return Path("config")


def get_environment() -> str:
    """Deployment name selecting the override layer; 'development' by default."""
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def load_toml(file_path: Path) -> dict[str, Any]:
    """Read one TOML layer.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Overlay one layer on another.

    Sections such as `[stages]` merge key by key, so an environment file
    only needs the values it changes. Anything that is not a table on both
    sides is replaced outright.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def unknown_keys(config: dict[str, Any]) -> list[str]:
    """Top-level keys that no settings field reads, in file order."""
    known = set(Settings.model_fields)
    return [key for key in config if key not in known]


def load_config() -> dict[str, Any]:
    """Merge the default and environment layers.

    Top-level keys that no settings section reads (usually a misspelt
    section name) are logged and otherwise ignored.

    Returns:
        Merged configuration dictionary, empty when neither file exists
    """
    config_dir = get_config_dir()
    env = get_environment()

    config: dict[str, Any] = {}
    layers: list[str] = []

    default_path = config_dir / "default.toml"
    if default_path.exists():
        config = load_toml(default_path)
        layers.append(default_path.name)

    env_path = config_dir / f"{env}.toml"
    if env_path.exists():
        config = deep_merge(config, load_toml(env_path))
        layers.append(env_path.name)

    ignored = unknown_keys(config)
    if ignored:
        logger.warning("config_keys_ignored", keys=ignored, layers=layers)

    logger.debug("config_loaded", environment=env, layers=layers)
    return config
