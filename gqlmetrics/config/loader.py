"""Layered TOML configuration.

`config/default.toml` holds every instrumentation default and is required.
`config/{GQLMETRICS_ENV}.toml` may override any subset of it, table by table.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "GQLMETRICS_CONFIG_DIR"
ENVIRONMENT_ENV = "GQLMETRICS_ENV"
DEFAULT_ENVIRONMENT = "development"
DEFAULT_FILE = "default.toml"

# How far above the working directory a config/ directory is searched for
_SEARCH_DEPTH = 5


def get_config_dir() -> Path:
    """Directory holding the TOML files.

    GQLMETRICS_CONFIG_DIR wins when set and must exist. Otherwise the
    nearest `config/` at or above the working directory is used.

    Raises:
        FileNotFoundError: If GQLMETRICS_CONFIG_DIR names a missing directory
    """
    explicit = os.environ.get(CONFIG_DIR_ENV)
    if explicit:
        path = Path(explicit)
        if not path.exists():
            raise FileNotFoundError(f"{CONFIG_DIR_ENV} points to a missing directory: {explicit}")
        return path

    start = Path.cwd()
    for candidate in [start, *start.parents][:_SEARCH_DEPTH]:
        if (candidate / "config").is_dir():
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
    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {file_path}") from None


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return base updated with override, merging tables present in both.

    Neither argument is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = deep_merge(current, value)
        merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Defaults merged with the current environment's overrides.

    Raises:
        FileNotFoundError: If default.toml is missing
    """
    config_dir = get_config_dir()
    default_path = config_dir / DEFAULT_FILE
    if not default_path.is_file():
        raise FileNotFoundError(
            f"{DEFAULT_FILE} not found in {config_dir}; "
            f"add it or point {CONFIG_DIR_ENV} at a directory containing it"
        )

    config = load_toml(default_path)
    overrides_path = config_dir / f"{get_environment()}.toml"
    if overrides_path.is_file():
        config = deep_merge(config, load_toml(overrides_path))
    return config
