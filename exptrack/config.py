"""Configuration file management for exptrack."""

import copy
import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from exptrack.controller import DeleteStrategy
from exptrack.domain.models import DEFAULT_PAGE_SIZE, PAGE_SIZES
from exptrack.service import DEFAULT_API_BASE_URL, DEFAULT_TIMEOUT

API_URL_ENV = "EXPTRACK_API_URL"

DEFAULT_CONFIG: dict[str, Any] = {
    "api": {
        "base_url": DEFAULT_API_BASE_URL,
        "timeout": DEFAULT_TIMEOUT,
    },
    "list": {
        "page_size": DEFAULT_PAGE_SIZE,
        "delete_strategy": DeleteStrategy.REFETCH.value,
        "discard_stale": True,
    },
}


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "exptrack" / "config.toml"


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    save_config(copy.deepcopy(DEFAULT_CONFIG), config_path)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file, merged over the defaults.

    A missing file yields the defaults. ``EXPTRACK_API_URL`` overrides
    ``api.base_url``.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        ValueError: If a setting has an invalid value.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path.exists():
        with open(config_path, "rb") as f:
            loaded = tomllib.load(f)
        for section, values in loaded.items():
            if isinstance(values, dict) and isinstance(config.get(section), dict):
                config[section].update(values)
            else:
                config[section] = values

    api_url = os.environ.get(API_URL_ENV)
    if api_url:
        config["api"]["base_url"] = api_url

    validate_config(config)
    return config


def validate_config(config: dict[str, Any]) -> None:
    """Check the settings the list view depends on.

    Raises:
        ValueError: If a setting has an invalid value.
    """
    list_config = config["list"]

    if list_config["page_size"] not in PAGE_SIZES:
        sizes = ", ".join(str(size) for size in PAGE_SIZES)
        raise ValueError(f"list.page_size must be one of {sizes}")

    strategies = [strategy.value for strategy in DeleteStrategy]
    if list_config["delete_strategy"] not in strategies:
        raise ValueError(f"list.delete_strategy must be one of {', '.join(strategies)}")

    if not isinstance(list_config["discard_stale"], bool):
        raise ValueError("list.discard_stale must be true or false")

    timeout = config["api"]["timeout"]
    if not isinstance(timeout, int | float) or timeout <= 0:
        raise ValueError("api.timeout must be a positive number of seconds")


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)
