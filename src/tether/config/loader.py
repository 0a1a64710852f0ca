"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import SecretStr

from tether.config.models import TetherConfig
from tether.config.paths import get_config_path

# (key in [vault], environment variable, secret?)
VAULT_ENV_VARS: list[tuple[str, str, bool]] = [
    ("address", "VAULT_ADDR", False),
    ("token", "VAULT_TOKEN", True),
    ("namespace", "VAULT_NAMESPACE", False),
]


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("tether.toml"),  # Current directory
        get_config_path(),  # ~/.tether/config.toml (or TETHER_HOME)
        Path("/etc/tether/config.toml"),  # System-wide
    ]


def _resolve_env(config: dict[str, Any]) -> dict[str, Any]:
    """Fill Vault connection settings from the environment where not set."""
    section = config.get("vault")
    if section is None:
        section = {}
        config["vault"] = section

    for key, env_var, secret in VAULT_ENV_VARS:
        if section.get(key) is not None:
            continue
        value = os.environ.get(env_var)
        if value:
            section[key] = SecretStr(value) if secret else value

    return config


def load_config(path: Path | None = None) -> TetherConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default locations.

    Returns:
        Validated TetherConfig instance.

    Raises:
        FileNotFoundError: If no config file is found.
        ValueError: If config file is invalid.
    """
    config_path: Path | None = None

    default_paths = _get_default_config_paths()

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in default_paths:
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    if config_path is None:
        raise FileNotFoundError(
            f"No config file found. Searched: {', '.join(str(p) for p in default_paths)}"
        )

    with config_path.open("rb") as f:
        raw_config = tomllib.load(f)

    raw_config = _resolve_env(raw_config)

    return TetherConfig.model_validate(raw_config)


def get_default_config() -> TetherConfig:
    """Get a configuration built from the environment alone.

    Used when no config file exists and for development/testing.
    """
    return TetherConfig.model_validate(_resolve_env({}))
