"""Centralized path management for Tether.

Config, logs and the default state file live under a single base directory.
The base directory can be overridden with the TETHER_HOME environment variable.
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "TETHER_HOME"


@lru_cache(maxsize=1)
def get_tether_home() -> Path:
    """Get the base directory for all Tether data.

    Resolution order:
    1. TETHER_HOME environment variable (if set)
    2. Platform default (~/.tether)
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".tether"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_tether_home() / "config.toml"


def get_logs_path() -> Path:
    """Get the default logs directory path."""
    return get_tether_home() / "logs"


def get_state_path() -> Path:
    """Get the default alias state file path."""
    return get_tether_home() / "alias.json"
