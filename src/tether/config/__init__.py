"""Configuration module."""

from tether.config.loader import get_default_config, load_config
from tether.config.models import (
    ConfigError,
    LoggingConfig,
    ReadRetryConfig,
    TetherConfig,
    VaultConfig,
)
from tether.config.paths import (
    get_config_path,
    get_logs_path,
    get_state_path,
    get_tether_home,
)

__all__ = [
    "ConfigError",
    "LoggingConfig",
    "ReadRetryConfig",
    "TetherConfig",
    "VaultConfig",
    "get_config_path",
    "get_default_config",
    "get_logs_path",
    "get_state_path",
    "get_tether_home",
    "load_config",
]
