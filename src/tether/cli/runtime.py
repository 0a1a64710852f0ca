"""Shared runtime bootstrap helpers for CLI entrypoints."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from tether.client.vault import VaultClient
from tether.config import TetherConfig, get_default_config, load_config
from tether.logging import configure_logging
from tether.resources.entity_alias import EntityAliasResource
from tether.state import StateStorage


@dataclass(slots=True)
class RuntimeBootstrap:
    """Composed runtime dependencies for CLI command handlers."""

    config: TetherConfig
    client: VaultClient
    resource: EntityAliasResource
    storage: StateStorage


def resolve_config(config_path: Path | None) -> TetherConfig:
    """Load config from ``config_path`` or default locations.

    Falls back to environment-only configuration when no file exists and
    none was requested explicitly.
    """
    if config_path is not None:
        return load_config(config_path)
    try:
        return load_config()
    except FileNotFoundError:
        return get_default_config()


def create_client(config: TetherConfig) -> VaultClient:
    return VaultClient.from_config(config)


def bootstrap_runtime(
    *,
    config_path: Path | None,
    state_path: Path | None,
) -> RuntimeBootstrap:
    """Load config, configure logging and wire the alias resource."""
    config = resolve_config(config_path)
    configure_logging(
        level=config.logging.level,
        log_to_file=config.logging.log_to_file,
    )
    return RuntimeBootstrap(
        config=config,
        client=create_client(config),
        resource=EntityAliasResource(),
        storage=StateStorage(state_path),
    )
