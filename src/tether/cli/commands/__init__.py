"""CLI command modules."""

from tether.cli.commands import alias, config

__all__ = [
    "alias",
    "config",
]
