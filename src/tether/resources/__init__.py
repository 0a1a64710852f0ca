"""Managed resources."""

from tether.resources.entity_alias import ALIAS_SCHEMA, EntityAliasResource

__all__ = ["ALIAS_SCHEMA", "EntityAliasResource"]
