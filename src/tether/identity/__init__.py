"""Vault identity secrets engine: paths, schemas and alias lookup."""

from tether.identity.aliases import FindAliasParams, find_aliases
from tether.identity.paths import (
    ROOT_ALIAS_ID_PATH,
    ROOT_ALIAS_PATH,
    ROOT_ENTITY_ID_PATH,
    ROOT_ENTITY_PATH,
    join_alias_id,
    join_entity_id,
)
from tether.identity.schema import (
    ALIAS_FIELDS,
    AliasRequest,
    AliasResponse,
    AliasSummary,
    decode_alias,
)

__all__ = [
    "ALIAS_FIELDS",
    "ROOT_ALIAS_ID_PATH",
    "ROOT_ALIAS_PATH",
    "ROOT_ENTITY_ID_PATH",
    "ROOT_ENTITY_PATH",
    "AliasRequest",
    "AliasResponse",
    "AliasSummary",
    "FindAliasParams",
    "decode_alias",
    "find_aliases",
    "join_alias_id",
    "join_entity_id",
]
