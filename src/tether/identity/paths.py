"""Logical paths of Vault's identity secrets engine."""

ROOT_ENTITY_PATH = "identity/entity"
ROOT_ENTITY_ID_PATH = "identity/entity/id"
ROOT_ALIAS_PATH = "identity/entity-alias"
ROOT_ALIAS_ID_PATH = "identity/entity-alias/id"


def join_alias_id(alias_id: str) -> str:
    """Path of a single entity alias."""
    return f"{ROOT_ALIAS_ID_PATH}/{alias_id}"


def join_entity_id(entity_id: str) -> str:
    """Path of a single entity."""
    return f"{ROOT_ENTITY_ID_PATH}/{entity_id}"
