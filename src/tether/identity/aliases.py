"""Lookup of existing entity aliases."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import ValidationError

from tether.client.errors import MalformedResponseError
from tether.identity.paths import ROOT_ALIAS_ID_PATH
from tether.identity.schema import AliasSummary

if TYPE_CHECKING:
    from tether.client.vault import VaultClient

logger = logging.getLogger(__name__)


@dataclass
class FindAliasParams:
    """Filter for find_aliases(); empty fields match anything."""

    name: str = ""
    mount_accessor: str = ""

    def matches(self, alias: AliasSummary) -> bool:
        if self.name and alias.name != self.name:
            return False
        if self.mount_accessor and alias.mount_accessor != self.mount_accessor:
            return False
        return True


def find_aliases(client: VaultClient, params: FindAliasParams) -> list[AliasSummary]:
    """Return every existing alias matching ``params``.

    Lists ``identity/entity-alias/id`` and filters its ``key_info``. Vault
    answers 404 when no aliases exist at all, which yields an empty list.

    Raises:
        VaultError: If the list request fails or its key_info is malformed.
    """
    response = client.list(ROOT_ALIAS_ID_PATH)
    if response is None or not response.data:
        return []

    key_info = response.data.get("key_info") or {}
    if not isinstance(key_info, dict):
        raise MalformedResponseError(
            "key_info", ROOT_ALIAS_ID_PATH, "expected a mapping of alias IDs"
        )

    result: list[AliasSummary] = []
    for alias_id, info in key_info.items():
        try:
            alias = AliasSummary.model_validate({**(info or {}), "id": alias_id})
        except (TypeError, ValidationError) as e:
            raise MalformedResponseError("key_info", alias_id, str(e)) from e
        if params.matches(alias):
            result.append(alias)

    logger.debug(
        "Found %d aliases matching name=%r mount_accessor=%r",
        len(result),
        params.name,
        params.mount_accessor,
    )
    return result
