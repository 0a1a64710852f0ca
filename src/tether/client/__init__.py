"""Vault HTTP API client."""

from tether.client.errors import (
    MalformedResponseError,
    NotFoundError,
    VaultAPIError,
    VaultConnectionError,
    VaultError,
)
from tether.client.vault import VaultClient, VaultResponse

__all__ = [
    "MalformedResponseError",
    "NotFoundError",
    "VaultAPIError",
    "VaultClient",
    "VaultConnectionError",
    "VaultError",
    "VaultResponse",
]
