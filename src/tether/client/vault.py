"""Minimal synchronous client for Vault's logical HTTP API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ConfigDict

from tether.client.errors import NotFoundError, VaultAPIError, VaultConnectionError
from tether.client.retry import with_retry
from tether.config.models import ReadRetryConfig

if TYPE_CHECKING:
    from tether.config.models import TetherConfig

logger = logging.getLogger(__name__)

API_PREFIX = "/v1/"


class VaultResponse(BaseModel):
    """Envelope returned by logical read/write/list calls."""

    model_config = ConfigDict(extra="ignore")

    request_id: str = ""
    data: dict[str, Any] | None = None
    warnings: list[str] | None = None


class VaultClient:
    """Issue logical reads, writes, lists and deletes against Vault.

    Paths are logical paths without the ``/v1/`` prefix, e.g.
    ``identity/entity-alias/id/<id>``. Error statuses raise VaultAPIError
    (NotFoundError for 404); transport failures raise VaultConnectionError.
    """

    def __init__(
        self,
        address: str,
        token: str,
        namespace: str | None = None,
        timeout: float = 30.0,
        verify: bool = True,
        read_retry: ReadRetryConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"X-Vault-Token": token, "X-Vault-Request": "true"}
        if namespace:
            headers["X-Vault-Namespace"] = namespace
        self.namespace = namespace
        self.read_retry = read_retry or ReadRetryConfig()
        self._http = httpx.Client(
            base_url=address.rstrip("/"),
            headers=headers,
            timeout=timeout,
            verify=verify,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: TetherConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> VaultClient:
        """Build a client from loaded configuration.

        Raises:
            ConfigError: If no token is configured.
        """
        token = config.require_token()
        return cls(
            address=config.vault.address,
            token=token.get_secret_value(),
            namespace=config.vault.namespace,
            timeout=config.vault.timeout,
            verify=config.vault.verify,
            read_retry=config.read_retry,
            transport=transport,
        )

    def __enter__(self) -> VaultClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    @property
    def is_closed(self) -> bool:
        return self._http.is_closed

    def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> VaultResponse | None:
        url = API_PREFIX + path.strip("/")
        logger.debug("%s %s", method, url)
        try:
            response = self._http.request(method, url, json=json)
        except httpx.HTTPError as e:
            raise VaultConnectionError(f"{method} {path}: {e}") from e

        if response.status_code >= 400:
            errors = _error_messages(response)
            if response.status_code == 404:
                raise NotFoundError(404, method, path, errors)
            raise VaultAPIError(response.status_code, method, path, errors)

        if response.status_code == 204 or not response.content:
            return None

        try:
            body = response.json()
        except ValueError as e:
            raise VaultAPIError(
                response.status_code, method, path, [f"invalid JSON body: {e}"]
            ) from e
        return VaultResponse.model_validate(body)

    def read(self, path: str, is_new: bool = False) -> VaultResponse | None:
        """Read a logical path.

        When ``is_new`` is set the record was just written, so not-found
        responses are retried per ``read_retry`` before being raised.

        Raises:
            NotFoundError: If nothing exists at ``path``.
        """
        if not is_new:
            return self._request("GET", path)
        return with_retry(
            lambda: self._request("GET", path),
            self.read_retry,
            retry_on=(NotFoundError,),
            operation_name=f"read {path}",
        )

    def write(self, path: str, data: dict[str, Any]) -> VaultResponse | None:
        """Write ``data`` to a logical path; None means Vault sent no body."""
        return self._request("PUT", path, json=data)

    def list(self, path: str) -> VaultResponse | None:
        """List a logical path; None means there is nothing under it."""
        try:
            return self._request("LIST", path)
        except NotFoundError:
            return None

    def delete(self, path: str) -> None:
        self._request("DELETE", path)


def _error_messages(response: httpx.Response) -> list[str]:
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return [text] if text else []
    if isinstance(body, dict):
        return [str(e) for e in body.get("errors") or []]
    return []
