"""Shared test fixtures and an in-memory Vault."""

import itertools
import json
import threading
import time
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest

from tether.client.vault import VaultClient
from tether.config.models import ReadRetryConfig
from tether.locks import MutexRegistry
from tether.resources.entity_alias import EntityAliasResource

ALIAS_PREFIX = "identity/entity-alias"
ALIAS_ID_PREFIX = "identity/entity-alias/id"

# =============================================================================
# Fake Vault
# =============================================================================


class FakeVault:
    """Just enough of Vault's identity engine to exercise entity aliases.

    Like the real server, it does not enforce unique (name, mount_accessor)
    pairs. Behaviour can be skewed per test:

    - ``failures[(method, path)] = status`` answers that request with an error
    - ``empty_create`` makes alias creation return 204 with no body
    - ``lagging_reads`` answers that many GETs of a fresh alias with 404
    - ``on_write(mount_accessor)`` runs inside every alias write and delete
    """

    def __init__(self) -> None:
        self.aliases: dict[str, dict[str, Any]] = {}
        self.requests: list[tuple[str, str, dict[str, Any] | None]] = []
        self.failures: dict[tuple[str, str], int] = {}
        self.empty_create = False
        self.lagging_reads = 0
        self.on_write: Callable[[str], None] | None = None
        self.next_ids: list[str] = []
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def add_alias(
        self,
        alias_id: str,
        name: str,
        mount_accessor: str,
        canonical_id: str = "ent-1",
        custom_metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        alias = {
            "id": alias_id,
            "name": name,
            "mount_accessor": mount_accessor,
            "mount_type": "ldap",
            "canonical_id": canonical_id,
            "custom_metadata": custom_metadata,
            "creation_time": "2024-01-01T00:00:00Z",
        }
        with self._lock:
            self.aliases[alias_id] = alias
        return alias

    def count(self, name: str, mount_accessor: str) -> int:
        with self._lock:
            return sum(
                1
                for a in self.aliases.values()
                if a["name"] == name and a["mount_accessor"] == mount_accessor
            )

    def requests_for(self, method: str) -> list[tuple[str, str, dict[str, Any] | None]]:
        return [r for r in self.requests if r[0] == method]

    def _new_id(self) -> str:
        if self.next_ids:
            return self.next_ids.pop(0)
        return f"alias-{next(self._counter)}"

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/v1/")
        method = request.method
        body = json.loads(request.content) if request.content else None
        with self._lock:
            self.requests.append((method, path, body))

        if (status := self.failures.get((method, path))) is not None:
            return httpx.Response(status, json={"errors": [f"injected {status}"]})

        if method == "LIST" and path == ALIAS_ID_PREFIX:
            return self._list()
        if method == "PUT" and path == ALIAS_PREFIX:
            return self._create(body or {})
        if path.startswith(ALIAS_ID_PREFIX + "/"):
            alias_id = path.removeprefix(ALIAS_ID_PREFIX + "/")
            if method == "GET":
                return self._read(alias_id)
            if method == "PUT":
                return self._update(alias_id, body or {})
            if method == "DELETE":
                return self._delete(alias_id)
        return httpx.Response(405, json={"errors": ["unsupported operation"]})

    def _delete(self, alias_id: str) -> httpx.Response:
        with self._lock:
            alias = self.aliases.get(alias_id)
        if self.on_write:
            self.on_write(alias["mount_accessor"] if alias else "")
        with self._lock:
            self.aliases.pop(alias_id, None)
        return httpx.Response(204)

    def _list(self) -> httpx.Response:
        with self._lock:
            if not self.aliases:
                return httpx.Response(404, json={"errors": []})
            key_info = {
                alias_id: {
                    "name": a["name"],
                    "mount_accessor": a["mount_accessor"],
                    "canonical_id": a["canonical_id"],
                    "custom_metadata": a["custom_metadata"],
                }
                for alias_id, a in self.aliases.items()
            }
        return httpx.Response(
            200, json={"data": {"keys": list(key_info), "key_info": key_info}}
        )

    def _create(self, body: dict[str, Any]) -> httpx.Response:
        if self.on_write:
            self.on_write(body.get("mount_accessor", ""))
        if self.empty_create:
            return httpx.Response(204)
        with self._lock:
            alias_id = self._new_id()
        alias = self.add_alias(
            alias_id,
            body["name"],
            body["mount_accessor"],
            body["canonical_id"],
            body.get("custom_metadata"),
        )
        return httpx.Response(
            200, json={"data": {"id": alias_id, "canonical_id": alias["canonical_id"]}}
        )

    def _update(self, alias_id: str, body: dict[str, Any]) -> httpx.Response:
        if self.on_write:
            self.on_write(body.get("mount_accessor", ""))
        with self._lock:
            alias = self.aliases.get(alias_id)
            if alias is None:
                return httpx.Response(400, json={"errors": ["invalid alias ID"]})
            alias.update(body)
        return httpx.Response(
            200, json={"data": {"id": alias_id, "canonical_id": alias["canonical_id"]}}
        )

    def _read(self, alias_id: str) -> httpx.Response:
        with self._lock:
            if self.lagging_reads > 0:
                self.lagging_reads -= 1
                return httpx.Response(404, json={"errors": []})
            alias = self.aliases.get(alias_id)
        if alias is None:
            return httpx.Response(404, json={"errors": []})
        return httpx.Response(200, json={"request_id": "req-1", "data": dict(alias)})


class WriteTracker:
    """Records how many alias writes are in flight per mount accessor."""

    def __init__(self, hold: float = 0.05) -> None:
        self.hold = hold
        self.in_flight: dict[str, int] = {}
        self.max_in_flight: dict[str, int] = {}
        self.max_total = 0
        self._lock = threading.Lock()

    def __call__(self, mount_accessor: str) -> None:
        with self._lock:
            self.in_flight[mount_accessor] = self.in_flight.get(mount_accessor, 0) + 1
            self.max_in_flight[mount_accessor] = max(
                self.max_in_flight.get(mount_accessor, 0),
                self.in_flight[mount_accessor],
            )
            self.max_total = max(self.max_total, sum(self.in_flight.values()))
        time.sleep(self.hold)
        with self._lock:
            self.in_flight[mount_accessor] -= 1


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_vault() -> FakeVault:
    return FakeVault()


@pytest.fixture
def make_client(fake_vault: FakeVault) -> Iterator[Callable[[], VaultClient]]:
    """Factory for clients talking to ``fake_vault``; closed after the test."""
    clients: list[VaultClient] = []

    def _make() -> VaultClient:
        client = VaultClient(
            address="https://vault.test:8200",
            token="hvs.test-token",
            read_retry=ReadRetryConfig(max_attempts=3, base_delay=0, max_delay=0),
            transport=httpx.MockTransport(fake_vault.handler),
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def client(make_client: Callable[[], VaultClient]) -> VaultClient:
    return make_client()


@pytest.fixture
def registry() -> MutexRegistry:
    return MutexRegistry()


@pytest.fixture
def resource(registry: MutexRegistry) -> EntityAliasResource:
    return EntityAliasResource(locks=registry)


@pytest.fixture
def alias_values() -> dict[str, Any]:
    return {
        "name": "db-alias",
        "mount_accessor": "auth-ldap",
        "canonical_id": "ent-123",
        "custom_metadata": {"team": "data"},
    }


# =============================================================================
# CLI Test Helpers
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1", "COLUMNS": "200"})


@pytest.fixture
def config_toml_content() -> str:
    return """
[vault]
address = "https://vault.test:8200"
token = "hvs.test-token"
namespace = "team-a"

[read_retry]
max_attempts = 2
base_delay = 0.0
max_delay = 0.0

[logging]
level = "WARNING"
"""


@pytest.fixture
def config_file(tmp_path: Path, config_toml_content: str) -> Path:
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_toml_content)
    return config_path


@pytest.fixture
def cli_vault(monkeypatch: pytest.MonkeyPatch, fake_vault: FakeVault) -> FakeVault:
    """Route CLI-created clients to ``fake_vault``."""
    from tether.cli import runtime

    def _create_client(config):
        return VaultClient.from_config(
            config, transport=httpx.MockTransport(fake_vault.handler)
        )

    monkeypatch.setattr(runtime, "create_client", _create_client)
    return fake_vault


@pytest.fixture
def write_tracker(fake_vault: FakeVault) -> WriteTracker:
    """Install a WriteTracker as ``fake_vault.on_write``."""
    tracker = WriteTracker()
    fake_vault.on_write = tracker
    return tracker
