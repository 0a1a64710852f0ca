"""Tests for alias payloads, response decoding and duplicate lookup."""

import httpx
import pytest

from tether.client.errors import MalformedResponseError, VaultAPIError
from tether.client.vault import VaultClient
from tether.identity import (
    AliasRequest,
    FindAliasParams,
    decode_alias,
    find_aliases,
    join_alias_id,
)
from tether.resources.entity_alias import ALIAS_SCHEMA
from tether.state import ResourceState


class TestAliasRequest:
    def test_from_state(self):
        state = ResourceState(
            ALIAS_SCHEMA,
            values={
                "name": "svc-a",
                "mount_accessor": "auth-x",
                "canonical_id": "ent-1",
                "custom_metadata": {"k": "v"},
            },
        )
        request = AliasRequest.from_state(state)
        assert request.to_payload() == {
            "name": "svc-a",
            "mount_accessor": "auth-x",
            "canonical_id": "ent-1",
            "custom_metadata": {"k": "v"},
        }

    def test_empty_metadata_is_omitted(self):
        request = AliasRequest(name="svc-a", mount_accessor="auth-x", canonical_id="e")
        assert "custom_metadata" not in request.to_payload()

    def test_unset_strings_are_omitted(self):
        request = AliasRequest(name="svc-a", mount_accessor="", canonical_id="")
        assert request.to_payload() == {"name": "svc-a"}


class TestDecodeAlias:
    def _data(self, **overrides):
        data = {
            "id": "alias-1",
            "name": "svc-a",
            "mount_accessor": "auth-x",
            "mount_type": "ldap",
            "canonical_id": "ent-1",
            "custom_metadata": {"k": "v"},
        }
        data.update(overrides)
        return data

    def test_decodes_and_ignores_extra_fields(self):
        alias = decode_alias(self._data(), "alias-1")
        assert alias.id == "alias-1"
        assert alias.state_values() == {
            "name": "svc-a",
            "mount_accessor": "auth-x",
            "canonical_id": "ent-1",
            "custom_metadata": {"k": "v"},
        }

    def test_null_metadata_becomes_empty(self):
        alias = decode_alias(self._data(custom_metadata=None), "alias-1")
        assert alias.custom_metadata == {}

    def test_missing_data(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            decode_alias(None, "alias-1")
        assert exc_info.value.field == "data"

    def test_missing_field_is_named(self):
        data = self._data()
        del data["canonical_id"]
        with pytest.raises(MalformedResponseError) as exc_info:
            decode_alias(data, "alias-1")
        assert exc_info.value.field == "canonical_id"
        assert exc_info.value.record_id == "alias-1"

    def test_wrong_type_is_not_coerced(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            decode_alias(self._data(name=42), "alias-1")
        assert exc_info.value.field == "name"

    def test_non_string_metadata_values(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            decode_alias(self._data(custom_metadata={"k": 1}), "alias-1")
        assert exc_info.value.field == "custom_metadata"


class TestFindAliases:
    def test_no_aliases(self, fake_vault, client):
        assert find_aliases(client, FindAliasParams("svc-a", "auth-x")) == []

    def test_filters_by_name_and_mount(self, fake_vault, client):
        fake_vault.add_alias("a1", "svc-a", "auth-x")
        fake_vault.add_alias("a2", "svc-a", "auth-y")
        fake_vault.add_alias("a3", "svc-b", "auth-x")

        found = find_aliases(client, FindAliasParams("svc-a", "auth-x"))

        assert [a.id for a in found] == ["a1"]
        assert found[0].canonical_id == "ent-1"

    def test_empty_params_match_everything(self, fake_vault, client):
        fake_vault.add_alias("a1", "svc-a", "auth-x")
        fake_vault.add_alias("a2", "svc-b", "auth-y")
        assert len(find_aliases(client, FindAliasParams())) == 2

    def test_list_failure_propagates(self, fake_vault, client):
        fake_vault.failures[("LIST", "identity/entity-alias/id")] = 403
        with pytest.raises(VaultAPIError):
            find_aliases(client, FindAliasParams("svc-a", "auth-x"))

    def test_malformed_key_info(self):
        def handler(request):
            return httpx.Response(200, json={"data": {"key_info": ["a1"]}})

        with VaultClient(
            "https://vault.test", "t", transport=httpx.MockTransport(handler)
        ) as client:
            with pytest.raises(MalformedResponseError):
                find_aliases(client, FindAliasParams("svc-a", "auth-x"))


def test_join_alias_id():
    assert join_alias_id("abc") == "identity/entity-alias/id/abc"
