"""Typed request payloads and response schemas for entity aliases."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from tether.client.errors import MalformedResponseError

if TYPE_CHECKING:
    from tether.state import ResourceState

# Declared fields of an entity alias, in state order
ALIAS_FIELDS = ("name", "mount_accessor", "canonical_id", "custom_metadata")


@dataclass
class AliasRequest:
    """Body of a create or update write.

    Each field is serialized by its own rule: the string fields are sent
    when set, custom_metadata only when it has at least one entry.
    """

    name: str
    mount_accessor: str
    canonical_id: str
    custom_metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_state(cls, state: ResourceState) -> AliasRequest:
        return cls(
            name=state.get("name", ""),
            mount_accessor=state.get("mount_accessor", ""),
            canonical_id=state.get("canonical_id", ""),
            custom_metadata=dict(state.get("custom_metadata") or {}),
        )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.name:
            payload["name"] = self.name
        if self.mount_accessor:
            payload["mount_accessor"] = self.mount_accessor
        if self.canonical_id:
            payload["canonical_id"] = self.canonical_id
        if self.custom_metadata:
            payload["custom_metadata"] = dict(self.custom_metadata)
        return payload


class AliasResponse(BaseModel):
    """An entity alias as returned by ``identity/entity-alias/id/<id>``.

    Strict: a field of the wrong type is a malformed response, not something
    to coerce.
    """

    model_config = ConfigDict(extra="ignore", strict=True)

    id: str
    name: str
    mount_accessor: str
    canonical_id: str
    custom_metadata: dict[str, str] = {}

    @field_validator("custom_metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value: Any) -> Any:
        return {} if value is None else value

    def state_values(self) -> dict[str, Any]:
        """Declared field values to write back into local state."""
        return {
            "name": self.name,
            "mount_accessor": self.mount_accessor,
            "canonical_id": self.canonical_id,
            "custom_metadata": dict(self.custom_metadata),
        }


class AliasSummary(BaseModel):
    """One ``key_info`` entry of an alias LIST response."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    mount_accessor: str = ""
    canonical_id: str = ""


def decode_alias(data: dict[str, Any] | None, record_id: str) -> AliasResponse:
    """Decode response data into an AliasResponse.

    Raises:
        MalformedResponseError: Naming the first field that is missing or
            has the wrong type.
    """
    if data is None:
        raise MalformedResponseError("data", record_id, "response has no data")
    try:
        return AliasResponse.model_validate(data)
    except ValidationError as e:
        err = e.errors()[0]
        loc = err["loc"][0] if err["loc"] else "data"
        raise MalformedResponseError(str(loc), record_id, err["msg"]) from e
