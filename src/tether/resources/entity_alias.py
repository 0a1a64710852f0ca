"""Lifecycle of a Vault identity entity alias.

An entity alias binds the name a principal has on one auth mount (identified
by its mount accessor) to a canonical entity. Vault itself does not enforce
that (name, mount_accessor) is unique, so create checks for an existing alias
first. That check is only meaningful if nothing else can create an alias on
the same mount between the check and the write, so create, update and delete
all hold the mount's lock from the registry for their whole critical section.

Reads take no lock. A read that finds the alias gone clears the state ID
instead of failing, which lets the caller drop the record.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from tether.client.errors import MalformedResponseError, NotFoundError, VaultError
from tether.diagnostics import Diagnostics
from tether.identity.aliases import FindAliasParams, find_aliases
from tether.identity.paths import ROOT_ALIAS_ID_PATH, ROOT_ALIAS_PATH, join_alias_id
from tether.identity.schema import AliasRequest, decode_alias
from tether.locks import MutexRegistry, get_mutex_registry, lock_key
from tether.state import FieldSpec, ResourceState, StateError

if TYPE_CHECKING:
    from tether.client.vault import VaultClient

logger = logging.getLogger(__name__)

ALIAS_SCHEMA: dict[str, FieldSpec] = {
    "name": FieldSpec(str, required=True, description="Name of the entity alias."),
    "mount_accessor": FieldSpec(
        str,
        required=True,
        description="Mount accessor to which this alias belongs.",
    ),
    "canonical_id": FieldSpec(
        str, required=True, description="ID of the entity to which this is an alias."
    ),
    "custom_metadata": FieldSpec(
        dict, description="Custom metadata to be associated with this alias."
    ),
}

DUPLICATE_ALIAS_DETAIL = (
    "In the case where this error occurred during the creation of more than one "
    "alias, it may be necessary to assign a unique alias name to each of the "
    "affected resources and then rerun the apply. After a successful apply the "
    "desired original alias names can then be reassigned."
)


class EntityAliasResource:
    """Create, read, update and delete entity aliases.

    The lock registry is shared by every operation in the process; pass the
    same registry to every EntityAliasResource (and to any other resource
    locking identity paths) or writes will not be serialized.
    """

    schema = ALIAS_SCHEMA

    def __init__(self, locks: MutexRegistry | None = None) -> None:
        self.locks = locks if locks is not None else get_mutex_registry()

    def new_state(self, values: dict[str, Any] | None = None, id: str = "") -> ResourceState:
        return ResourceState(self.schema, values=values, id=id)

    def lock_key(self, state: ResourceState) -> str:
        return lock_key(ROOT_ALIAS_ID_PATH, state.get("mount_accessor", ""))

    def create(self, state: ResourceState, client: VaultClient) -> Diagnostics:
        diags = Diagnostics()
        # An empty name or mount accessor would match every alias below
        if missing := state.missing_required():
            return diags.add_error(
                f"cannot create entity alias, missing required fields: {', '.join(missing)}"
            )

        request = AliasRequest.from_state(state)
        name = request.name
        mount_accessor = request.mount_accessor

        with self.locks.hold(self.lock_key(state)):
            try:
                aliases = find_aliases(
                    client, FindAliasParams(name=name, mount_accessor=mount_accessor)
                )
            except VaultError as e:
                return diags.add_error(
                    f"Failed to get entity aliases by mount accessor, err={e}"
                )

            if aliases:
                duplicates = ",".join(alias.id for alias in aliases)
                return diags.add_error(
                    f"entity alias {name!r} already exists for mount accessor "
                    f"{mount_accessor!r}, ids={duplicates!r}",
                    DUPLICATE_ALIAS_DETAIL,
                )

            try:
                response = client.write(ROOT_ALIAS_PATH, request.to_payload())
            except VaultError as e:
                return diags.add_error(f"error writing entity alias to {name!r}: {e}")

            if response is None or not response.data:
                return diags.add_error(
                    f"unexpected empty response during entity alias creation name={name!r}"
                )

            alias_id = response.data.get("id")
            if not isinstance(alias_id, str) or not alias_id:
                return diags.add_error(
                    f"malformed response during entity alias creation name={name!r}: "
                    "no alias ID returned"
                )

            logger.debug("Wrote entity alias %r", name)
            state.set_id(alias_id)

        state.mark_new()
        try:
            return self.read(state, client)
        finally:
            state.mark_new(False)

    def update(self, state: ResourceState, client: VaultClient) -> Diagnostics:
        diags = Diagnostics()
        alias_id = state.id
        if not alias_id:
            return diags.add_error("cannot update entity alias without an ID")

        logger.debug("Updating entity alias %r", alias_id)
        payload = AliasRequest.from_state(state).to_payload()

        with self.locks.hold(self.lock_key(state)):
            try:
                client.write(join_alias_id(alias_id), payload)
            except VaultError as e:
                return diags.add_error(f"error updating entity alias {alias_id!r}: {e}")

        logger.debug("Updated entity alias %r", alias_id)
        return self.read(state, client)

    def read(self, state: ResourceState, client: VaultClient) -> Diagnostics:
        diags = Diagnostics()
        alias_id = state.id
        if not alias_id:
            return diags

        path = join_alias_id(alias_id)
        logger.debug("Reading entity alias %r from %r", alias_id, path)
        try:
            response = client.read(path, is_new=state.is_new_resource)
        except NotFoundError:
            response = None
        except VaultError as e:
            return diags.add_error(f"error reading entity alias {alias_id!r}: {e}")

        if response is None:
            logger.warning("entity alias %r not found, removing from state", alias_id)
            state.set_id("")
            return diags

        try:
            alias = decode_alias(response.data, alias_id)
        except MalformedResponseError as e:
            return diags.add_error(
                f"error setting state key {e.field!r} on entity alias {alias_id!r}: "
                f"err={e.reason!r}"
            )

        state.set_id(alias.id)
        for key, value in alias.state_values().items():
            try:
                state.set(key, value)
            except StateError as e:
                return diags.add_error(
                    f"error setting state key {key!r} on entity alias {alias_id!r}: "
                    f"err={str(e)!r}"
                )

        return diags

    def delete(self, state: ResourceState, client: VaultClient) -> Diagnostics:
        diags = Diagnostics()
        alias_id = state.id
        if not alias_id:
            return diags.add_error("cannot delete entity alias without an ID")

        base_msg = (
            f"entity alias ID {alias_id!r} on mount_accessor "
            f"{state.get('mount_accessor', '')!r}"
        )
        with self.locks.hold(self.lock_key(state)):
            logger.info("Deleting %s", base_msg)
            try:
                client.delete(join_alias_id(alias_id))
            except VaultError as e:
                return diags.add_error(f"failed deleting {base_msg}, err={e}")

        logger.info("Successfully deleted %s", base_msg)
        return diags

    def import_state(
        self, state: ResourceState, client: VaultClient, alias_id: str
    ) -> Diagnostics:
        """Adopt an existing alias by ID and populate state from Vault."""
        state.set_id(alias_id)
        diags = self.read(state, client)
        if not diags.has_error() and not state.exists:
            diags.add_error(f"cannot import non-existent entity alias {alias_id!r}")
        return diags
