"""Entity alias lifecycle commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from tether.cli.console import (
    console,
    dim,
    error,
    print_diagnostics,
    state_table,
    success,
    warning,
)

if TYPE_CHECKING:
    from tether.cli.runtime import RuntimeBootstrap
    from tether.diagnostics import Diagnostics
    from tether.state import ResourceState

app = typer.Typer(
    name="alias",
    help="Manage a Vault identity entity alias.",
    no_args_is_help=True,
)


def register(root: typer.Typer) -> None:
    root.add_typer(app, name="alias")


ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to configuration file"),
]
StateOption = Annotated[
    Path | None,
    typer.Option(
        "--state",
        "-s",
        help="Path to the alias state file (default: $TETHER_HOME/alias.json)",
    ),
]
MetadataOption = Annotated[
    list[str] | None,
    typer.Option(
        "--metadata",
        "-m",
        help="Custom metadata entry as KEY=VALUE (repeatable)",
    ),
]


def _parse_metadata(entries: list[str] | None) -> dict[str, str] | None:
    if entries is None:
        return None
    metadata: dict[str, str] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise typer.BadParameter(
                f"expected KEY=VALUE, got {entry!r}", param_hint="--metadata"
            )
        metadata[key] = value
    return metadata


def _bootstrap(config_path: Path | None, state_path: Path | None) -> RuntimeBootstrap:
    from pydantic import ValidationError

    from tether.cli.runtime import bootstrap_runtime
    from tether.config import ConfigError

    try:
        return bootstrap_runtime(config_path=config_path, state_path=state_path)
    except FileNotFoundError as e:
        error(str(e))
        raise typer.Exit(1) from None
    except (ConfigError, ValidationError, ValueError) as e:
        error(f"Invalid configuration: {e}")
        raise typer.Exit(1) from None


def _load_tracked(runtime: RuntimeBootstrap) -> ResourceState:
    from tether.state import StateError

    try:
        state = runtime.storage.load(runtime.resource.schema)
    except StateError as e:
        error(str(e))
        raise typer.Exit(1) from None
    if state is None or not state.exists:
        error(f"No entity alias tracked in {runtime.storage.path}")
        dim("Run 'tether alias create' or 'tether alias import' first")
        raise typer.Exit(1)
    return state


def _ensure_untracked(runtime: RuntimeBootstrap) -> None:
    from tether.state import StateError

    try:
        existing = runtime.storage.load(runtime.resource.schema)
    except StateError as e:
        error(str(e))
        raise typer.Exit(1) from None
    if existing is not None and existing.exists:
        error(
            f"{runtime.storage.path} already tracks entity alias {existing.id}; "
            "use 'tether alias update' or delete it first"
        )
        raise typer.Exit(1)


def _persist(runtime: RuntimeBootstrap, state: ResourceState) -> None:
    """Save state if the alias exists, otherwise drop the state file."""
    if state.exists:
        runtime.storage.save(state)
    elif runtime.storage.remove():
        warning("Entity alias no longer exists; removed it from state")


def _finish(diags: Diagnostics) -> None:
    print_diagnostics(diags)
    if diags.has_error():
        raise typer.Exit(1)


@app.command()
def create(
    name: Annotated[str, typer.Option("--name", help="Name of the entity alias")],
    mount_accessor: Annotated[
        str,
        typer.Option("--mount-accessor", help="Accessor of the auth mount"),
    ],
    canonical_id: Annotated[
        str,
        typer.Option("--canonical-id", help="ID of the entity to alias"),
    ],
    metadata: MetadataOption = None,
    config_path: ConfigOption = None,
    state_path: StateOption = None,
) -> None:
    """Create an entity alias and start tracking it."""
    custom_metadata = _parse_metadata(metadata)
    runtime = _bootstrap(config_path, state_path)
    with runtime.client:
        _ensure_untracked(runtime)

        state = runtime.resource.new_state(
            {
                "name": name,
                "mount_accessor": mount_accessor,
                "canonical_id": canonical_id,
                "custom_metadata": custom_metadata,
            }
        )
        diags = runtime.resource.create(state, runtime.client)
        if state.exists:
            runtime.storage.save(state)
            if not diags.has_error():
                success(f"Created entity alias {state.id}")
        elif not diags.has_error():
            # The write succeeded but the read-back never found the alias
            diags.add_error(
                f"entity alias {name!r} on mount accessor {mount_accessor!r} "
                "was created but could not be read back",
                "Find its ID in Vault and run 'tether alias import <id>' "
                "to start tracking it.",
            )
        _finish(diags)


@app.command()
def read(
    config_path: ConfigOption = None,
    state_path: StateOption = None,
) -> None:
    """Refresh the tracked alias from Vault."""
    runtime = _bootstrap(config_path, state_path)
    with runtime.client:
        state = _load_tracked(runtime)

        diags = runtime.resource.read(state, runtime.client)
        if not diags.has_error():
            _persist(runtime, state)
            if state.exists:
                console.print(state_table(state))
        _finish(diags)


@app.command()
def update(
    name: Annotated[
        str | None, typer.Option("--name", help="New name of the entity alias")
    ] = None,
    mount_accessor: Annotated[
        str | None,
        typer.Option("--mount-accessor", help="New auth mount accessor"),
    ] = None,
    canonical_id: Annotated[
        str | None,
        typer.Option("--canonical-id", help="New entity ID"),
    ] = None,
    metadata: MetadataOption = None,
    config_path: ConfigOption = None,
    state_path: StateOption = None,
) -> None:
    """Change fields of the tracked alias and write them to Vault."""
    custom_metadata = _parse_metadata(metadata)
    runtime = _bootstrap(config_path, state_path)
    with runtime.client:
        state = _load_tracked(runtime)

        changes = {
            "name": name,
            "mount_accessor": mount_accessor,
            "canonical_id": canonical_id,
            "custom_metadata": custom_metadata,
        }
        for key, value in changes.items():
            if value is not None:
                state.set(key, value)

        diags = runtime.resource.update(state, runtime.client)
        if not diags.has_error():
            _persist(runtime, state)
            success(f"Updated entity alias {state.id}")
        _finish(diags)


@app.command()
def delete(
    config_path: ConfigOption = None,
    state_path: StateOption = None,
) -> None:
    """Delete the tracked alias from Vault and stop tracking it."""
    runtime = _bootstrap(config_path, state_path)
    with runtime.client:
        state = _load_tracked(runtime)

        alias_id = state.id
        diags = runtime.resource.delete(state, runtime.client)
        if not diags.has_error():
            runtime.storage.remove()
            success(f"Deleted entity alias {alias_id}")
        _finish(diags)


@app.command("import")
def import_(
    alias_id: Annotated[str, typer.Argument(help="ID of an existing entity alias")],
    config_path: ConfigOption = None,
    state_path: StateOption = None,
) -> None:
    """Start tracking an alias that already exists in Vault."""
    runtime = _bootstrap(config_path, state_path)
    with runtime.client:
        _ensure_untracked(runtime)

        state = runtime.resource.new_state()
        diags = runtime.resource.import_state(state, runtime.client, alias_id)
        if not diags.has_error():
            runtime.storage.save(state)
            success(f"Imported entity alias {alias_id}")
        _finish(diags)


@app.command()
def show(state_path: StateOption = None) -> None:
    """Print the tracked alias without contacting Vault."""
    from tether.resources.entity_alias import ALIAS_SCHEMA
    from tether.state import StateError, StateStorage

    storage = StateStorage(state_path)
    try:
        state = storage.load(ALIAS_SCHEMA)
    except StateError as e:
        error(str(e))
        raise typer.Exit(1) from None
    if state is None:
        dim(f"No state file at {storage.path}")
        return
    console.print(state_table(state))
