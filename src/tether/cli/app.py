"""Main CLI application."""

import typer

from tether.cli.commands import alias, config

app = typer.Typer(
    name="tether",
    help="Tether - reconcile Vault identity entity aliases",
    no_args_is_help=True,
)

alias.register(app)
config.register(app)
