"""`cig config` — view and change persisted defaults."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from . import config, config_manager

console = Console()

config_app = typer.Typer(
    help="⚙️  Configuration — generation defaults and extra type names.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@config_app.command("show")
def show_config():
    """Show the effective configuration."""
    data = config_manager.load_full_config()
    table = Table(title=str(config.CONFIG_FILE), show_header=True)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key in config_manager.known_keys():
        section, name = key.split(".", 1)
        value = data[section][name]
        if isinstance(value, list):
            value = ", ".join(value) or "[dim](none)[/dim]"
        table.add_row(key, str(value) if value != "" else "[dim](unset)[/dim]")
    console.print(table)


@config_app.command("set")
def set_config(
    key: str = typer.Argument(..., help="Setting name, e.g. generator.include_target."),
    value: str = typer.Argument(..., help="New value; lists are comma-separated."),
):
    """Persist a setting to the config file."""
    try:
        stored = config_manager.set_value(key, value)
    except KeyError:
        raise typer.BadParameter(f"Unknown key '{key}'. Known keys: {', '.join(config_manager.known_keys())}")
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Set {key} = {stored!r}")


@config_app.command("reset")
def reset_config():
    """Delete the config file and return to defaults."""
    if config_manager.reset_config():
        typer.echo("Configuration reset to defaults.")
    else:
        typer.echo("No configuration file to reset.")
