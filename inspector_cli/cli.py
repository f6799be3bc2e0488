"""Typer-based CLI for generating Unity custom inspectors."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.prompt import Prompt
from rich.syntax import Syntax
from rich.table import Table

from . import __version__, config_manager
from .cli_config import config_app
from .generator import editor_class_name
from .models import Accessibility
from .reflection import CSharpReflectionProvider
from .session import InspectorSession

console = Console()

app = typer.Typer(
    help="🧩 Inspector CLI — generate Unity CustomEditor scripts from serialized fields.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(config_app, name="config")

SCRIPT_ARGUMENT = typer.Argument(..., exists=True, dir_okay=False, help="C# script declaring the type.")
TYPE_OPTION = typer.Option(None, "--type", "-t", help="Type to inspect (defaults to the class named like the file).")
PROJECT_OPTION = typer.Option(
    None, "--project", "-p", exists=True, file_okay=False,
    help="Folder scanned for other type declarations (defaults to the enclosing Assets folder).",
)
ONLY_OPTION = typer.Option(None, "--only", help="Bind only these fields (repeatable).")
EXCLUDE_OPTION = typer.Option(None, "--exclude", "-x", help="Skip these fields (repeatable).")
TARGET_OPTION = typer.Option(
    None, "--target/--no-target",
    help="Declare a typed reference to the inspected object.",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"Inspector CLI v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log parsing and generation details."),
):
    """Inspector CLI: custom editors for MonoBehaviours and ScriptableObjects."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _project_root_for(script: Path) -> Path:
    """Nearest enclosing ``Assets`` folder, else the script's own folder."""
    resolved = script.resolve()
    for parent in resolved.parents:
        if parent.name == "Assets":
            return parent
    return resolved.parent


def _open_session(
    script: Path,
    type_name: Optional[str],
    project: Optional[Path],
    include_target: Optional[bool] = None,
) -> InspectorSession:
    settings = config_manager.load_full_config()
    provider = CSharpReflectionProvider(
        project or _project_root_for(script),
        extra_engine_objects=settings["types"]["engine_objects"],
        extra_value_types=settings["types"]["value_types"],
    )
    if include_target is None:
        include_target = bool(settings["generator"]["include_target"])
    session = InspectorSession(
        provider,
        include_target=include_target,
        editor_dir=settings["output"]["editor_dir"],
    )
    session.load(script, type_name)

    if not session.resolved:
        if type_name:
            available = ", ".join(t.name for t in provider.list_types(script)) or "none"
            raise typer.BadParameter(f"Type '{type_name}' not found in {script.name} (available: {available}).")
        typer.echo(
            f"⚠️  Could not resolve a type from {script.name}; "
            f"generating the default inspector for '{session.target_type.name}'.",
            err=True,
        )
    return session


def _apply_selection(session: InspectorSession, only: Optional[List[str]], exclude: Optional[List[str]]) -> None:
    try:
        if only:
            session.select_only(only)
        if exclude:
            session.exclude(exclude)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _fields_table(session: InspectorSession, with_selection: bool = False) -> Table:
    table = Table(title=f"{session.target_type.full_name} — serialized fields", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    if with_selection:
        table.add_column("Bind", justify="center")
    table.add_column("Field", style="bold")
    table.add_column("Type", style="cyan")
    table.add_column("Collection", justify="center")
    table.add_column("Access")

    for index, (field, selected) in enumerate(zip(session.fields, session.selection)):
        row = [str(index)]
        if with_selection:
            row.append("[green]✔[/green]" if selected else "[dim]·[/dim]")
        row += [
            field.name,
            escape(field.declared_type.name),
            "yes" if field.is_collection else "",
            "public" if field.accessibility == Accessibility.PUBLIC else "SerializeField",
        ]
        table.add_row(*row)
    return table


@app.command("fields")
def list_fields(
    script: Path = SCRIPT_ARGUMENT,
    type_name: Optional[str] = TYPE_OPTION,
    project: Optional[Path] = PROJECT_OPTION,
):
    """List the fields Unity would serialize for a script's type."""
    session = _open_session(script, type_name, project)
    if not session.fields:
        typer.echo("No eligible fields.")
        raise typer.Exit(code=0)
    console.print(_fields_table(session))


@app.command("preview")
def preview(
    script: Path = SCRIPT_ARGUMENT,
    type_name: Optional[str] = TYPE_OPTION,
    project: Optional[Path] = PROJECT_OPTION,
    only: Optional[List[str]] = ONLY_OPTION,
    exclude: Optional[List[str]] = EXCLUDE_OPTION,
    target: Optional[bool] = TARGET_OPTION,
    raw: bool = typer.Option(False, "--raw", help="Print plain text without highlighting."),
):
    """Print the editor script that would be generated."""
    session = _open_session(script, type_name, project, target)
    _apply_selection(session, only, exclude)
    text = session.render()
    if raw:
        typer.echo(text, nl=False)
    else:
        console.print(Syntax(text, "csharp", line_numbers=True))


@app.command("create")
def create(
    script: Path = SCRIPT_ARGUMENT,
    type_name: Optional[str] = TYPE_OPTION,
    project: Optional[Path] = PROJECT_OPTION,
    only: Optional[List[str]] = ONLY_OPTION,
    exclude: Optional[List[str]] = EXCLUDE_OPTION,
    target: Optional[bool] = TARGET_OPTION,
    output: Optional[Path] = typer.Option(None, "--output", "-o", dir_okay=False, help="Destination script."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the change as a diff without writing."),
):
    """Generate the editor script, appending to the destination if it exists."""
    session = _open_session(script, type_name, project, target)
    _apply_selection(session, only, exclude)
    destination = output or session.default_save_path()

    if dry_run:
        typer.echo(session.preview(destination), nl=False)
        return

    _report(session, session.create(destination))


def _report(session: InspectorSession, result) -> None:
    name = editor_class_name(session.target_type.name)
    if result.merged:
        typer.echo(f"Appended {name} to {result.path}")
        if result.import_inserted:
            typer.echo("Added '#if UNITY_EDITOR' guarded UnityEditor import.")
    else:
        typer.echo(f"Created {result.path}")
    typer.echo(f"Fields bound: {len(session.selected_fields)}")


def prompt_save_path(default: Path) -> Optional[Path]:
    """Ask for the destination; answering - cancels."""
    answer = Prompt.ask("Save path ([dim]'-' to cancel[/dim])", default=str(default), console=console)
    answer = answer.strip()
    if not answer or answer == "-":
        return None
    return Path(answer)


@app.command("interactive")
def interactive(
    script: Path = SCRIPT_ARGUMENT,
    type_name: Optional[str] = TYPE_OPTION,
    project: Optional[Path] = PROJECT_OPTION,
):
    """Toggle fields interactively, then create the editor script."""
    session = _open_session(script, type_name, project)

    while True:
        if session.fields:
            console.print(_fields_table(session, with_selection=True))
        else:
            console.print("[dim]No eligible fields; the default inspector will be drawn.[/dim]")
        target_state = "[green]on[/green]" if session.include_target else "[dim]off[/dim]"
        console.print(f"Target reference: {target_state}")

        answer = Prompt.ask(
            "Toggle [bold]#[/bold], (a)ll, (n)one, (t)arget, (c)reate, (q)uit",
            default="c",
            console=console,
        ).strip().lower()

        if answer == "q":
            console.print("[cyan]Nothing created.[/cyan]")
            return
        if answer == "c":
            break
        if answer == "a":
            session.select_all(True)
        elif answer == "n":
            session.select_all(False)
        elif answer == "t":
            session.include_target = not session.include_target
        elif answer.isdigit() and int(answer) < len(session.fields):
            session.toggle(int(answer))
        else:
            console.print(f"[red]Unknown choice '{answer}'.[/red]")

    destination = prompt_save_path(session.default_save_path())
    if destination is None:
        console.print("[cyan]Cancelled.[/cyan]")
        return
    _report(session, session.create(destination))


if __name__ == "__main__":
    app()
