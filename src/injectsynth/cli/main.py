"""
injectsynth CLI - Main entry point.

Command-line host for the inject action: offers it on a field of a C# file,
reports injectable fields, and writes a default configuration.
"""

import difflib
import logging
from pathlib import Path
from typing import Optional

import orjson
import typer
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from injectsynth.config.loader import ConfigurationError, generate_default_config, load_config
from injectsynth.config.models import SynthConfig, SynthesisState
from injectsynth.host.actions import ActionContext, InjectableFieldInspection, InjectDependencyAction
from injectsynth.host.document import FileDocument

app = typer.Typer(
    name="injectsynth",
    help="Create or extend [Inject] InjectDependencies methods for private fields",
    no_args_is_help=True,
)

console = Console()


# =============================================================================
# Helper Functions
# =============================================================================


def configure_logging(verbose: bool, quiet: bool = False) -> None:
    if verbose:
        log_level = logging.DEBUG
    elif quiet:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO
    logging.basicConfig(level=log_level, format="%(name)s: %(message)s")


def validate_path(path: str, must_exist: bool = True) -> Path:
    """Validate and return a Path object."""
    p = Path(path)
    if must_exist and not p.is_file():
        raise typer.BadParameter(f"File does not exist: {path}")
    return p


def build_config(config: Optional[str], backend: Optional[str]) -> SynthConfig:
    """Load configuration, exiting with a message when it is invalid."""
    try:
        return load_config(Path(config) if config else None, backend)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {e}")
        raise typer.Exit(1)


def render_diff(before: str, after: str, name: str) -> str:
    return "".join(
        difflib.unified_diff(
            before.splitlines(keepends=True),
            after.splitlines(keepends=True),
            fromfile=f"a/{name}",
            tofile=f"b/{name}",
        )
    )


# =============================================================================
# Commands
# =============================================================================


@app.command()
def inject(
    file: str = typer.Argument(..., help="C# source file to edit"),
    field: Optional[str] = typer.Option(None, "--field", "-f", help="Name of the private field to inject"),
    line: Optional[int] = typer.Option(None, "--line", "-l", help="1-based line of the field declaration"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the diff without writing the file"),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="Structure backend (text/tree)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to configuration YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Create or update the injection method for one field.

    Examples:
        injectsynth inject Player.cs --field _weapons
        injectsynth inject Player.cs --line 12 --dry-run
    """
    configure_logging(verbose)

    if not field and line is None:
        console.print("[bold red]Error:[/bold red] --field or --line is required")
        raise typer.Exit(1)

    cfg = build_config(config, backend)
    path = validate_path(file)
    document = FileDocument(path, field_name=field, caret_line=line, visibility=cfg.field_visibility)
    action = InjectDependencyAction(cfg)
    context = ActionContext(document)

    try:
        if dry_run:
            edit = action.apply(context)
        else:
            edit = action.perform(context)
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)

    if not edit.changed:
        console.print(Panel(edit.summary, title="Inject Dependency", border_style="yellow"))
        raise typer.Exit(1)

    if dry_run:
        before = document.get_source_text().to_text()
        diff = render_diff(before, edit.new_text.to_text(), path.name)
        console.print(Syntax(diff, "diff", theme="ansi_dark"))
        console.print("[yellow]Dry run: file not written.[/yellow]")
    else:
        console.print(Panel(edit.summary, title="Inject Dependency", border_style="bold green"))
        console.print(f"[green]✓[/green] Updated {path}")


@app.command()
def inspect(
    file: str = typer.Argument(..., help="C# source file to inspect"),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="Structure backend (text/tree)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to configuration YAML file"),
    as_json: bool = typer.Option(False, "--json", help="Print machine-readable JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    List the private fields the inject action is available on.
    """
    configure_logging(verbose, quiet=as_json)

    cfg = build_config(config, backend)
    document = FileDocument(validate_path(file), visibility=cfg.field_visibility)
    inspection = InjectableFieldInspection(cfg)

    try:
        problems = inspection.check(document)
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)

    if as_json:
        rows = [
            {
                "field": p.field_name,
                "line": p.line_index + 1,
                "action": "create" if p.state == SynthesisState.WOULD_CREATE else "update",
                "message": p.message,
            }
            for p in problems
        ]
        typer.echo(orjson.dumps(rows, option=orjson.OPT_INDENT_2).decode("utf-8"))
        return

    if not problems:
        console.print("[green]No injectable fields found.[/green]")
        return

    table = Table(title=f"{inspection.display_name}: {document.name}")
    table.add_column("Line", justify="right")
    table.add_column("Field", style="cyan")
    table.add_column("Action", justify="center")
    table.add_column("Message")

    for p in problems:
        action = "create" if p.state == SynthesisState.WOULD_CREATE else "update"
        table.add_row(str(p.line_index + 1), p.field_name, action, p.message)

    console.print(table)


@app.command()
def init(
    output: str = typer.Option("./injectsynth.yaml", "--output", "-o", help="Output path for config file"),
):
    """
    Generate a default configuration file.

    Creates an injectsynth.yaml with the default marker, method name and base type.
    """
    output_path = Path(output)

    if output_path.exists():
        if not typer.confirm(f"{output} already exists. Overwrite?"):
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Abort()

    generate_default_config(output_path)
    console.print(f"[green]✓[/green] Generated configuration file: {output}")


# =============================================================================
# Entry Point
# =============================================================================


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
