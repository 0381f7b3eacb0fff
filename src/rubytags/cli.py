"""Typer CLI entry point for rubytags.

Tag records go to stdout (or ``--output``) untouched by rich; status,
warnings and errors go to stderr.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from rubytags import __version__
from rubytags.config import TagsConfig, load_config
from rubytags.exceptions import RubyTagsError
from rubytags.indexer.index import TagsBuilder
from rubytags.indexer.tags import Diagnostic, TagIndex, format_tags, kind_char

app = typer.Typer(
    name="rubytags",
    help="rubytags: ctags-style tag files for Ruby sources.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()
err_console = Console(stderr=True)


def _error_exit(message: str, hint: str | None = None) -> None:
    """Print a styled error and exit."""
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    if hint:
        err_console.print(f"[dim]Hint: {hint}[/dim]")
    raise typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"rubytags {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    """Generate tag files for Ruby sources."""


def _load(jobs: int | None, verbose: bool) -> TagsConfig:
    config = load_config(Path.cwd())
    if jobs is not None:
        config.jobs = jobs
    if verbose:
        config.log_level = "DEBUG"
    return config


def _report_warnings(warnings: list[Diagnostic]) -> None:
    for warning in warnings:
        err_console.print(f"[yellow]Warning[/yellow]: {escape(str(warning))}", highlight=False)


def _write_tags(text: str, output: Path | None) -> None:
    if output is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    try:
        output.write_bytes(text.encode("utf-8"))
    except OSError as exc:
        _error_exit(f"Cannot write {output}: {exc.strerror or exc}")


@app.command()
def tags(
    path: Annotated[Path, typer.Argument(help="Ruby file or directory to index")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write tags to this file instead of stdout")
    ] = None,
    jobs: Annotated[
        int | None, typer.Option("--jobs", "-j", min=1, help="Files indexed in parallel")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose output")] = False,
) -> None:
    """Write a tag file for a Ruby file or every Ruby file under a directory."""
    failures = 0
    try:
        config = _load(jobs, verbose)
        builder = TagsBuilder(config)

        if path.is_dir():
            run = builder.build_tree(path)
            index: TagIndex = run.index
            warnings = run.warnings
            failures = len(run.failures)
            if run.files == 0:
                err_console.print(f"[yellow]No Ruby source files found under {path}[/yellow]")
        else:
            result = builder.build_file(path)
            index = result.index.sort()
            warnings = result.warnings
    except RubyTagsError as exc:
        _error_exit(str(exc))
        return

    _report_warnings(warnings)
    _write_tags(format_tags(index), output)

    if failures:
        _error_exit(
            f"{failures} file(s) could not be indexed.",
            hint="Tags for the remaining files were written.",
        )


@app.command()
def show(
    path: Annotated[Path, typer.Argument(help="Ruby file to inspect")],
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose output")] = False,
) -> None:
    """Show a file's definitions in discovery order."""
    try:
        config = _load(None, verbose)
        result = TagsBuilder(config).build_file(path)
    except RubyTagsError as exc:
        _error_exit(str(exc))
        return

    table = Table(title=escape(result.file), border_style="cyan", header_style="bold cyan")
    table.add_column("Kind", style="bold")
    table.add_column("Name")
    table.add_column("Excerpt", style="dim")
    for definition in result.index:
        table.add_row(kind_char(definition.kind), Text(definition.name), Text(definition.excerpt))

    console.print()
    console.print(table)
    console.print(
        f"[green]{len(result.index)}[/green] definitions, "
        f"[yellow]{len(result.warnings)}[/yellow] warnings"
    )
    _report_warnings(result.warnings)
