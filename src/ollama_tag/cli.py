"""Command line front end for the tag store.

All validation messages, prompts and exit codes live here; the store only
returns results or raises :class:`~ollama_tag.errors.TagStoreError`.
"""

import json
from enum import Enum
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from . import __version__
from .config import DB_ENV_VAR
from .errors import AlreadyExistsError, TagStoreError, ValidationError
from .logging_utils import setup_logging
from .store import TagStore
from .tags_types import Tag, new_tag, parse_metadata, validate_query, validate_tag_name

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

app = typer.Typer(
    help="CLI tool for managing tags in the Ollama ecosystem",
    no_args_is_help=True,
    add_completion=False,
)


class OutputFormat(str, Enum):
    table = "table"
    json = "json"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"ollama-tag {__version__}")
        raise typer.Exit()


def _fail(label: str, message: object, *, style: str = "red") -> NoReturn:
    err_console.print(Text.assemble((label, style), " ", str(message)))
    raise typer.Exit(code=1)


def _render_tags(tags: Sequence[Tag], title: str) -> None:
    table = Table(title=title, title_justify="left", show_lines=False)
    table.add_column("Name", style="bold")
    table.add_column("Category", style="blue")
    table.add_column("Description", style="dim")
    for tag in tags:
        table.add_row(
            Text(tag["name"]),
            Text(tag.get("category", "")),
            Text(tag.get("description", "")),
        )
    console.print(table)


def _print_json(tags: Sequence[Tag]) -> None:
    typer.echo(json.dumps(list(tags), indent=2, ensure_ascii=False))


@app.callback()
def main(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(
        None,
        "--db",
        envvar=DB_ENV_VAR,
        dir_okay=False,
        help="Path to the tag database (defaults to the per-user config directory).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Manage tags stored in a local JSON database."""
    setup_logging(verbose)
    ctx.obj = TagStore(db)


@app.command("list")
def list_tags(
    ctx: typer.Context,
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Filter tags by category"),
    output: OutputFormat = typer.Option(OutputFormat.table, "--format", "-f", help="Output format"),
) -> None:
    """List all tags."""
    store: TagStore = ctx.obj
    try:
        tags = store.list(category)
    except TagStoreError as exc:
        _fail("Error listing tags:", exc)

    if output is OutputFormat.json:
        _print_json(tags)
        return

    if not tags:
        console.print("[yellow]No tags found[/yellow]")
        if category:
            console.print(Text(f'No tags found in category "{category}"', style="dim"))
        else:
            console.print(Text("No tags found in the system", style="dim"))
        return

    _render_tags(tags, "Tags")
    console.print(Text(f"Total: {len(tags)} tags", style="dim"))


@app.command("add")
def add_tag(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the tag"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Category for the tag"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Description for the tag"),
    meta: Optional[List[str]] = typer.Option(None, "--meta", "-m", help="Extra metadata as KEY=VALUE (repeatable)"),
) -> None:
    """Add a new tag."""
    store: TagStore = ctx.obj
    try:
        validate_tag_name(name)
        metadata = parse_metadata(meta)
    except ValidationError as exc:
        _fail("Error:", exc)

    try:
        if store.exists(name):
            _fail("Warning:", f'Tag "{name}" already exists', style="yellow")
        store.add(new_tag(name, category=category, description=description, metadata=metadata))
    except AlreadyExistsError as exc:
        _fail("Warning:", exc, style="yellow")
    except TagStoreError as exc:
        _fail("Error adding tag:", exc)

    console.print(Text.assemble(("Success:", "green"), f' Tag "{name}" added successfully'))
    if category:
        console.print(Text.assemble("Category: ", (category, "blue")))
    if description:
        console.print(Text.assemble("Description: ", (description, "dim")))


@app.command("update")
def update_tag(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the tag to update"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="New category"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="New description"),
    meta: Optional[List[str]] = typer.Option(None, "--meta", "-m", help="Replacement metadata as KEY=VALUE (repeatable)"),
) -> None:
    """Update the category, description or metadata of a tag."""
    store: TagStore = ctx.obj
    try:
        validate_tag_name(name)
        metadata = parse_metadata(meta)
        if category is None and description is None and metadata is None:
            raise ValidationError("Nothing to update; pass --category, --description or --meta")
    except ValidationError as exc:
        _fail("Error:", exc)

    try:
        tag = store.update(name, category=category, description=description, metadata=metadata)
    except TagStoreError as exc:
        _fail("Error updating tag:", exc)

    console.print(Text.assemble(("Success:", "green"), f' Tag "{name}" updated successfully'))
    _render_tags([tag], "Updated tag")


@app.command("delete")
def delete_tag(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the tag to delete"),
    force: bool = typer.Option(False, "--force", "-f", help="Force deletion without confirmation"),
) -> None:
    """Delete a tag."""
    store: TagStore = ctx.obj
    try:
        validate_tag_name(name)
    except ValidationError as exc:
        _fail("Error:", exc)

    try:
        if not store.exists(name):
            _fail("Warning:", f'Tag "{name}" does not exist', style="yellow")
    except TagStoreError as exc:
        _fail("Error deleting tag:", exc)

    if not force and not typer.confirm(f'Are you sure you want to delete the tag "{name}"?', default=False):
        console.print("[blue]Operation cancelled[/blue]")
        return

    try:
        store.delete(name)
    except TagStoreError as exc:
        _fail("Error deleting tag:", exc)

    console.print(Text.assemble(("Success:", "green"), f' Tag "{name}" deleted successfully'))


@app.command("search")
def search_tags(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search query"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Filter by category"),
    output: OutputFormat = typer.Option(OutputFormat.table, "--format", "-f", help="Output format"),
) -> None:
    """Search for tags by name or description."""
    store: TagStore = ctx.obj
    try:
        validate_query(query)
    except ValidationError as exc:
        _fail("Error:", exc)

    try:
        tags = store.search(query, category)
    except TagStoreError as exc:
        _fail("Error searching tags:", exc)

    if output is OutputFormat.json:
        _print_json(tags)
        return

    if not tags:
        console.print("[yellow]No tags found matching your search[/yellow]")
        console.print(Text(f'Search query: "{query}"', style="dim"))
        if category:
            console.print(Text(f'Category filter: "{category}"', style="dim"))
        return

    _render_tags(tags, f'Search results for "{query}":')
    console.print(Text(f"Found {len(tags)} matching tags", style="dim"))


@app.command("backup")
def backup_db(ctx: typer.Context) -> None:
    """Write a timestamped copy of the tag database."""
    store: TagStore = ctx.obj
    try:
        backup_path = store.backup()
    except TagStoreError as exc:
        _fail("Error backing up tags:", exc)

    console.print(Text.assemble(("Success:", "green"), " Backup written to ", (str(backup_path), "bold")))


if __name__ == "__main__":  # pragma: no cover
    app()
