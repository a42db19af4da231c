#!/usr/bin/env python3
"""
mdocs: CLI for a markdown documentation directory

Usage:
    mdocs serve                      # Run the MCP server on stdio
    mdocs health                     # Score documentation health
    mdocs nav                        # Show the navigation tree
    mdocs list --recursive           # List documents
    mdocs read guide/intro.md        # Print a document
    mdocs edit guide/intro.md --old "foo" --new "bar"
"""

from __future__ import annotations

import asyncio
import difflib
import json
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn

import click
from click.exceptions import ClickException, UsageError

from . import __version__ as MDOCS_VERSION


def run_async(coro):
    """Run async function synchronously."""
    return asyncio.run(coro)


def output(data, as_json: bool = False):
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(data)


def _read_text_option(value: str | None, file_path: Path | None, name: str) -> str:
    """Resolve a --x / --x-file pair to text. Exactly one must be given."""
    if value is not None and file_path is not None:
        raise UsageError(f"Use either --{name} or --{name}-file, not both")
    if file_path is not None:
        return file_path.read_text(encoding="utf-8")
    if value is None:
        raise UsageError(f"Missing --{name} or --{name}-file")
    return value


# ─────────────────────────────────────────────────────────────────────────────
# Error handling
# ─────────────────────────────────────────────────────────────────────────────


def _error_code_for(error: Exception) -> str:
    """Error code for exceptions that are not DocsErrors."""
    from .config import ConfigurationError
    from .parser import ParseError

    if isinstance(error, ParseError):
        return "PARSE_ERROR"
    if isinstance(error, ConfigurationError):
        return "CONFIGURATION_ERROR"
    if isinstance(error, UsageError):
        return "INVALID_ARGUMENT"
    if isinstance(error, OSError):
        return "STORAGE_ERROR"
    return "UNKNOWN_ERROR"


def _handle_error(
    ctx: click.Context,
    error: Exception,
    exit_code: int = 1,
) -> NoReturn:
    """Handle an error with optional JSON output.

    If --json-errors is enabled, outputs structured JSON error.
    Otherwise, outputs human-readable error message.
    """
    from .errors import DocsError, format_error_json

    json_errors = ctx.obj.get("json_errors", False) if ctx.obj else False

    if isinstance(error, DocsError):
        if json_errors:
            click.echo(error.to_json(), err=True)
        else:
            click.echo(f"Error: {error.message}", err=True)
    else:
        message = error.format_message() if isinstance(error, ClickException) else str(error)
        if json_errors:
            click.echo(format_error_json(_error_code_for(error), message), err=True)
        else:
            click.echo(f"Error: {message}", err=True)

    sys.exit(exit_code)


def _run(ctx: click.Context, coro_factory):
    """Run a core coroutine, routing expected errors through _handle_error.

    `coro_factory` receives the docs root and returns the coroutine to run.
    """
    from .config import ConfigurationError, get_docs_root
    from .errors import DocsError
    from .parser import ParseError

    try:
        root = get_docs_root()
        return run_async(coro_factory(root))
    except (DocsError, ParseError, ConfigurationError, OSError) as e:
        _handle_error(ctx, e)


class JsonErrorGroup(click.Group):
    """Click group that formats usage errors as JSON when --json-errors is set.

    Also suggests the closest command name for typos.
    """

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except UsageError as e:
            cmd_name = args[0] if args else ""
            if cmd_name and "No such command" in str(e):
                matches = difflib.get_close_matches(cmd_name, self.list_commands(ctx), n=1, cutoff=0.6)
                if matches:
                    raise UsageError(f"No such command '{cmd_name}'. Did you mean '{matches[0]}'?")
            raise

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except UsageError as e:
            if ctx.params.get("json_errors"):
                from .errors import format_error_json

                click.echo(format_error_json("INVALID_ARGUMENT", e.format_message()), err=True)
                sys.exit(2)
            raise


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI Group
# ─────────────────────────────────────────────────────────────────────────────


@click.group(cls=JsonErrorGroup)
@click.version_option(version=MDOCS_VERSION, prog_name="mdocs")
@click.option(
    "--docs-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Documentation root (default: $MDOCS_ROOT or ./docs)",
)
@click.option(
    "--json-errors",
    "json_errors",
    is_flag=True,
    help="Output errors as JSON (for programmatic use)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    envvar="MDOCS_QUIET",
    help="Suppress warnings, show only errors and essential output",
)
@click.pass_context
def cli(ctx: click.Context, docs_dir: Path | None, json_errors: bool, quiet: bool):
    """mdocs: manage a markdown documentation directory.

    \b
    Quick start:
      mdocs serve                         # MCP server for agents (stdio)
      mdocs health                        # Score metadata, links, navigation
      mdocs nav                           # Navigation tree
      mdocs search "install"              # Substring search

    \b
    Edit content:
      mdocs edit guide.md --old "foo" --new "bar" --dry-run

    \b
    For programmatic error handling:
      mdocs --json-errors read missing.md
    """
    from ._logging import set_quiet_mode

    ctx.ensure_object(dict)
    ctx.obj["json_errors"] = json_errors
    ctx.obj["quiet"] = quiet

    # The server resolves the root from the environment on every call
    if docs_dir is not None:
        os.environ["MDOCS_ROOT"] = str(docs_dir)

    if quiet:
        set_quiet_mode(True)


# ─────────────────────────────────────────────────────────────────────────────
# Serve Command
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.pass_context
def serve(ctx: click.Context):
    """Run the MCP server over stdio."""
    from .config import ConfigurationError, get_docs_root
    from .server import mcp

    try:
        get_docs_root()
    except ConfigurationError as exc:
        _handle_error(ctx, exc)

    mcp.run()


# ─────────────────────────────────────────────────────────────────────────────
# Health Command
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.option("--base-path", default="", help="Subdirectory to check")
@click.option(
    "--required-field",
    "required_fields",
    multiple=True,
    help="Required front matter field (repeatable; default: title, description, status)",
)
@click.option("--strict", is_flag=True, help="Disable tolerance mode (full deductions, no score floor)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def health(
    ctx: click.Context,
    base_path: str,
    required_fields: Sequence[str],
    strict: bool,
    as_json: bool,
):
    """Audit documentation for missing metadata, broken links and orphans.

    \b
    Examples:
      mdocs health
      mdocs health --strict --json
      mdocs health --required-field title --required-field owner
    """
    from .core import check_documentation_health

    result = _run(
        ctx,
        lambda root: check_documentation_health(
            root,
            base_path,
            required_fields=list(required_fields) or None,
            tolerance_mode=not strict,
        ),
    )

    if as_json:
        output(result.model_dump(), as_json=True)
    else:
        click.echo(result.report)


# ─────────────────────────────────────────────────────────────────────────────
# Navigation / listing
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.option("--base-path", default="", help="Subdirectory to start from")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def nav(ctx: click.Context, base_path: str, as_json: bool):
    """Show the navigation tree."""
    from .core import generate_navigation

    sections = _run(ctx, lambda root: generate_navigation(root, base_path))

    if as_json:
        output([section.model_dump() for section in sections], as_json=True)
        return

    if not sections:
        click.echo("No documents found.")
        return

    for section in sections:
        suffix = f" ({section.path})" if section.path else ""
        click.echo(f"{section.title}{suffix}")
        for item in section.items:
            click.echo(f"  - {item.title} ({item.path})")


@cli.command("list")
@click.option("--base-path", default="", help="Subdirectory to list")
@click.option("--recursive", "-r", is_flag=True, help="Include subdirectories")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_cmd(ctx: click.Context, base_path: str, recursive: bool, as_json: bool):
    """List documents."""
    from .core import list_documents

    paths = _run(ctx, lambda root: list_documents(root, base_path, recursive=recursive))

    if as_json:
        output(paths, as_json=True)
    elif paths:
        click.echo("\n".join(paths))
    else:
        click.echo("No documents found.")


@cli.command()
@click.argument("query")
@click.option("--base-path", default="", help="Subdirectory to search")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def search(ctx: click.Context, query: str, base_path: str, as_json: bool):
    """Find documents containing QUERY (case-insensitive)."""
    from .core import search_documents

    paths = _run(ctx, lambda root: search_documents(root, query, base_path))

    if as_json:
        output(paths, as_json=True)
    elif paths:
        click.echo("\n".join(paths))
    else:
        click.echo(f"No documents match '{query}'.")


# ─────────────────────────────────────────────────────────────────────────────
# Read / edit
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.argument("path")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def read(ctx: click.Context, path: str, as_json: bool):
    """Print a document."""
    from .core import read_document
    from .frontmatter import serialize_document

    document = _run(ctx, lambda root: read_document(root, path))

    if as_json:
        output(document.model_dump(), as_json=True)
    else:
        click.echo(serialize_document(document.front_matter, document.body), nl=False)


@cli.command()
@click.argument("path")
@click.option("--old", "old_text", help="Text to replace")
@click.option("--old-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Read text to replace from a file")
@click.option("--new", "new_text", help="Replacement text")
@click.option("--new-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Read replacement text from a file")
@click.option("--dry-run", is_flag=True, help="Show the diff without writing")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def edit(
    ctx: click.Context,
    path: str,
    old_text: str | None,
    old_file: Path | None,
    new_text: str | None,
    new_file: Path | None,
    dry_run: bool,
    as_json: bool,
):
    """Replace text in a document body and show the diff.

    Whitespace differences in indentation are tolerated when the exact text
    is not found.

    \b
    Examples:
      mdocs edit guide.md --old "teh" --new "the"
      mdocs edit guide.md --old-file before.txt --new-file after.txt --dry-run
    """
    from .core import edit_document
    from .models import Edit

    try:
        old = _read_text_option(old_text, old_file, "old")
        new = _read_text_option(new_text, new_file, "new")
    except UsageError as e:
        _handle_error(ctx, e, exit_code=2)

    edits = [Edit(old_text=old, new_text=new)]
    result = _run(ctx, lambda root: edit_document(root, path, edits, dry_run=dry_run))

    if as_json:
        output(result.model_dump(), as_json=True)
        return

    if result.diff:
        click.echo(result.diff, nl=False)
    else:
        click.echo("No changes.")
    if dry_run:
        click.echo("(dry run: nothing written)")


# ─────────────────────────────────────────────────────────────────────────────
# Init Command
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.option("--create-readme/--no-create-readme", default=True, help="Add a README.md stub")
@click.pass_context
def init(ctx: click.Context, create_readme: bool):
    """Create the documentation directory."""
    from .config import get_docs_root
    from .core import create_folder

    _run(ctx, lambda root: create_folder(root, "", create_readme=create_readme))
    click.echo(f"Initialized documentation at {get_docs_root()}")


def main():
    """Entry point for mdocs CLI."""
    from ._logging import configure_logging

    configure_logging()
    cli()


if __name__ == "__main__":
    main()
