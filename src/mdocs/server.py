"""FastMCP server for mdocs.

This module provides MCP protocol wrappers around the core business logic.
All actual logic lives in core.py - this file just handles MCP serialization
and resolves the docs root for each call.
"""

from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from . import core
from .config import DocsConfig, get_docs_root
from .models import (
    Document,
    Edit,
    EditResult,
    HealthCheckResult,
    LinkCheckResult,
    MetadataCheckResult,
    NavigationSection,
)


mcp = FastMCP(
    name="mdocs",
    instructions=(
        "Markdown documentation tools. Paths are relative to the docs root. "
        "Use edit_document for targeted changes (dry_run previews a diff) and "
        "check_documentation_health for metadata, link and navigation problems."
    ),
)


# ─────────────────────────────────────────────────────────────────────────────
# Documents
# ─────────────────────────────────────────────────────────────────────────────


@mcp.tool(
    name="read_document",
    description="Read a markdown document, returning its front matter and body.",
)
async def read_document_tool(path: str) -> Document:
    return await core.read_document(get_docs_root(), path)


@mcp.tool(
    name="write_document",
    description="Create or overwrite a markdown document with the given raw content (front matter included).",
)
async def write_document_tool(path: str, content: str, create_directories: bool = True) -> str:
    rel_path = await core.write_document(get_docs_root(), path, content, create_directories)
    return f"Successfully wrote {rel_path}"


@mcp.tool(
    name="edit_document",
    description=(
        "Apply line-based edits to a document body. Each edit replaces old_text with "
        "new_text; whitespace differences are tolerated. Returns a git-style diff. "
        "Use dry_run to preview without writing."
    ),
)
async def edit_document_tool(
    path: str,
    edits: Annotated[list[Edit], Field(description="Ordered edits, each with old_text and new_text")],
    dry_run: bool = False,
) -> EditResult:
    return await core.edit_document(get_docs_root(), path, edits, dry_run=dry_run)


@mcp.tool(
    name="delete_document",
    description="Delete a markdown document.",
)
async def delete_document_tool(path: str) -> str:
    rel_path = await core.delete_document(get_docs_root(), path)
    return f"Successfully deleted {rel_path}"


@mcp.tool(
    name="list_documents",
    description="List markdown documents under a directory.",
)
async def list_documents_tool(base_path: str = "", recursive: bool = False) -> list[str]:
    return await core.list_documents(get_docs_root(), base_path, recursive=recursive)


@mcp.tool(
    name="search_documents",
    description="Find documents whose front matter or body contains the query (case-insensitive).",
)
async def search_documents_tool(query: str, base_path: str = "") -> list[str]:
    return await core.search_documents(get_docs_root(), query, base_path)


# ─────────────────────────────────────────────────────────────────────────────
# Navigation and structure
# ─────────────────────────────────────────────────────────────────────────────


@mcp.tool(
    name="generate_documentation_navigation",
    description="Build the navigation tree (sections and items) from the directory structure.",
)
async def generate_navigation_tool(base_path: str = "") -> list[NavigationSection]:
    return await core.generate_navigation(get_docs_root(), base_path)


@mcp.tool(
    name="create_documentation_folder",
    description="Create a folder, optionally with a README.md stub.",
)
async def create_folder_tool(path: str, create_readme: bool = True) -> str:
    rel_path = await core.create_folder(get_docs_root(), path, create_readme=create_readme)
    return f"Successfully created folder {rel_path}"


@mcp.tool(
    name="move_document",
    description="Move a document to a new path, updating links that reference it.",
)
async def move_document_tool(
    source_path: str,
    destination_path: str,
    update_references: bool = True,
) -> dict:
    return await core.move_document(
        get_docs_root(),
        source_path,
        destination_path,
        update_references=update_references,
    )


@mcp.tool(
    name="rename_document",
    description="Rename a document within its folder, updating links that reference it.",
)
async def rename_document_tool(path: str, new_name: str, update_references: bool = True) -> dict:
    return await core.rename_document(
        get_docs_root(),
        path,
        new_name,
        update_references=update_references,
    )


@mcp.tool(
    name="update_documentation_navigation_order",
    description="Set a document's navigation order (the `order` front matter field).",
)
async def update_navigation_order_tool(path: str, order: float) -> Document:
    return await core.update_navigation_order(get_docs_root(), path, order)


@mcp.tool(
    name="create_documentation_section",
    description="Create a navigation section: a folder with an index.md.",
)
async def create_section_tool(title: str, path: str, order: float | None = None) -> str:
    rel_path = await core.create_section(get_docs_root(), title, path, order)
    return f"Successfully created section {rel_path}"


# ─────────────────────────────────────────────────────────────────────────────
# Health and validation
# ─────────────────────────────────────────────────────────────────────────────


@mcp.tool(
    name="check_documentation_health",
    description=(
        "Score documentation health (0-100) from metadata completeness, broken links "
        "and documents missing from navigation. Tolerance mode is on by default."
    ),
)
async def check_documentation_health_tool(
    base_path: str = "",
    required_fields: list[str] | None = None,
    tolerance_mode: bool | None = None,
) -> HealthCheckResult:
    config = DocsConfig.from_env()
    if required_fields is None:
        required_fields = list(config.required_fields)
    if tolerance_mode is None:
        tolerance_mode = config.tolerance_mode
    return await core.check_documentation_health(
        config.root,
        base_path,
        required_fields=required_fields,
        tolerance_mode=tolerance_mode,
    )


@mcp.tool(
    name="validate_documentation_links",
    description="Report internal markdown links whose targets do not exist.",
)
async def validate_links_tool(base_path: str = "", recursive: bool = True) -> LinkCheckResult:
    return await core.validate_links(get_docs_root(), base_path, recursive=recursive)


@mcp.tool(
    name="validate_documentation_metadata",
    description="Report documents missing required front matter fields.",
)
async def validate_metadata_tool(
    base_path: str = "",
    required_fields: list[str] | None = None,
) -> MetadataCheckResult:
    return await core.validate_metadata(get_docs_root(), base_path, required_fields)


def main():
    """Run the MCP server."""
    import logging
    from ._logging import configure_logging

    configure_logging()
    log = logging.getLogger(__name__)
    log.info("Serving documentation from %s", get_docs_root())

    mcp.run()


if __name__ == "__main__":
    main()
