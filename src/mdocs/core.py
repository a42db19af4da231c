"""Core business logic for mdocs.

This module contains the document operations shared by the MCP server and
the CLI.

Design principles:
- All functions are async for consistency
- The docs root is passed in explicitly; callers resolve it at call time
- Every caller-supplied path goes through paths.resolve_and_validate
- Writes replace the whole file atomically; there is no locking, so
  concurrent read-modify-write operations on one document race and the
  last write wins
"""

import logging
import posixpath
from collections.abc import Sequence
from pathlib import Path

from .config import DEFAULT_REQUIRED_FIELDS, INDEX_FILENAME, README_FILENAME
from .errors import DocsError, DocumentExistsError, DocumentNotFoundError, StorageError
from .frontmatter import build_frontmatter, serialize_document
from .health import check_health, find_broken_links, find_missing_fields, metadata_completeness
from .models import (
    BrokenLink,
    Document,
    Edit,
    EditResult,
    HealthCheckResult,
    LinkCheckResult,
    MetadataCheckResult,
    MissingField,
    NavigationSection,
)
from .navigation import build_navigation
from .parser import (
    ParseError,
    extract_markdown_links,
    is_internal_link,
    link_file_target,
    load_document,
    parse_document,
    relative_link,
    replace_link_targets,
    resolve_link_path,
    split_frontmatter,
)
from .patch import apply_edits
from .paths import relative_docs_path, resolve_and_validate
from .storage import delete_file, list_markdown_files, read_text, write_text_atomically

log = logging.getLogger(__name__)


def _resolve(root: Path, path: str) -> tuple[Path, str]:
    """Validate a caller path, returning (absolute_path, root_relative_path)."""
    abs_path = resolve_and_validate(root, path)
    rel_path = relative_docs_path(root, abs_path)
    return abs_path, "" if rel_path == "." else rel_path


def _load_all(root: Path, base_path: str, recursive: bool = True) -> list[Document]:
    """Load documents under base_path, skipping unreadable ones."""
    documents = []
    for rel_path in list_markdown_files(root, base_path, recursive=recursive):
        try:
            documents.append(load_document(root / rel_path, rel_path))
        except (StorageError, ParseError) as e:
            log.warning("Skipping %s: %s", rel_path, e)
    return documents


def _title_from_name(name: str) -> str:
    return name.replace("-", " ").replace("_", " ").strip().title() or name


# ─────────────────────────────────────────────────────────────────────────────
# Document CRUD
# ─────────────────────────────────────────────────────────────────────────────


async def read_document(root: Path, path: str) -> Document:
    """Read and parse a document.

    Raises:
        AccessDeniedError: If path escapes the docs root.
        DocumentNotFoundError: If the file does not exist.
        ParseError: If the front matter is not valid YAML.
    """
    abs_path, rel_path = _resolve(root, path)
    return load_document(abs_path, rel_path)


async def write_document(
    root: Path,
    path: str,
    content: str,
    create_directories: bool = True,
) -> str:
    """Write raw content to a document, replacing it if present.

    Returns:
        The document path relative to the docs root.
    """
    abs_path, rel_path = _resolve(root, path)
    write_text_atomically(abs_path, content, rel_path, create_directories=create_directories)
    log.info("Wrote %s", rel_path)
    return rel_path


async def delete_document(root: Path, path: str) -> str:
    abs_path, rel_path = _resolve(root, path)
    delete_file(abs_path, rel_path)
    log.info("Deleted %s", rel_path)
    return rel_path


async def edit_document(
    root: Path,
    path: str,
    edits: Sequence[Edit],
    dry_run: bool = False,
) -> EditResult:
    """Apply find-replace edits to a document body.

    The front matter block is carried over byte-for-byte; only the body is
    edited. When any edit cannot be located nothing is written.

    Args:
        root: Docs root.
        path: Document path.
        edits: Ordered edits, each applied to the output of the previous.
        dry_run: Compute the diff without writing.

    Returns:
        EditResult with a fenced unified diff of the body.

    Raises:
        AccessDeniedError: If path escapes the docs root.
        DocumentNotFoundError: If the document does not exist.
        EditNotFoundError: If an edit's old text is not found.
    """
    abs_path, rel_path = _resolve(root, path)
    raw = read_text(abs_path, rel_path)
    header, body = split_frontmatter(raw)

    new_body, diff = apply_edits(body, edits, path=rel_path)

    if not dry_run:
        write_text_atomically(abs_path, header + new_body, rel_path, create_directories=False)
        log.info("Applied %d edit(s) to %s", len(edits), rel_path)

    return EditResult(path=rel_path, diff=diff, edits_applied=len(edits), dry_run=dry_run)


# ─────────────────────────────────────────────────────────────────────────────
# Listing, search and navigation
# ─────────────────────────────────────────────────────────────────────────────


async def list_documents(root: Path, base_path: str = "", recursive: bool = False) -> list[str]:
    """List document paths under base_path (sorted, relative to the root)."""
    _, rel_base = _resolve(root, base_path)
    return list_markdown_files(root, rel_base, recursive=recursive)


async def search_documents(root: Path, query: str, base_path: str = "") -> list[str]:
    """Case-insensitive substring search over front matter and body.

    Unreadable documents are skipped. An empty query matches everything.
    """
    _, rel_base = _resolve(root, base_path)
    needle = query.lower()

    matches = []
    for rel_path in list_markdown_files(root, rel_base, recursive=True):
        try:
            raw = read_text(root / rel_path, rel_path)
        except StorageError as e:
            log.warning("Skipping %s in search: %s", rel_path, e)
            continue
        if needle in raw.lower():
            matches.append(rel_path)
    return matches


async def generate_navigation(root: Path, base_path: str = "") -> list[NavigationSection]:
    _, rel_base = _resolve(root, base_path)
    return build_navigation(root, rel_base)


async def update_navigation_order(root: Path, path: str, order: float) -> Document:
    """Set a document's `order` front matter field.

    The front matter is re-serialized; the body is untouched.
    """
    abs_path, rel_path = _resolve(root, path)
    document = load_document(abs_path, rel_path)

    front_matter = dict(document.front_matter)
    front_matter["order"] = int(order) if float(order).is_integer() else order

    write_text_atomically(
        abs_path,
        serialize_document(front_matter, document.body),
        rel_path,
        create_directories=False,
    )
    log.info("Set navigation order of %s to %s", rel_path, front_matter["order"])
    return Document(path=rel_path, front_matter=front_matter, body=document.body)


# ─────────────────────────────────────────────────────────────────────────────
# Folders and sections
# ─────────────────────────────────────────────────────────────────────────────


async def create_folder(root: Path, path: str, create_readme: bool = True) -> str:
    """Create a directory, optionally with a README.md stub.

    An existing directory is fine; an existing README is never overwritten.

    Returns:
        The directory path relative to the docs root.
    """
    abs_path, rel_path = _resolve(root, path)
    if abs_path.exists() and not abs_path.is_dir():
        raise DocumentExistsError(rel_path)

    try:
        abs_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(f"Error creating {rel_path}: {e.strerror or e}", path=rel_path) from e

    if create_readme:
        readme = abs_path / README_FILENAME
        if not readme.exists():
            title = _title_from_name(abs_path.name)
            header = build_frontmatter(
                {
                    "title": title,
                    "description": f"{title} documentation",
                    "status": "draft",
                }
            )
            write_text_atomically(
                readme,
                f"{header}\n# {title}\n",
                relative_docs_path(root, readme),
            )

    log.info("Created folder %s", rel_path)
    return rel_path


async def create_section(root: Path, title: str, path: str, order: float | None = None) -> str:
    """Create a navigation section: a directory with an index.md.

    Returns:
        The index document path relative to the docs root.

    Raises:
        DocumentExistsError: If the section already has an index.md.
    """
    abs_dir, rel_dir = _resolve(root, path)
    index_path = abs_dir / INDEX_FILENAME
    rel_index = posixpath.join(rel_dir, INDEX_FILENAME)

    if index_path.exists():
        raise DocumentExistsError(rel_index)

    front_matter: dict = {
        "title": title,
        "description": f"{title} section",
        "status": "draft",
    }
    if order is not None:
        front_matter["order"] = int(order) if float(order).is_integer() else order

    write_text_atomically(index_path, serialize_document(front_matter, f"\n# {title}\n"), rel_index)
    log.info("Created section %s", rel_index)
    return rel_index


# ─────────────────────────────────────────────────────────────────────────────
# Move / rename
# ─────────────────────────────────────────────────────────────────────────────


def _rewrite_moved_document(body: str, old_path: str, new_path: str) -> tuple[str, int]:
    """Keep the moved document's own relative links pointing at the same files."""

    def replace(link):
        target = link.target
        if not is_internal_link(target) or target.startswith("/"):
            return None
        resolved = resolve_link_path(old_path, target)
        if resolved is None:
            return None
        suffix = target[len(link_file_target(target)):]
        return relative_link(new_path, resolved) + suffix

    return replace_link_targets(body, replace)


def _rewrite_references(document: Document, old_path: str, new_path: str) -> tuple[str, int]:
    """Point links to old_path in another document at new_path."""

    def replace(link):
        target = link.target
        if not is_internal_link(target):
            return None
        if resolve_link_path(document.path, target) != old_path:
            return None
        suffix = target[len(link_file_target(target)):]
        if target.startswith("/"):
            return "/" + new_path + suffix
        return relative_link(document.path, new_path) + suffix

    return replace_link_targets(document.body, replace)


async def move_document(
    root: Path,
    source: str,
    destination: str,
    update_references: bool = True,
) -> dict:
    """Move a document, optionally updating links that point at it.

    Args:
        root: Docs root.
        source: Current document path.
        destination: New document path. Missing parent directories are created.
        update_references: Rewrite markdown links in other documents (and
            relative links in the moved document itself).

    Returns:
        Dict with source, destination and links_updated.

    Raises:
        DocumentNotFoundError: If source does not exist.
        DocumentExistsError: If destination already exists.
    """
    source_abs, source_rel = _resolve(root, source)
    dest_abs, dest_rel = _resolve(root, destination)

    if not source_abs.is_file():
        raise DocumentNotFoundError(source_rel)
    if dest_abs.exists():
        raise DocumentExistsError(dest_rel)

    raw = read_text(source_abs, source_rel)
    links_updated = 0

    if update_references:
        header, body = split_frontmatter(raw)
        body, count = _rewrite_moved_document(body, source_rel, dest_rel)
        raw = header + body
        links_updated += count

    write_text_atomically(dest_abs, raw, dest_rel)
    delete_file(source_abs, source_rel)

    if update_references:
        for rel_path in list_markdown_files(root, "", recursive=True):
            if rel_path == dest_rel:
                continue
            try:
                other_raw = read_text(root / rel_path, rel_path)
                document = parse_document(rel_path, other_raw)
            except (StorageError, ParseError) as e:
                log.warning("Not updating links in %s: %s", rel_path, e)
                continue

            new_body, count = _rewrite_references(document, source_rel, dest_rel)
            if count:
                header, _ = split_frontmatter(other_raw)
                write_text_atomically(root / rel_path, header + new_body, rel_path)
                links_updated += count

    log.info("Moved %s -> %s (%d link(s) updated)", source_rel, dest_rel, links_updated)
    return {"source": source_rel, "destination": dest_rel, "links_updated": links_updated}


async def rename_document(
    root: Path,
    path: str,
    new_name: str,
    update_references: bool = True,
) -> dict:
    """Rename a document within its directory.

    A new name without an extension keeps the document's ".md".
    """
    if not new_name or "/" in new_name or "\\" in new_name or new_name in (".", ".."):
        raise DocsError(f"Invalid document name: {new_name!r}", path=path)

    _, rel_path = _resolve(root, path)
    if not posixpath.splitext(new_name)[1]:
        new_name += posixpath.splitext(rel_path)[1]

    destination = posixpath.join(posixpath.dirname(rel_path), new_name)
    return await move_document(root, rel_path, destination, update_references=update_references)


# ─────────────────────────────────────────────────────────────────────────────
# Health and validation
# ─────────────────────────────────────────────────────────────────────────────


async def check_documentation_health(
    root: Path,
    base_path: str = "",
    required_fields: Sequence[str] | None = None,
    tolerance_mode: bool = True,
) -> HealthCheckResult:
    """Run the health scan over base_path.

    A missing or empty directory yields a perfect score. A base_path outside
    the docs root still raises AccessDeniedError.
    """
    _, rel_base = _resolve(root, base_path)
    return check_health(
        root,
        rel_base,
        required_fields=DEFAULT_REQUIRED_FIELDS if required_fields is None else tuple(required_fields),
        tolerance_mode=tolerance_mode,
    )


async def validate_links(root: Path, base_path: str = "", recursive: bool = True) -> LinkCheckResult:
    """Check every internal link in the documents under base_path."""
    _, rel_base = _resolve(root, base_path)
    documents = _load_all(root, rel_base, recursive=recursive)

    links_checked = 0
    broken: list[BrokenLink] = []
    for document in documents:
        links_checked += sum(1 for link in extract_markdown_links(document.body) if is_internal_link(link.target))
        for target, text in find_broken_links(root, document):
            broken.append(BrokenLink(path=document.path, link=target, text=text))

    return LinkCheckResult(
        documents_checked=len(documents),
        links_checked=links_checked,
        broken_links=broken,
    )


async def validate_metadata(
    root: Path,
    base_path: str = "",
    required_fields: Sequence[str] | None = None,
) -> MetadataCheckResult:
    """Report required front matter fields missing under base_path."""
    _, rel_base = _resolve(root, base_path)
    fields = list(DEFAULT_REQUIRED_FIELDS) if required_fields is None else list(required_fields)
    documents = _load_all(root, rel_base)

    missing: list[MissingField] = []
    for document in documents:
        for field in find_missing_fields(document, fields):
            missing.append(MissingField(path=document.path, field=field))

    checked = len(documents) * len(fields)
    return MetadataCheckResult(
        documents_checked=len(documents),
        required_fields=fields,
        completeness=metadata_completeness(checked - len(missing), checked),
        missing=missing,
    )
