"""Navigation tree generation from the directory structure.

Each directory holding documents becomes a section. The directory's own
index.md supplies the section title and order; other documents become items
ordered by their `order` front matter field, then title. Names starting with
"_" or "." are drafts/internal and stay out of the navigation.
"""

import logging
from pathlib import Path

from .config import DEFAULT_NAV_ORDER, INDEX_FILENAME, MARKDOWN_EXTENSION
from .errors import StorageError
from .models import Document, NavigationItem, NavigationSection
from .parser import ParseError, load_document

log = logging.getLogger(__name__)


def _order_of(document: Document) -> float:
    value = document.front_matter.get("order")
    if isinstance(value, bool):
        return DEFAULT_NAV_ORDER
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    return DEFAULT_NAV_ORDER


def _title_of(document: Document, fallback: str) -> str:
    title = document.front_matter.get("title")
    if isinstance(title, str) and title.strip():
        return title
    return fallback


def _is_hidden(name: str) -> bool:
    return name.startswith(".") or name.startswith("_")


def _load(root: Path, file_path: Path) -> Document | None:
    rel_path = file_path.relative_to(root).as_posix()
    try:
        return load_document(file_path, rel_path)
    except (StorageError, ParseError) as e:
        log.warning("Skipping %s in navigation: %s", rel_path, e)
        return None


def _collect_sections(root: Path, directory: Path, sections: list[NavigationSection]) -> None:
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        log.warning("Could not read directory %s: %s", directory, e)
        return

    index_doc: Document | None = None
    items: list[NavigationItem] = []

    for entry in entries:
        if _is_hidden(entry.name):
            continue

        if entry.is_dir():
            # Symlinked directories are not descended, matching list_markdown_files
            if entry.is_symlink():
                log.debug("Skipping symlinked directory %s", entry)
                continue
            _collect_sections(root, entry, sections)
            continue

        if not entry.is_file() or entry.suffix != MARKDOWN_EXTENSION:
            continue

        document = _load(root, entry)
        if document is None:
            continue

        if entry.name == INDEX_FILENAME:
            index_doc = document
            continue

        items.append(
            NavigationItem(
                title=_title_of(document, entry.stem),
                path=document.path,
                order=_order_of(document),
            )
        )

    if not items and index_doc is None:
        return

    items.sort(key=lambda item: (item.order, item.title))

    rel_dir = directory.relative_to(root).as_posix()
    dir_name = directory.name if rel_dir != "." else "Documentation"

    if index_doc is not None:
        section = NavigationSection(
            title=_title_of(index_doc, dir_name),
            path=index_doc.path,
            order=_order_of(index_doc),
            items=items,
        )
    else:
        section = NavigationSection(title=dir_name, path=None, order=DEFAULT_NAV_ORDER, items=items)

    sections.append(section)


def build_navigation(root: Path, base_path: str = "") -> list[NavigationSection]:
    """Build the navigation sections for root/base_path.

    Args:
        root: Docs root; all paths in the result are relative to it.
        base_path: Subdirectory to start from.

    Returns:
        Sections sorted by (order, title). Empty if the directory is missing.
    """
    root = Path(root).resolve()
    start = (root / base_path).resolve() if base_path else root

    if not start.is_dir():
        return []

    sections: list[NavigationSection] = []
    _collect_sections(root, start, sections)
    sections.sort(key=lambda section: (section.order, section.title))
    return sections


def navigation_paths(sections: list[NavigationSection]) -> set[str]:
    """All document paths reachable from the navigation tree."""
    paths: set[str] = set()
    for section in sections:
        if section.path:
            paths.add(section.path)
        for item in section.items:
            paths.add(item.path)
    return paths
