"""Filesystem access for documents.

Thin wrappers that turn OSError into StorageError (with the offending path)
and the document lister used by list, search, navigation and health.
"""

import logging
import os
import tempfile
from pathlib import Path

from .config import MARKDOWN_EXTENSION
from .errors import DocumentNotFoundError, StorageError

log = logging.getLogger(__name__)


def read_text(path: Path, display_path: str | None = None) -> str:
    """Read a UTF-8 document.

    Raises:
        DocumentNotFoundError: If the file does not exist.
        StorageError: If the file cannot be read or decoded.
    """
    shown = display_path or str(path)
    if not path.exists():
        raise DocumentNotFoundError(shown)
    if not path.is_file():
        raise StorageError(f"Path is not a file: {shown}", path=shown)
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise StorageError(f"File is not valid UTF-8: {shown}", path=shown) from e
    except OSError as e:
        raise StorageError(f"Error reading {shown}: {e.strerror or e}", path=shown) from e


def write_text_atomically(
    path: Path,
    text: str,
    display_path: str | None = None,
    create_directories: bool = True,
) -> None:
    """Write a document via a temp file in the same directory and os.replace.

    Readers never observe a half-written file. There is no locking: two
    concurrent writers race and the last replace wins.

    Raises:
        StorageError: If the directory is missing (and not created) or the
            write fails.
    """
    shown = display_path or str(path)
    parent = path.parent

    try:
        if create_directories:
            parent.mkdir(parents=True, exist_ok=True)
        elif not parent.is_dir():
            raise StorageError(f"Parent directory does not exist: {shown}", path=shown)

        fd, tmp_name = tempfile.mkstemp(dir=parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise StorageError(f"Error writing {shown}: {e.strerror or e}", path=shown) from e


def delete_file(path: Path, display_path: str | None = None) -> None:
    shown = display_path or str(path)
    if not path.exists():
        raise DocumentNotFoundError(shown)
    if not path.is_file():
        raise StorageError(f"Path is not a file: {shown}", path=shown)
    try:
        path.unlink()
    except OSError as e:
        raise StorageError(f"Error deleting {shown}: {e.strerror or e}", path=shown) from e


def list_markdown_files(root: Path, base_path: str = "", recursive: bool = True) -> list[str]:
    """List markdown documents under root/base_path.

    Hidden files and anything inside hidden directories (".git", ".cache")
    are skipped. A missing base directory yields an empty list.

    Args:
        root: Docs root. Returned paths are relative to it.
        base_path: Subdirectory to list, relative to the root.
        recursive: Descend into subdirectories.

    Returns:
        Sorted POSIX paths relative to root, each ending in ".md".
    """
    root = Path(root).resolve()
    base = (root / base_path).resolve() if base_path else root

    if not base.is_dir():
        return []

    pattern = f"*{MARKDOWN_EXTENSION}"
    candidates = base.rglob(pattern) if recursive else base.glob(pattern)

    results = []
    for file_path in candidates:
        if not file_path.is_file():
            continue
        rel_parts = file_path.relative_to(base).parts
        if any(part.startswith(".") for part in rel_parts):
            continue
        results.append(file_path.relative_to(root).as_posix())

    return sorted(results)
