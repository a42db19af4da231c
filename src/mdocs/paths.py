"""Path validation for the docs root.

Every tool resolves caller-supplied paths through resolve_and_validate before
touching the filesystem. A path that resolves (after `..` segments and
symlinks) outside the configured root is rejected.
"""

from pathlib import Path

from .errors import AccessDeniedError


def resolve_and_validate(root: Path, requested: str | Path) -> Path:
    """Resolve a requested path against the docs root.

    Args:
        root: Configured docs root.
        requested: Path relative to the root, or an absolute path.
                   "~" is expanded. An empty path means the root itself.

    Returns:
        Absolute, resolved path guaranteed to be the root or inside it.

    Raises:
        AccessDeniedError: If the resolved path escapes the root.
    """
    root_resolved = Path(root).expanduser().resolve()

    candidate = Path(requested).expanduser()
    if not candidate.is_absolute():
        candidate = root_resolved / candidate

    resolved = candidate.resolve()

    if resolved != root_resolved and root_resolved not in resolved.parents:
        raise AccessDeniedError(str(requested))

    return resolved


def relative_docs_path(root: Path, file_path: Path) -> str:
    """Return file_path relative to the docs root, with POSIX separators."""
    return file_path.resolve().relative_to(Path(root).resolve()).as_posix()
