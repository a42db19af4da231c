"""Configuration management for mdocs.

This module contains all configurable constants for the documentation service.
Magic numbers are documented here rather than scattered throughout the codebase.
"""

import os
from dataclasses import dataclass
from pathlib import Path


class ConfigurationError(Exception):
    """Raised when the docs root is misconfigured."""

    pass


# ─────────────────────────────────────────────────────────────────────────────
# Documents
# ─────────────────────────────────────────────────────────────────────────────

# Only files with this suffix are treated as documents
MARKDOWN_EXTENSION = ".md"

# A directory's index document supplies the section title/order in navigation
INDEX_FILENAME = "index.md"

# Default file created by create_folder
README_FILENAME = "README.md"

# Navigation order for documents without an explicit `order` field
DEFAULT_NAV_ORDER = 999

# Default docs root when MDOCS_ROOT is not set (relative to cwd)
DEFAULT_DOCS_DIRNAME = "docs"


# ─────────────────────────────────────────────────────────────────────────────
# Health scoring
# ─────────────────────────────────────────────────────────────────────────────

# Front matter fields every document should carry
DEFAULT_REQUIRED_FIELDS: tuple[str, ...] = ("title", "description", "status")

# Link targets with these prefixes are never checked on disk
EXTERNAL_LINK_PREFIXES: tuple[str, ...] = ("http://", "https://", "mailto:", "#")

# Deduction-based score: maximum points lost per category
METADATA_MAX_DEDUCTION = 30
BROKEN_LINK_POINTS = 2  # per broken link
BROKEN_LINK_MAX_DEDUCTION = 20
ORPHAN_POINTS = 5  # per orphaned document
ORPHAN_MAX_DEDUCTION = 20

# Tolerance mode caps each category and floors the final score
TOLERANCE_METADATA_CAP = 10
TOLERANCE_BROKEN_LINK_CAP = 5
TOLERANCE_ORPHAN_CAP = 5
TOLERANCE_SCORE_FLOOR = 80


# ─────────────────────────────────────────────────────────────────────────────
# Diff rendering
# ─────────────────────────────────────────────────────────────────────────────

DIFF_CONTEXT_LINES = 3
MIN_FENCE_LENGTH = 3


# ─────────────────────────────────────────────────────────────────────────────
# Root discovery
# ─────────────────────────────────────────────────────────────────────────────


def get_docs_root() -> Path:
    """Get the documentation root directory.

    Discovery order:
    1. MDOCS_ROOT environment variable (explicit override)
    2. ./docs relative to the current working directory

    The directory does not have to exist yet; read-only operations treat a
    missing root as an empty documentation set.

    Raises:
        ConfigurationError: If the root exists but is not a directory.
    """
    root = os.environ.get("MDOCS_ROOT")
    path = Path(root).expanduser() if root else Path.cwd() / DEFAULT_DOCS_DIRNAME

    if path.exists() and not path.is_dir():
        raise ConfigurationError(f"Docs root is not a directory: {path}")

    return path.resolve()


@dataclass(frozen=True)
class DocsConfig:
    """Explicit configuration passed to long-lived components."""

    root: Path
    required_fields: tuple[str, ...] = DEFAULT_REQUIRED_FIELDS
    tolerance_mode: bool = True

    @classmethod
    def from_env(cls) -> "DocsConfig":
        return cls(root=get_docs_root())
