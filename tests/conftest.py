"""Shared test fixtures for the mdocs test suite.

Design:
- docs_root: isolated docs directory, exported as MDOCS_ROOT
- create_doc: writes a document with optional front matter
- runner: CliRunner for CLI tests
- Async tests use pytest-asyncio with function scope
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


def write_doc(root: Path, rel_path: str, body: str = "", **front_matter) -> Path:
    """Write a markdown document under root.

    Keyword arguments become front matter; lists are written in block style.
    No keyword arguments means no front matter block at all.
    """
    lines = []
    if front_matter:
        lines.append("---")
        for key, value in front_matter.items():
            if isinstance(value, list):
                lines.append(f"{key}:")
                lines.extend(f"  - {item}" for item in value)
            else:
                lines.append(f"{key}: {value}")
        lines.append("---")
        lines.append("")

    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + body, encoding="utf-8")
    return path


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


@pytest.fixture
def docs_root(tmp_path: Path, monkeypatch) -> Path:
    """Empty docs directory set as MDOCS_ROOT for the test."""
    root = tmp_path / "docs"
    root.mkdir()
    monkeypatch.setenv("MDOCS_ROOT", str(root))
    monkeypatch.delenv("MDOCS_QUIET", raising=False)
    return root


@pytest.fixture
def create_doc(docs_root: Path) -> Callable[..., Path]:
    """Write a document into docs_root.

    Usage:
        def test_something(create_doc):
            create_doc("guide/intro.md", "# Intro\\n", title="Intro")
    """

    def _create(rel_path: str, body: str = "", **front_matter) -> Path:
        return write_doc(docs_root, rel_path, body, **front_matter)

    return _create


@pytest.fixture
def complete_doc(create_doc: Callable[..., Path]) -> Callable[..., Path]:
    """Write a document carrying all default required fields."""

    def _create(rel_path: str, body: str = "", **extra) -> Path:
        fields = {"title": Path(rel_path).stem, "description": "A document", "status": "published"}
        fields.update(extra)
        return create_doc(rel_path, body, **fields)

    return _create
