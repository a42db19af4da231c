"""Markdown parsing with YAML front matter support."""

import re
from pathlib import Path

import frontmatter

from ..frontmatter import coerce_front_matter
from ..models import Document
from ..storage import read_text

# Front matter block at the very start of the file: ---\n ... \n---
FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)


class ParseError(Exception):
    """Raised when a document's front matter cannot be parsed."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


def split_frontmatter(raw: str) -> tuple[str, str]:
    """Split raw text into (header, body) without touching either.

    The header is the complete front matter block including delimiters and
    its trailing newline; `header + body == raw` always holds. Text without a
    leading block returns ("", raw).
    """
    match = FRONTMATTER_PATTERN.match(raw)
    if not match:
        return "", raw
    return match.group(0), raw[match.end():]


def parse_document(path: str, raw: str) -> Document:
    """Parse raw document text into a Document.

    Raises:
        ParseError: If the front matter block is not a YAML mapping.
    """
    header, body = split_frontmatter(raw)
    if not header:
        return Document(path=path, front_matter={}, body=body)

    try:
        post = frontmatter.loads(header)
    except Exception as e:
        raise ParseError(path, f"Failed to parse front matter: {e}") from e

    if not isinstance(post.metadata, dict):
        raise ParseError(path, "Front matter is not a key/value mapping")

    return Document(path=path, front_matter=coerce_front_matter(post.metadata), body=body)


def load_document(file_path: Path, rel_path: str) -> Document:
    """Read and parse a document from disk.

    Raises:
        StorageError: If the file cannot be read.
        ParseError: If the front matter is invalid.
    """
    return parse_document(rel_path, read_text(file_path, rel_path))
