"""Markdown link extraction and classification."""

import posixpath
import re
from collections.abc import Callable
from dataclasses import dataclass

from ..config import EXTERNAL_LINK_PREFIXES

# [text](target), [text](<target with spaces>) and [text](file(1).md), each with an
# optional "title". Images match too and their targets are checked the same way.
LINK_PATTERN = re.compile(
    r"\[([^\]]*)\]\(\s*"
    r"(?:<([^<>\n]*)>|((?:[^()\s]|\([^()\s]*\))+))"
    r"(?:\s+\"[^\"]*\")?\s*\)"
)


@dataclass(frozen=True)
class MarkdownLink:
    text: str
    target: str
    start: int  # Offset of the target within the scanned text
    end: int


def extract_markdown_links(content: str) -> list[MarkdownLink]:
    """Extract [text](target) links in document order, duplicates included.

    Angle-bracketed targets are returned without their brackets.
    """
    links = []
    for m in LINK_PATTERN.finditer(content):
        group = 2 if m.group(2) is not None else 3
        links.append(
            MarkdownLink(text=m.group(1), target=m.group(group), start=m.start(group), end=m.end(group))
        )
    return links


def is_internal_link(target: str) -> bool:
    """True for links that point at a file in the docs tree."""
    lowered = target.lower()
    return not any(lowered.startswith(prefix) for prefix in EXTERNAL_LINK_PREFIXES)


def link_file_target(target: str) -> str:
    """Strip the #fragment and ?query from a link target."""
    for sep in ("#", "?"):
        idx = target.find(sep)
        if idx != -1:
            target = target[:idx]
    return target


def resolve_link_path(document_path: str, target: str) -> str | None:
    """Resolve an internal link target to a POSIX path relative to the docs root.

    "/"-prefixed targets are root-relative, anything else is relative to the
    linking document's directory. Returns None for links with no file part
    or that climb above the root.
    """
    file_target = link_file_target(target)
    if not file_target:
        return None

    if file_target.startswith("/"):
        joined = file_target.lstrip("/")
    else:
        joined = posixpath.join(posixpath.dirname(document_path), file_target)

    normalized = posixpath.normpath(joined)
    if normalized == ".." or normalized.startswith("../"):
        return None
    return normalized


def relative_link(from_document: str, to_path: str) -> str:
    """Link text that reaches to_path from the directory of from_document."""
    start = posixpath.dirname(from_document) or "."
    return posixpath.relpath(to_path, start)


def replace_link_targets(content: str, replace: Callable[[MarkdownLink], str | None]) -> tuple[str, int]:
    """Rewrite link targets in content.

    `replace` gets each link and returns the new target, or None to leave it.

    Returns:
        (new_content, number_of_links_rewritten)
    """
    pieces = []
    last = 0
    count = 0
    for link in extract_markdown_links(content):
        new_target = replace(link)
        if new_target is None or new_target == link.target:
            continue
        pieces.append(content[last:link.start])
        pieces.append(new_target)
        last = link.end
        count += 1
    pieces.append(content[last:])
    return "".join(pieces), count
