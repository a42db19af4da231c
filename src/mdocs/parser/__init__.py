"""Markdown document parsing: front matter split and link extraction."""

from .links import (
    MarkdownLink,
    extract_markdown_links,
    is_internal_link,
    link_file_target,
    relative_link,
    replace_link_targets,
    resolve_link_path,
)
from .markdown import ParseError, load_document, parse_document, split_frontmatter

__all__ = [
    "MarkdownLink",
    "ParseError",
    "extract_markdown_links",
    "is_internal_link",
    "link_file_target",
    "load_document",
    "parse_document",
    "relative_link",
    "replace_link_targets",
    "resolve_link_path",
    "split_frontmatter",
]
