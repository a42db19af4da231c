"""Fuzzy find-replace editing for document bodies.

Edits are applied in order, each against the output of the previous one:

1. Exact substring match replaces the first occurrence only.
2. Otherwise a line-sequence match compares each line with surrounding
   whitespace stripped, taking the first matching window. The replacement
   is re-indented to fit the matched block.
3. If neither matches, EditNotFoundError aborts the whole batch.

Pure functions only; reading and writing files is the caller's job.
"""

import difflib
import re
from collections.abc import Sequence

from .config import DIFF_CONTEXT_LINES, MIN_FENCE_LENGTH
from .errors import EditNotFoundError
from .models import Edit

_LEADING_WHITESPACE = re.compile(r"^\s*")
_BACKTICK_RUN = re.compile(r"`+")


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _indent_of(line: str) -> str:
    match = _LEADING_WHITESPACE.match(line)
    return match.group(0) if match else ""


def find_line_match(content_lines: list[str], old_lines: list[str]) -> int | None:
    """Return the first window index whose stripped lines equal old_lines."""
    wanted = [line.strip() for line in old_lines]
    window = len(wanted)

    for i in range(len(content_lines) - window + 1):
        if all(content_lines[i + j].strip() == wanted[j] for j in range(window)):
            return i
    return None


def reindent_replacement(
    content_lines: list[str],
    start: int,
    old_lines: list[str],
    new_lines: list[str],
) -> list[str]:
    """Fit new_lines to the indentation of the block matched at start.

    The first line takes the matched first line's indentation. A later line
    with a counterpart in old_lines takes the matched line's indentation
    shifted by how far the new line is indented relative to the old one.
    Lines past the end of the old block, and blank lines, are kept verbatim.
    """
    result = []
    for j, line in enumerate(new_lines):
        if j == 0:
            result.append(_indent_of(content_lines[start]) + line.lstrip())
            continue

        if j >= len(old_lines) or not line.strip():
            result.append(line)
            continue

        matched_indent = _indent_of(content_lines[start + j])
        delta = len(_indent_of(line)) - len(_indent_of(old_lines[j]))
        if delta >= 0:
            indent = matched_indent + " " * delta
        else:
            indent = matched_indent[: max(0, len(matched_indent) + delta)]
        result.append(indent + line.lstrip())

    return result


def apply_edit(content: str, edit: Edit) -> str:
    """Apply one edit to normalized content.

    Raises:
        EditNotFoundError: If old_text is empty or cannot be located.
    """
    old_text = normalize_line_endings(edit.old_text)
    new_text = normalize_line_endings(edit.new_text)

    if not old_text:
        raise EditNotFoundError(edit.old_text)

    if old_text in content:
        return content.replace(old_text, new_text, 1)

    content_lines = content.split("\n")
    old_lines = old_text.split("\n")

    start = find_line_match(content_lines, old_lines)
    if start is None:
        raise EditNotFoundError(edit.old_text)

    new_lines = reindent_replacement(content_lines, start, old_lines, new_text.split("\n"))
    content_lines[start : start + len(old_lines)] = new_lines
    return "\n".join(content_lines)


def generate_diff(original: str, modified: str, filename: str = "document") -> str:
    """Unified diff between two texts, empty when they are equal."""
    original_lines = normalize_line_endings(original).splitlines(keepends=True)
    modified_lines = normalize_line_endings(modified).splitlines(keepends=True)

    diff_lines = difflib.unified_diff(
        original_lines,
        modified_lines,
        fromfile=filename,
        tofile=filename,
        fromfiledate="original",
        tofiledate="modified",
        n=DIFF_CONTEXT_LINES,
    )

    # difflib leaves the last line unterminated when the input lacks a final newline
    return "".join(line if line.endswith("\n") else line + "\n" for line in diff_lines)


def fence_diff(diff: str) -> str:
    """Wrap a diff in a ```diff block that its own content cannot close.

    The fence is one backtick longer than the longest backtick run in the
    diff, and never shorter than three.
    """
    longest = max((len(run) for run in _BACKTICK_RUN.findall(diff)), default=0)
    fence = "`" * max(MIN_FENCE_LENGTH, longest + 1)
    return f"{fence}diff\n{diff}{fence}\n"


def apply_edits(
    original_body: str,
    edits: Sequence[Edit],
    path: str = "document",
) -> tuple[str, str]:
    """Apply edits sequentially and render the result as a fenced diff.

    Args:
        original_body: Document body (front matter already removed).
        edits: Ordered edits; edit N+1 sees the output of edit N.
        path: Name used in the diff headers and in errors.

    Returns:
        (new_body, diff). The diff is empty when the body is unchanged.

    Raises:
        EditNotFoundError: For the first edit that cannot be located. No
            later edit is attempted.
    """
    content = normalize_line_endings(original_body)
    modified = content

    for edit in edits:
        try:
            modified = apply_edit(modified, edit)
        except EditNotFoundError as e:
            raise EditNotFoundError(e.old_text, path=path) from None

    diff = generate_diff(content, modified, filename=path)
    return modified, fence_diff(diff) if diff else ""
