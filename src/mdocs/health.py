"""Documentation health scoring.

A health check is a full, read-only scan of the current documents:

- metadata completeness over a set of required front matter fields
- broken internal links (targets missing on disk)
- orphaned documents (not reachable from the navigation tree)

The counters fold into a 0-100 score using a deduction formula: start at
100 and subtract a bounded penalty per category. Tolerance mode tightens the
per-category caps and floors the result at 80, so a young documentation set
with gaps still reports as broadly healthy. This is the only scoring formula
in use; there is no weighted-percentage variant.

Unreadable documents are logged and skipped. A missing or empty directory is
not an error: it produces a perfect, empty result.
"""

import logging
import math
from collections.abc import Callable, Sequence
from pathlib import Path

from .config import (
    BROKEN_LINK_MAX_DEDUCTION,
    BROKEN_LINK_POINTS,
    DEFAULT_REQUIRED_FIELDS,
    METADATA_MAX_DEDUCTION,
    ORPHAN_MAX_DEDUCTION,
    ORPHAN_POINTS,
    TOLERANCE_BROKEN_LINK_CAP,
    TOLERANCE_METADATA_CAP,
    TOLERANCE_ORPHAN_CAP,
    TOLERANCE_SCORE_FLOOR,
)
from .errors import StorageError
from .models import Document, HealthCheckResult, HealthIssue, NavigationSection
from .navigation import build_navigation, navigation_paths
from .parser import ParseError, extract_markdown_links, is_internal_link, link_file_target, load_document
from .storage import list_markdown_files

log = logging.getLogger(__name__)

NavigationBuilder = Callable[[Path, str], list[NavigationSection]]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_score(
    metadata_completeness: int,
    broken_links: int,
    orphaned_documents: int,
    tolerance_mode: bool = True,
) -> int:
    """Fold the health counters into a 0-100 score.

    Deductions (normal / tolerance mode):
        metadata:     up to 30 points, proportional to missing fields / 10
        broken links: 2 per link, up to 20 / 5
        orphans:      5 per document, up to 20 / 5
    Tolerance mode then floors the score at 80.
    """
    score = 100

    if metadata_completeness < 100:
        deduction = _round_half_up(METADATA_MAX_DEDUCTION * (100 - metadata_completeness) / 100)
        score -= min(deduction, TOLERANCE_METADATA_CAP) if tolerance_mode else deduction

    if broken_links > 0:
        deduction = min(broken_links * BROKEN_LINK_POINTS, BROKEN_LINK_MAX_DEDUCTION)
        score -= min(deduction, TOLERANCE_BROKEN_LINK_CAP) if tolerance_mode else deduction

    if orphaned_documents > 0:
        deduction = min(orphaned_documents * ORPHAN_POINTS, ORPHAN_MAX_DEDUCTION)
        score -= min(deduction, TOLERANCE_ORPHAN_CAP) if tolerance_mode else deduction

    if tolerance_mode:
        score = max(score, TOLERANCE_SCORE_FLOOR)

    return max(0, min(100, score))


def metadata_completeness(present: int, checked: int) -> int:
    if checked == 0:
        return 100
    return _round_half_up(100 * present / checked)


def find_missing_fields(document: Document, required_fields: Sequence[str]) -> list[str]:
    """Required fields that are absent or falsy in the front matter."""
    return [field for field in required_fields if not document.front_matter.get(field)]


def link_exists(root: Path, document_path: str, target: str) -> bool:
    """Check an internal link target on disk.

    Targets starting with "/" resolve against the docs root, everything else
    against the linking document's directory.
    """
    file_target = link_file_target(target)
    if not file_target:
        # Pure "?query" or "#fragment" on the same page
        return True

    if file_target.startswith("/"):
        resolved = root / file_target.lstrip("/")
    else:
        resolved = (root / document_path).parent / file_target

    try:
        return resolved.exists()
    except OSError:
        return False


def find_broken_links(root: Path, document: Document) -> list[tuple[str, str]]:
    """(target, text) pairs for internal links in the body that do not resolve."""
    broken = []
    for link in extract_markdown_links(document.body):
        if not is_internal_link(link.target):
            continue
        if not link_exists(root, document.path, link.target):
            broken.append((link.target, link.text))
    return broken


def _empty_result(note: str) -> HealthCheckResult:
    result = HealthCheckResult()
    result.report = format_report(result, note=note)
    return result


def check_health(
    root: Path,
    base_path: str = "",
    required_fields: Sequence[str] = DEFAULT_REQUIRED_FIELDS,
    tolerance_mode: bool = True,
    navigation_builder: NavigationBuilder = build_navigation,
) -> HealthCheckResult:
    """Scan root/base_path and compute its health.

    Args:
        root: Docs root. Issue paths and link resolution are relative to it.
        base_path: Subdirectory to scan. Must already be validated.
        required_fields: Front matter fields each document should have.
        tolerance_mode: Cap deductions and floor the score at 80.
        navigation_builder: Produces the navigation tree used for the orphan
            check. Called as navigation_builder(root, base_path).

    Returns:
        HealthCheckResult with the formatted report attached.
    """
    root = Path(root).resolve()
    scan_dir = (root / base_path).resolve() if base_path else root

    if not scan_dir.is_dir():
        log.info("No documentation directory at %s", scan_dir)
        return _empty_result(
            f"No documentation found at {scan_dir}. Creating a default structure is recommended."
        )

    paths = list_markdown_files(root, base_path, recursive=True)
    if not paths:
        return _empty_result(
            f"No markdown files found in {scan_dir}. Creating documentation is recommended."
        )

    log.debug(
        "Checking %d documents with tolerance mode %s",
        len(paths),
        "enabled" if tolerance_mode else "disabled",
    )

    result = HealthCheckResult(total_documents=len(paths))
    scanned: list[str] = []
    checked_fields = 0
    present_fields = 0

    for rel_path in paths:
        try:
            document = load_document(root / rel_path, rel_path)
        except (StorageError, ParseError) as e:
            log.warning("Skipping %s during health check: %s", rel_path, e)
            continue

        scanned.append(rel_path)

        missing = find_missing_fields(document, required_fields)
        checked_fields += len(required_fields)
        present_fields += len(required_fields) - len(missing)
        for field in missing:
            result.issues.append(
                HealthIssue(
                    path=rel_path,
                    type="missing_metadata",
                    severity="warning",
                    message=f"Missing required field: {field}",
                    details={"field": field},
                )
            )

        status = document.front_matter.get("status")
        status_key = str(status) if status else "unknown"
        result.documents_by_status[status_key] = result.documents_by_status.get(status_key, 0) + 1

        tags = document.front_matter.get("tags")
        if isinstance(tags, list):
            for tag in tags:
                result.documents_by_tag[tag] = result.documents_by_tag.get(tag, 0) + 1

        for target, text in find_broken_links(root, document):
            result.broken_links += 1
            result.issues.append(
                HealthIssue(
                    path=rel_path,
                    type="broken_link",
                    severity="error",
                    message=f"Broken link: {target}",
                    details={"link": target, "text": text},
                )
            )

    in_navigation = navigation_paths(navigation_builder(root, base_path))
    for rel_path in scanned:
        if rel_path not in in_navigation:
            result.orphaned_documents += 1
            result.issues.append(
                HealthIssue(
                    path=rel_path,
                    type="orphaned",
                    severity="warning",
                    message="Document is not included in navigation",
                )
            )

    result.metadata_completeness = metadata_completeness(present_fields, checked_fields)
    result.score = calculate_score(
        result.metadata_completeness,
        result.broken_links,
        result.orphaned_documents,
        tolerance_mode=tolerance_mode,
    )
    result.report = format_report(result)

    return result


def format_report(result: HealthCheckResult, note: str | None = None) -> str:
    """Render a health result as plain text."""
    lines = [
        "Documentation Health Report:",
        f"Health Score: {result.score}/100",
        "",
        "Summary:",
        f"- Total Documents: {result.total_documents}",
        f"- Metadata Completeness: {result.metadata_completeness}%",
        f"- Broken Links: {result.broken_links}",
        f"- Orphaned Documents: {result.orphaned_documents}",
        "",
    ]

    if note:
        lines.append(f"Note: {note}")
        return "\n".join(lines)

    if result.issues:
        lines.append("Issues:")
        for issue in result.issues:
            lines.append(f"- {issue.path}: {issue.message} ({issue.severity})")
    else:
        lines.append("No issues found.")

    if result.documents_by_status:
        lines.append("")
        lines.append("Documents by Status:")
        for status, count in sorted(result.documents_by_status.items()):
            lines.append(f"- {status}: {count}")

    if result.documents_by_tag:
        lines.append("")
        lines.append("Documents by Tag:")
        for tag, count in sorted(result.documents_by_tag.items(), key=lambda x: (-x[1], x[0])):
            lines.append(f"- {tag}: {count}")

    return "\n".join(lines)
