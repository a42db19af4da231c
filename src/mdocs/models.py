"""Pydantic models for documents, edits, navigation and health results."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Front matter values after coercion (see frontmatter.coerce_value)
FrontMatterValue = str | bool | int | float | list[str]


class Document(BaseModel):
    """A markdown document split into front matter and body."""

    path: str  # Relative to the docs root, POSIX separators
    front_matter: dict[str, FrontMatterValue] = Field(default_factory=dict)
    body: str = ""


class Edit(BaseModel):
    """A single oldText -> newText replacement.

    Accepts both snake_case and the camelCase names used on the wire.
    """

    model_config = ConfigDict(populate_by_name=True)

    old_text: str = Field(alias="oldText")
    new_text: str = Field(alias="newText")


class EditResult(BaseModel):
    """Outcome of edit_document."""

    path: str
    diff: str  # Fenced unified diff, empty when nothing changed
    edits_applied: int
    dry_run: bool = False


class HealthIssue(BaseModel):
    """A single problem found by the health scan."""

    path: str
    type: Literal["missing_metadata", "broken_link", "orphaned"]
    severity: Literal["error", "warning"]
    message: str
    details: dict[str, str] = Field(default_factory=dict)


class HealthCheckResult(BaseModel):
    """Aggregate health of a documentation tree. Not persisted."""

    total_documents: int = 0
    metadata_completeness: int = Field(default=100, ge=0, le=100)
    broken_links: int = 0
    orphaned_documents: int = 0
    issues: list[HealthIssue] = Field(default_factory=list)
    documents_by_status: dict[str, int] = Field(default_factory=dict)
    documents_by_tag: dict[str, int] = Field(default_factory=dict)
    score: int = Field(default=100, ge=0, le=100)
    report: str = ""


class NavigationItem(BaseModel):
    """A document entry within a navigation section."""

    title: str
    path: str
    order: float


class NavigationSection(BaseModel):
    """A directory in the navigation tree.

    `path` points at the directory's index document when it has one.
    """

    title: str
    path: str | None = None
    order: float
    items: list[NavigationItem] = Field(default_factory=list)


class BrokenLink(BaseModel):
    path: str  # Document containing the link
    link: str  # Link target as written
    text: str = ""  # Link text


class LinkCheckResult(BaseModel):
    """Result of validate_links."""

    documents_checked: int
    links_checked: int
    broken_links: list[BrokenLink] = Field(default_factory=list)


class MissingField(BaseModel):
    path: str
    field: str


class MetadataCheckResult(BaseModel):
    """Result of validate_metadata."""

    documents_checked: int
    required_fields: list[str]
    completeness: int
    missing: list[MissingField] = Field(default_factory=list)
