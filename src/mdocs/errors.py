"""Error types for mdocs.

Every error raised across a tool boundary is a DocsError carrying a stable
code, a human-readable message that names the offending path, and optional
structured details. Tracebacks never appear in these messages; they go to
the log only.
"""

import json
from typing import Any


class DocsError(Exception):
    """Base class for all caller-facing mdocs errors."""

    code = "DOCS_ERROR"

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.path = path
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.path is not None:
            data["path"] = self.path
        if self.details:
            data["details"] = self.details
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class AccessDeniedError(DocsError):
    """A requested path resolves outside the configured docs root."""

    code = "ACCESS_DENIED"

    def __init__(self, path: str) -> None:
        super().__init__(f"Access denied - path outside docs directory: {path}", path=path)


class EditNotFoundError(DocsError):
    """An edit's old text could not be located in the document body."""

    code = "EDIT_NOT_FOUND"

    def __init__(self, old_text: str, path: str | None = None) -> None:
        self.old_text = old_text
        super().__init__(
            f"Could not find exact match for edit:\n{old_text}",
            path=path,
            details={"old_text": old_text},
        )


class StorageError(DocsError):
    """Reading, writing or stat-ing a file failed."""

    code = "STORAGE_ERROR"


class DocumentNotFoundError(StorageError):
    code = "DOCUMENT_NOT_FOUND"

    def __init__(self, path: str) -> None:
        super().__init__(f"Document not found: {path}", path=path)


class DocumentExistsError(StorageError):
    code = "DOCUMENT_EXISTS"

    def __init__(self, path: str) -> None:
        super().__init__(f"Destination already exists: {path}", path=path)


def format_error_json(code: str, message: str, details: dict[str, Any] | None = None) -> str:
    """Format an error that is not a DocsError for --json-errors output."""
    data: dict[str, Any] = {"error": code, "message": message}
    if details:
        data["details"] = details
    return json.dumps(data, default=str)
