"""Error taxonomy for the document analysis function.

Every failure raised inside an invocation derives from AnalysisError so the
HTTP entry point can convert it into a uniform ``{"error": ...}`` response.
"""

from __future__ import annotations

from typing import Any


class AnalysisError(Exception):
    """Base exception for all document analysis failures."""

    status_code: int = 500

    @property
    def public_message(self) -> str:
        """Message safe to return to the caller."""
        return str(self)


class ValidationError(AnalysisError):
    """Raised when the trigger payload is missing or malformed."""

    status_code = 400


class ConfigurationError(AnalysisError):
    """Raised when a required environment variable is missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required configuration: {', '.join(missing)}")


class StorageError(AnalysisError):
    """Raised when a document cannot be downloaded from storage."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        message = f"Failed to download document: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class ServiceError(AnalysisError):
    """Raised when the Gemini API call fails or returns a non-success status."""

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        self.upstream_status = upstream_status
        super().__init__(message)


class ParseError(AnalysisError):
    """Raised when the completion text is not a valid analysis."""


class PersistenceError(AnalysisError):
    """Raised when the analysis row cannot be written.

    The analysis computed before the failure is kept so the caller can still
    return it.
    """

    def __init__(
        self, document_id: int, reason: str, analysis: dict[str, Any] | None = None
    ) -> None:
        self.document_id = document_id
        self.analysis = analysis
        super().__init__(f"Failed to save analysis for document {document_id}: {reason}")
