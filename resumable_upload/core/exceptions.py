"""Exception classes for the resumable upload workflow."""

from __future__ import annotations

from typing import Any

from resumable_upload.utils.http_errors import extract_error_detail


class ResumableUploadError(Exception):
    """Base error for resumable upload workflow."""


class ConfigError(ResumableUploadError):
    """Raised when upload configuration is missing or contradictory."""

    def __init__(self, errors: list[str] | str):
        """Initialize ConfigError with one or more error messages.

        Args:
            errors: A message or a list of messages from validation.
        """
        if isinstance(errors, str):
            errors = [errors]
        message = "\n".join(errors)
        super().__init__(message)
        self.errors = errors


class SourceError(ResumableUploadError):
    """Raised when the byte source cannot be read."""


class _StatusError(ResumableUploadError):
    """Error carrying the last HTTP status and response body observed."""

    def __init__(self, status: int | None, body: Any, message: str | None = None):
        """Initialize the error.

        Args:
            status: HTTP status code, or None when no response was received.
            body: Parsed response body (JSON value or text).
            message: Optional human readable summary.
        """
        self.status = status
        self.body = body
        super().__init__(message or f"HTTP {status}: {extract_error_detail(body)}")

    def to_dict(self) -> dict[str, Any]:
        """Return the ``{status, error}`` shape reported to callers."""
        return {"status": self.status, "error": self.body}


class SessionError(_StatusError):
    """Raised when the upload session cannot be negotiated."""


class ChunkUploadError(_StatusError):
    """Base error for a chunk PUT that was not accepted."""


class TransientChunkError(ChunkUploadError):
    """Raised for a single chunk attempt that may be retried."""


class FatalChunkError(ChunkUploadError):
    """Raised when a chunk still fails after all retries."""
