"""Pydantic model for resumable upload configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from resumable_upload.const import (
    CHUNK_MULTIPLE,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_FRAGMENT_SIZE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_BACKOFF_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
)
from resumable_upload.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


class UploadConfig(BaseModel):
    """Configuration options for a single resumable upload.

    Attributes:
        file_path: local file to upload. Mutually exclusive with ``file_url``.
        file_url: remote file to stream and upload. Mutually exclusive with
            ``file_path``.
        session_endpoint: URL that opens a resumable upload session.
        total_size: size in bytes of the content being uploaded.
        access_token: optional bearer token sent when opening the session.
        metadata: JSON object sent as the body of the session request.
        chunk_size: number of bytes sent per PUT request.
        max_retries: retries allowed per chunk after the first attempt.
        retry_backoff: base delay in seconds before a retry; 0 retries at once.
        timeout: per request timeout in seconds.
        fragment_size: read size used when pulling from the byte source.
    """

    model_config = ConfigDict(extra="forbid")

    file_path: Path | None = None
    file_url: str | None = None
    session_endpoint: str = Field(min_length=1)
    total_size: int = Field(gt=0)
    access_token: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    retry_backoff: float = Field(default=DEFAULT_RETRY_BACKOFF_SECONDS, ge=0)
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    fragment_size: int = Field(default=DEFAULT_FRAGMENT_SIZE, gt=0)

    @field_validator("file_path", "file_url", mode="before")
    @classmethod
    def _blank_source_is_unset(cls, value: Any) -> Any:
        # Path("") would become Path("."), so blanks must be caught as strings.
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("session_endpoint", mode="before")
    @classmethod
    def _strip_endpoint(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @model_validator(mode="after")
    def _check_source(self) -> UploadConfig:
        if (self.file_path is None) == (self.file_url is None):
            raise ValueError("Exactly one of file_path or file_url must be set")
        if self.chunk_size % CHUNK_MULTIPLE != 0:
            logger.warning(
                "chunk_size=%d is not a multiple of %d bytes; "
                "servers may reject intermediate chunks",
                self.chunk_size,
                CHUNK_MULTIPLE,
            )
        return self

    @classmethod
    def from_options(cls, **options: Any) -> UploadConfig:
        """Build a config, reporting invalid input as :class:`ConfigError`.

        Options whose value is ``None`` are treated as not given, so that
        defaults apply.

        Raises:
            ConfigError: If a required option is missing or inconsistent.
        """
        given = {key: value for key, value in options.items() if value is not None}
        try:
            return cls(**given)
        except ValidationError as exc:
            raise ConfigError(_format_validation_errors(exc)) from exc


def _format_validation_errors(exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        if location:
            messages.append(f"{location}: {error['msg']}")
        else:
            messages.append(error["msg"])
    return messages
