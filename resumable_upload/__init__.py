"""Resumable, chunked HTTP uploads for session based upload APIs."""

from .config.upload_config import UploadConfig
from .core.exceptions import (
    ChunkUploadError,
    ConfigError,
    FatalChunkError,
    ResumableUploadError,
    SessionError,
    SourceError,
    TransientChunkError,
)
from .core.transport import HttpResponse, HttpTransport, RequestsTransport
from .upload.upload_controller import UploadController, resumable_upload

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ChunkUploadError",
    "ConfigError",
    "FatalChunkError",
    "HttpResponse",
    "HttpTransport",
    "RequestsTransport",
    "ResumableUploadError",
    "SessionError",
    "SourceError",
    "TransientChunkError",
    "UploadConfig",
    "UploadController",
    "resumable_upload",
]
