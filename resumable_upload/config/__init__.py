"""Upload configuration."""

from .config import resolve_upload_config
from .helpers import parse_bytes
from .upload_config import UploadConfig

__all__ = ["UploadConfig", "parse_bytes", "resolve_upload_config"]
