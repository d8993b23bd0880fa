"""Session endpoints for Google APIs that accept resumable uploads."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlencode

from resumable_upload.core.exceptions import ConfigError

DRIVE_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"
YOUTUBE_UPLOAD_URL = "https://www.googleapis.com/upload/youtube/v3/videos"
GEMINI_UPLOAD_URL = "https://generativelanguage.googleapis.com/upload/v1beta/files"


def drive_upload_endpoint() -> str:
    """Google Drive v3 file upload session endpoint."""
    return f"{DRIVE_UPLOAD_URL}?uploadType=resumable"


def youtube_upload_endpoint(parts: Iterable[str] = ("snippet", "status")) -> str:
    """YouTube Data API v3 video upload session endpoint.

    Args:
        parts: Resource parts included in the metadata and the response.
    """
    return f"{YOUTUBE_UPLOAD_URL}?uploadType=resumable&part={','.join(parts)}"


def gemini_upload_endpoint(api_key: str | None = None) -> str:
    """Gemini Files API upload session endpoint.

    Gemini accepts either an API key in the query string or a bearer token.
    """
    params = {"uploadType": "resumable"}
    if api_key:
        params["key"] = api_key
    return f"{GEMINI_UPLOAD_URL}?{urlencode(params)}"


PRESETS = ("drive", "youtube", "gemini")


def resolve_endpoint(preset: str, api_key: str | None = None) -> str:
    """Return the session endpoint for a named preset.

    Raises:
        ConfigError: If the preset is unknown.
    """
    name = preset.strip().lower()
    if name == "drive":
        return drive_upload_endpoint()
    if name == "youtube":
        return youtube_upload_endpoint()
    if name == "gemini":
        return gemini_upload_endpoint(api_key)
    raise ConfigError(
        f"Unknown endpoint preset {preset!r}; choose one of {', '.join(PRESETS)}"
    )
