"""Typer CLI for resumable uploads."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer
from tqdm import tqdm

from resumable_upload import __version__
from resumable_upload.config.config import resolve_upload_config
from resumable_upload.config.helpers import parse_bytes
from resumable_upload.const import LOG_FORMAT
from resumable_upload.core.exceptions import (
    ChunkUploadError,
    ConfigError,
    ResumableUploadError,
    SessionError,
)
from resumable_upload.presets import resolve_endpoint
from resumable_upload.upload.upload_controller import UploadController

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="Resumable upload command line interface.")


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging with a concise, consistent format."""
    if logging.getLogger().handlers:
        logging.getLogger().setLevel(level)
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level, handlers=[handler])


def _version_callback(value: bool) -> bool:
    if value:
        typer.echo(__version__)
        raise typer.Exit()
    return value


@app.callback()
def callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show the resumable-upload version and exit.",
        callback=_version_callback,
        is_eager=True,
        is_flag=True,
    ),
) -> None:
    """Handle global CLI option for --version."""
    return None


def _parse_metadata(raw: str | None) -> dict[str, Any] | None:
    if raw is None:
        return None
    try:
        metadata = json.loads(raw)
    except ValueError as exc:
        raise ConfigError(f"--metadata is not valid JSON: {exc}") from exc
    if not isinstance(metadata, dict):
        raise ConfigError("--metadata must be a JSON object")
    return metadata


def _resolve_session_endpoint(
    endpoint: str | None, preset: str | None, api_key: str | None
) -> str | None:
    if endpoint and preset:
        raise ConfigError("Use either --endpoint or --preset, not both")
    if preset:
        return resolve_endpoint(preset, api_key)
    return endpoint


def _run_upload(options: dict[str, Any], show_progress: bool) -> Any:
    """Resolve configuration and run the upload, showing a progress bar."""
    config = resolve_upload_config(options)
    with tqdm(
        total=config.total_size,
        unit="B",
        unit_scale=True,
        desc="Uploading",
        disable=not show_progress,
    ) as pbar:

        def on_progress(bytes_confirmed: int, total_size: int) -> None:
            pbar.update(bytes_confirmed - pbar.n)

        controller = UploadController(config, progress_callback=on_progress)
        return controller.run()


@app.command("upload")
def upload(
    file_path: Path | None = typer.Option(
        None,
        "--file",
        "-f",
        exists=True,
        readable=True,
        dir_okay=False,
        help="Local file to upload.",
    ),
    file_url: str | None = typer.Option(
        None, "--url", "-u", help="Remote file to stream and upload."
    ),
    endpoint: str | None = typer.Option(
        None, "--endpoint", "-e", help="URL that opens a resumable upload session."
    ),
    preset: str | None = typer.Option(
        None,
        "--preset",
        "-p",
        case_sensitive=False,
        help="Use a known session endpoint: 'drive', 'youtube' or 'gemini'.",
    ),
    total_size: int | None = typer.Option(
        None,
        "--size",
        "-s",
        help="Size of the content in bytes. Defaults to the size of --file.",
    ),
    access_token: str | None = typer.Option(
        None, "--token", "-t", help="Bearer token used to open the session."
    ),
    api_key: str | None = typer.Option(
        None, "--api-key", help="API key for the 'gemini' preset."
    ),
    metadata: str | None = typer.Option(
        None, "--metadata", "-m", help="JSON object sent when opening the session."
    ),
    chunk_size: str | None = typer.Option(
        None,
        "--chunk-size",
        help="Bytes per request, e.g. '16mb'. Should be a multiple of 256 KiB.",
    ),
    max_retries: int | None = typer.Option(
        None, "--max-retries", help="Retries per chunk after the first attempt."
    ),
    retry_backoff: float | None = typer.Option(
        None,
        "--retry-backoff",
        help="Base delay in seconds before retrying a chunk (doubles per retry).",
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Per request timeout in seconds."
    ),
    progress: bool = typer.Option(
        True, "--progress/--no-progress", help="Show a progress bar."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Log every request at INFO level."
    ),
) -> None:
    """Upload a file or URL using a resumable upload session."""
    configure_logging(logging.INFO if verbose else logging.WARNING)
    try:
        if total_size is None and file_path is not None:
            total_size = file_path.stat().st_size
        try:
            parsed_chunk_size = parse_bytes(chunk_size) if chunk_size else None
        except ValueError as exc:
            raise ConfigError(f"--chunk-size: {exc}") from exc
        options = {
            "file_path": file_path,
            "file_url": file_url,
            "session_endpoint": _resolve_session_endpoint(endpoint, preset, api_key),
            "total_size": total_size,
            "access_token": access_token,
            "metadata": _parse_metadata(metadata),
            "chunk_size": parsed_chunk_size,
            "max_retries": max_retries,
            "retry_backoff": retry_backoff,
            "timeout": timeout,
        }
        result = _run_upload(options, show_progress=progress)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        raise typer.Exit(code=1) from exc
    except (SessionError, ChunkUploadError) as exc:
        logger.error("%s", json.dumps(exc.to_dict(), default=str))
        raise typer.Exit(code=1) from exc
    except ResumableUploadError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1) from exc

    if isinstance(result, str):
        typer.echo(result)
    else:
        typer.echo(json.dumps(result, indent=2))


def main() -> None:
    """CLI entrypoint for the resumable-upload command."""
    app()


if __name__ == "__main__":
    main()
