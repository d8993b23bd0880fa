"""Drive a complete resumable upload.

The controller runs a single sequential pipeline::

    INIT -> NEGOTIATING_SESSION -> STREAMING <-> UPLOADING -> DONE | FAILED

It pulls one chunk from the assembler, sends it, and only pulls the next
one after the server has accepted the previous chunk. Ranges are therefore
strictly contiguous and at most one chunk is held in memory beyond the
assembler's remainder.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from resumable_upload.config.upload_config import UploadConfig
from resumable_upload.core.exceptions import (
    FatalChunkError,
    ResumableUploadError,
    SourceError,
)
from resumable_upload.core.transport import HttpTransport, RequestsTransport
from resumable_upload.upload.byte_source import ByteSource, make_byte_source
from resumable_upload.upload.chunk_assembler import ChunkAssembler
from resumable_upload.upload.chunk_uploader import ChunkUploader
from resumable_upload.upload.models import (
    Continue,
    Done,
    Failed,
    UploadSession,
    UploadState,
)
from resumable_upload.upload.session_negotiator import SessionNegotiator

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class UploadController:
    """Upload the configured source to a resumable session.

    Each controller performs one upload. The session URL, the assembler
    buffer and the retry counter all live only for the duration of
    :meth:`run`.
    """

    def __init__(
        self,
        config: UploadConfig,
        transport: HttpTransport | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            config: Validated upload configuration.
            transport: Transport for all HTTP traffic. A ``RequestsTransport``
                is created and closed by the controller when omitted.
            progress_callback: Called with ``(bytes_confirmed, total_size)``
                after every accepted chunk.
        """
        self.config = config
        self._owns_transport = transport is None
        self._transport: HttpTransport = transport or RequestsTransport()
        self._progress_callback = progress_callback
        self._state = UploadState.INIT
        self._session: UploadSession | None = None

    @property
    def state(self) -> UploadState:
        """Current lifecycle state."""
        if self._session is not None and not self._state.is_terminal:
            return self._session.state
        return self._state

    def run(self) -> Any:
        """Run the upload to completion.

        Returns:
            The parsed JSON body of the final 200 response, or its text.

        Raises:
            ConfigError: If the byte source is ambiguous.
            SessionError: If the session cannot be opened.
            SourceError: If the source fails, ends early or overruns
                ``total_size``.
            FatalChunkError: If a chunk still fails after all retries.
        """
        if self._state is not UploadState.INIT:
            raise RuntimeError("An UploadController can only run once")
        try:
            return self._run()
        except ResumableUploadError:
            self._state = UploadState.FAILED
            raise
        finally:
            self._session = None
            if self._owns_transport and isinstance(self._transport, RequestsTransport):
                self._transport.close()

    def _run(self) -> Any:
        config = self.config
        # Reads larger than a chunk would buffer more than one chunk ahead.
        source = make_byte_source(
            config.file_path,
            config.file_url,
            self._transport,
            fragment_size=min(config.fragment_size, config.chunk_size),
            timeout=config.timeout,
        )

        self._state = UploadState.NEGOTIATING_SESSION
        negotiator = SessionNegotiator(self._transport, timeout=config.timeout)
        session_url = negotiator.negotiate(
            config.session_endpoint, config.metadata, config.access_token
        )
        session = UploadSession(
            session_url=session_url,
            total_size=config.total_size,
            chunk_size=config.chunk_size,
        )
        self._session = session
        self._state = UploadState.STREAMING

        uploader = ChunkUploader(
            self._transport,
            max_retries=config.max_retries,
            retry_backoff=config.retry_backoff,
            timeout=config.timeout,
        )
        return self._stream(source, session, uploader)

    def _stream(
        self, source: ByteSource, session: UploadSession, uploader: ChunkUploader
    ) -> Any:
        assembler = ChunkAssembler(source, session.chunk_size)
        try:
            return self._upload_chunks(source, assembler, session, uploader)
        finally:
            assembler.close()

    def _upload_chunks(
        self,
        source: ByteSource,
        assembler: ChunkAssembler,
        session: UploadSession,
        uploader: ChunkUploader,
    ) -> Any:
        for chunk in assembler:
            if len(chunk) > session.bytes_remaining:
                raise SourceError(
                    f"{source.describe()} produced more than "
                    f"total_size={session.total_size} bytes"
                )
            is_final = session.bytes_confirmed + len(chunk) >= session.total_size

            transition = uploader.send_chunk(session, chunk, is_final)

            if isinstance(transition, Done):
                self._state = UploadState.DONE
                self._report_progress(session.total_size, session.total_size)
                return transition.result
            if isinstance(transition, Failed):
                self._state = UploadState.FAILED
                raise FatalChunkError(
                    transition.status,
                    transition.body,
                    f"Chunk {session.content_range(len(chunk))} failed after "
                    f"{uploader.max_retries} retries with HTTP {transition.status}",
                )
            assert isinstance(transition, Continue)
            self._report_progress(session.bytes_confirmed, session.total_size)

        raise SourceError(
            f"{source.describe()} ended after {session.bytes_confirmed} of "
            f"{session.total_size} bytes without the server completing the upload"
        )

    def _report_progress(self, bytes_confirmed: int, total_size: int) -> None:
        if self._progress_callback:
            self._progress_callback(bytes_confirmed, total_size)


def resumable_upload(
    transport: HttpTransport | None = None,
    progress_callback: ProgressCallback | None = None,
    **options: Any,
) -> Any:
    """Upload a file or URL to a resumable upload session in one call.

    Args:
        transport: Optional transport for all HTTP traffic.
        progress_callback: Optional ``(bytes_confirmed, total_size)`` callback.
        **options: Fields of :class:`UploadConfig`, e.g. ``file_path``,
            ``session_endpoint``, ``total_size``, ``access_token``,
            ``metadata`` and ``chunk_size``.

    Returns:
        The parsed result of the final response.

    Raises:
        ConfigError: If the options are missing or contradictory. No
            request is made in that case.
    """
    config = UploadConfig.from_options(**options)
    controller = UploadController(
        config, transport=transport, progress_callback=progress_callback
    )
    return controller.run()
