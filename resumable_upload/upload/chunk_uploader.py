"""Upload one chunk to a resumable session and interpret the response.

The server decides how the upload proceeds:

* ``200`` finishes the upload and carries the final result.
* ``308`` stores the chunk and asks for the next one.
* any other status, or no response at all, is retried with the exact same
  range and bytes until the retry budget is spent.
"""

from __future__ import annotations

import logging
import time

import requests

from resumable_upload.const import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_BACKOFF_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
    FINAL_SUCCESS_CODE,
    MAX_BACKOFF_SECONDS,
    RESUME_INCOMPLETE_CODE,
)
from resumable_upload.core.exceptions import TransientChunkError
from resumable_upload.core.transport import HttpResponse, HttpTransport
from resumable_upload.upload.models import (
    Continue,
    Done,
    Failed,
    Transition,
    UploadSession,
    UploadState,
)

logger = logging.getLogger(__name__)


class ChunkUploader:
    """Sends chunks with ``Content-Range`` headers and bounded retry."""

    def __init__(
        self,
        transport: HttpTransport,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF_SECONDS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the uploader.

        Args:
            transport: Transport used to send PUT requests.
            max_retries: Retries allowed per chunk after the first attempt.
            retry_backoff: Base delay in seconds before a retry. The delay
                doubles with each retry of the same chunk. 0 disables it.
            timeout: Request timeout in seconds.
        """
        self._transport = transport
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self._timeout = timeout

    def send_chunk(
        self, session: UploadSession, chunk: bytes, is_final_chunk: bool = False
    ) -> Transition:
        """Upload ``chunk`` at the session's confirmed offset.

        Args:
            session: Session to upload to. Its ``bytes_confirmed`` and
                ``retry_count`` are updated in place.
            chunk: Bytes to send. Must not be empty.
            is_final_chunk: Whether the caller expects this to be the last
                chunk. Used for logging only; completion is signalled by the
                server.

        Returns:
            ``Continue`` on 308, ``Done`` on 200, ``Failed`` once retries are
            exhausted.
        """
        if not chunk:
            raise ValueError("Cannot upload an empty chunk")

        # Built once so every retry sends the same range and bytes.
        headers = {"Content-Range": session.content_range(len(chunk))}
        session.state = UploadState.UPLOADING
        session.retry_count = 0

        while True:
            logger.info(
                "Progress%s: %s attempt=%d",
                "(last)" if is_final_chunk else "",
                headers["Content-Range"],
                session.retry_count + 1,
            )
            try:
                response = self._put(session.session_url, headers, chunk)
            except TransientChunkError as e:
                if session.retry_count >= self.max_retries:
                    logger.error(
                        "Upload chunk failed after %d retries: status=%s",
                        self.max_retries,
                        e.status,
                    )
                    session.state = UploadState.FAILED
                    return Failed(status=e.status, body=e.body)
                session.retry_count += 1
                logger.warning(
                    "Retry: %d / %d (status=%s body=%s)",
                    session.retry_count,
                    self.max_retries,
                    e.status,
                    str(e.body)[:200],
                )
                self._sleep_backoff(session.retry_count)
                continue

            if response.status_code == FINAL_SUCCESS_CODE:
                session.state = UploadState.DONE
                session.retry_count = 0
                logger.info("Upload complete: total_bytes=%d", session.total_size)
                return Done(result=response.parsed_body())

            session.bytes_confirmed += len(chunk)
            session.retry_count = 0
            session.state = UploadState.STREAMING
            return Continue()

    def _put(self, url: str, headers: dict[str, str], chunk: bytes) -> HttpResponse:
        """Send a single attempt.

        Raises:
            TransientChunkError: If the response is neither 200 nor 308, or
                no response was received.
        """
        try:
            response = self._transport.send(
                "PUT", url, headers=headers, data=chunk, timeout=self._timeout
            )
        except requests.RequestException as e:
            raise TransientChunkError(None, str(e), f"Chunk request failed: {e}") from e

        logger.debug("PUT chunk response: status=%d", response.status_code)
        if response.status_code not in (FINAL_SUCCESS_CODE, RESUME_INCOMPLETE_CODE):
            raise TransientChunkError(response.status_code, response.parsed_body())
        return response

    def _sleep_backoff(self, retry: int) -> None:
        """Sleep with exponential backoff, capped at MAX_BACKOFF_SECONDS."""
        if self.retry_backoff <= 0:
            return
        delay = min(self.retry_backoff * 2 ** (retry - 1), MAX_BACKOFF_SECONDS)
        time.sleep(delay)
