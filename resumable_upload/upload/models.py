"""Data model for a resumable upload session and its transitions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class UploadState(str, Enum):
    """Lifecycle states of an upload."""

    INIT = "init"
    NEGOTIATING_SESSION = "negotiating_session"
    STREAMING = "streaming"
    UPLOADING = "uploading"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transitions are possible."""
        return self in (UploadState.DONE, UploadState.FAILED)


@dataclass
class UploadSession:
    """Server side upload session and the progress made against it.

    Attributes:
        session_url: URL returned by the server when the session was opened.
        total_size: total number of bytes that will be uploaded.
        chunk_size: number of bytes per PUT request.
        bytes_confirmed: bytes the server has acknowledged so far.
        retry_count: retries spent on the chunk currently in flight.
        state: current lifecycle state.
    """

    session_url: str
    total_size: int
    chunk_size: int
    bytes_confirmed: int = 0
    retry_count: int = 0
    state: UploadState = UploadState.STREAMING

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "session_url" and "session_url" in self.__dict__:
            raise AttributeError("session_url cannot change once negotiated")
        super().__setattr__(name, value)

    @property
    def bytes_remaining(self) -> int:
        """Bytes not yet acknowledged by the server."""
        return self.total_size - self.bytes_confirmed

    def content_range(self, chunk_length: int) -> str:
        """Content-Range header value for a chunk sent at the current offset."""
        start = self.bytes_confirmed
        end = start + chunk_length - 1
        return f"bytes {start}-{end}/{self.total_size}"


@dataclass(frozen=True)
class Continue:
    """The server stored the chunk and expects more data."""


@dataclass(frozen=True)
class Done:
    """The server finished the upload.

    Attributes:
        result: Parsed JSON body of the final response, or its text.
    """

    result: Any


@dataclass(frozen=True)
class Failed:
    """A chunk could not be uploaded within the retry budget.

    Attributes:
        status: Status of the last attempt, None if no response was received.
        body: Parsed body of the last attempt.
    """

    status: int | None
    body: Any


Transition = Union[Continue, Done, Failed]
