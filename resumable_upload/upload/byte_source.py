"""Byte sources that feed the upload pipeline.

A byte source is a lazy, finite, ordered sequence of ``bytes`` fragments of
arbitrary size. It can be iterated only once; nothing is read until the
consumer asks for the next fragment.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path

import requests

from resumable_upload.const import DEFAULT_FRAGMENT_SIZE, DEFAULT_TIMEOUT_SECONDS
from resumable_upload.core.exceptions import ConfigError, SourceError
from resumable_upload.core.transport import HttpTransport

logger = logging.getLogger(__name__)


class ByteSource(ABC):
    """Single-use iterable of byte fragments."""

    def __init__(self, fragment_size: int = DEFAULT_FRAGMENT_SIZE) -> None:
        """Initialize the source.

        Args:
            fragment_size: Preferred number of bytes per read.
        """
        self.fragment_size = fragment_size
        self._consumed = False
        self.bytes_read = 0

    def __iter__(self) -> Iterator[bytes]:
        if self._consumed:
            raise SourceError(f"{self.describe()} has already been consumed")
        self._consumed = True
        return self._counted(self._read_fragments())

    def _counted(self, fragments: Iterator[bytes]) -> Iterator[bytes]:
        for fragment in fragments:
            self.bytes_read += len(fragment)
            yield fragment

    @abstractmethod
    def _read_fragments(self) -> Iterator[bytes]:
        """Yield fragments, raising SourceError on any read failure."""

    @abstractmethod
    def describe(self) -> str:
        """Short human readable description used in logs and errors."""


class FileSource(ByteSource):
    """Reads a local file sequentially."""

    def __init__(
        self, path: str | Path, fragment_size: int = DEFAULT_FRAGMENT_SIZE
    ) -> None:
        """Initialize the source.

        Args:
            path: Local file to read. It is opened on first iteration.
            fragment_size: Number of bytes per read.
        """
        super().__init__(fragment_size)
        self.path = Path(path)

    def describe(self) -> str:
        return f"file {self.path}"

    def _read_fragments(self) -> Iterator[bytes]:
        logger.info("Reading source file %s", self.path)
        try:
            with open(self.path, "rb") as f:
                for fragment in iter(lambda: f.read(self.fragment_size), b""):
                    yield fragment
        except OSError as e:
            raise SourceError(f"File I/O error reading {self.path}: {e}") from e


class UrlSource(ByteSource):
    """Streams the body of a GET request."""

    def __init__(
        self,
        url: str,
        transport: HttpTransport,
        fragment_size: int = DEFAULT_FRAGMENT_SIZE,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the source.

        Args:
            url: Location of the content. Requested on first iteration.
            transport: Transport used to issue the GET request.
            fragment_size: Preferred number of bytes per fragment.
            timeout: Request timeout in seconds.
        """
        super().__init__(fragment_size)
        self.url = url
        self._transport = transport
        self._timeout = timeout

    def describe(self) -> str:
        return f"url {self.url}"

    def _read_fragments(self) -> Iterator[bytes]:
        try:
            yield from self._transport.stream(
                self.url, timeout=self._timeout, fragment_size=self.fragment_size
            )
        except requests.RequestException as e:
            raise SourceError(f"Network error reading {self.url}: {e}") from e


def make_byte_source(
    file_path: str | Path | None,
    file_url: str | None,
    transport: HttpTransport,
    fragment_size: int = DEFAULT_FRAGMENT_SIZE,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> ByteSource:
    """Build the byte source for exactly one of ``file_path`` or ``file_url``.

    Raises:
        ConfigError: If both or neither are given.
    """
    has_path = _is_given(file_path)
    has_url = _is_given(file_url)
    if has_path and not has_url:
        return FileSource(file_path, fragment_size=fragment_size)
    if has_url and not has_path:
        return UrlSource(
            file_url, transport, fragment_size=fragment_size, timeout=timeout
        )
    raise ConfigError("Set exactly one of file_path or file_url")


def _is_given(value: str | Path | None) -> bool:
    # Blank strings count as unset, matching UploadConfig.
    if value is None:
        return False
    return not isinstance(value, str) or bool(value.strip())
