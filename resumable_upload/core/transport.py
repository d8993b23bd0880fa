"""HTTP transport used by the upload pipeline.

The pipeline never calls ``requests`` directly. It talks to an object that
implements :class:`HttpTransport`, which makes it possible to run the whole
state machine against a fake server in tests.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import requests
from requests.structures import CaseInsensitiveDict

from resumable_upload.core.exceptions import SourceError
from resumable_upload.utils.http_errors import parse_body

logger = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    """Status, headers and body of a completed HTTP exchange."""

    status_code: int
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    content: bytes = b""
    encoding: str | None = None

    @property
    def ok(self) -> bool:
        """True for any 2xx status."""
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        """Body decoded with the response charset, UTF-8 when unknown."""
        try:
            return self.content.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            return self.content.decode("utf-8", errors="replace")

    def parsed_body(self) -> Any:
        """Body as a JSON value when possible, otherwise as text."""
        return parse_body(self.text)


class HttpTransport(Protocol):
    """Capability to send a request and read the response."""

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        data: bytes | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        """Send a request and return the fully read response."""
        ...

    def stream(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        fragment_size: int = 1024 * 1024,
    ) -> Iterator[bytes]:
        """GET ``url`` and yield the response body as it arrives."""
        ...


class RequestsTransport:
    """:class:`HttpTransport` backed by a ``requests.Session``."""

    def __init__(self, session: requests.Session | None = None) -> None:
        """Initialize the transport.

        Args:
            session: Session to send requests with. A new one is created
                (and owned by this transport) when omitted.
        """
        self._owns_session = session is None
        self._session = session or requests.Session()

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        data: bytes | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        """Send a request and return the fully read response.

        Raises:
            requests.RequestException: If no response could be obtained.
        """
        response = self._session.request(
            method,
            url,
            headers=dict(headers or {}),
            data=data,
            timeout=timeout,
            allow_redirects=False,
        )
        return HttpResponse(
            status_code=response.status_code,
            headers=CaseInsensitiveDict(response.headers),
            content=response.content,
            encoding=response.encoding,
        )

    def stream(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        fragment_size: int = 1024 * 1024,
    ) -> Iterator[bytes]:
        """GET ``url`` and yield the response body as it arrives.

        Raises:
            SourceError: If the server answers with a non-2xx status.
            requests.RequestException: If the connection fails mid-stream.
        """
        logger.info("GET source: url=%s", url)
        with self._session.get(
            url, headers=dict(headers or {}), timeout=timeout, stream=True
        ) as response:
            logger.info("GET source response: status=%d", response.status_code)
            if not 200 <= response.status_code < 300:
                raise SourceError(
                    f"Source request failed with HTTP {response.status_code}"
                )
            for fragment in response.iter_content(chunk_size=fragment_size):
                if fragment:
                    yield fragment

    def close(self) -> None:
        """Close the underlying session if this transport created it."""
        if self._owns_session:
            self._session.close()
