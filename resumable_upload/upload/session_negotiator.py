"""Open a resumable upload session."""

from __future__ import annotations

import json
import logging
from typing import Any

import requests

from resumable_upload.const import DEFAULT_TIMEOUT_SECONDS
from resumable_upload.core.exceptions import SessionError
from resumable_upload.core.transport import HttpTransport

logger = logging.getLogger(__name__)


class SessionNegotiator:
    """Obtains the session URL that chunk uploads are sent to."""

    def __init__(
        self, transport: HttpTransport, timeout: float = DEFAULT_TIMEOUT_SECONDS
    ) -> None:
        """Initialize the negotiator.

        Args:
            transport: Transport used to send the session request.
            timeout: Request timeout in seconds.
        """
        self._transport = transport
        self._timeout = timeout

    def negotiate(
        self,
        session_endpoint: str,
        metadata: dict[str, Any] | None = None,
        access_token: str | None = None,
    ) -> str:
        """Open an upload session and return its URL.

        Args:
            session_endpoint: URL that creates resumable sessions.
            metadata: JSON object describing the uploaded content.
            access_token: Optional bearer token.

        Returns:
            The session URL from the ``Location`` response header.

        Raises:
            SessionError: If the server does not answer with 2xx and a
                ``Location`` header, or no response is received.
        """
        headers = {"Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        body = json.dumps(metadata or {}).encode("utf-8")

        logger.info("POST session: endpoint=%s", _redact(session_endpoint))
        try:
            response = self._transport.send(
                "POST",
                session_endpoint,
                headers=headers,
                data=body,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("Session request failed: %s", e)
            raise SessionError(None, str(e), f"Session request failed: {e}") from e

        logger.info("POST session response: status=%d", response.status_code)
        if not response.ok:
            raise SessionError(response.status_code, response.parsed_body())

        location = response.headers.get("Location")
        if not location:
            raise SessionError(
                response.status_code,
                response.parsed_body(),
                "Session response did not include a Location header",
            )

        logger.info("The location URL could be obtained.")
        return location


def _redact(url: str) -> str:
    """Hide query string values such as API keys in log output."""
    base, sep, query = url.partition("?")
    if not sep:
        return url
    names = [part.split("=", 1)[0] for part in query.split("&") if part]
    return base + "?" + "&".join(f"{name}=..." for name in names)
