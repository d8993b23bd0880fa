from __future__ import annotations

import json
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from resumable_upload.config.upload_config import UploadConfig
from resumable_upload.core.exceptions import SourceError
from resumable_upload.core.transport import HttpResponse

SESSION_ENDPOINT = "https://upload.example.com/upload/files?uploadType=resumable"
SESSION_URL = "https://upload.example.com/upload/files?upload_id=sess-1"
SOURCE_URL = "https://files.example.com/video.mp4"


@dataclass
class RecordedRequest:
    method: str
    url: str
    headers: dict[str, str]
    data: bytes | None
    timeout: float | None


@dataclass
class ResponseAction:
    status: int | None
    body: Any = None
    headers: dict[str, str] | None = None


def make_response(
    status: int, body: Any = None, headers: Mapping[str, str] | None = None
) -> HttpResponse:
    if body is None:
        content = b""
    elif isinstance(body, bytes):
        content = body
    elif isinstance(body, str):
        content = body.encode()
    else:
        content = json.dumps(body).encode()
    return HttpResponse(
        status_code=status,
        headers=CaseInsensitiveDict(headers or {}),
        content=content,
    )


@dataclass
class FakeResumableServer:
    """In-memory HttpTransport that behaves like a resumable upload server.

    PUT requests are answered by the scripted ``put_actions`` first (a
    ``ResponseAction`` with ``status=None`` drops the connection), then by
    the default behaviour: store the chunk and answer 308, or 200 with
    ``final_result`` once ``total_size`` bytes have arrived.
    """

    session_response: HttpResponse = field(
        default_factory=lambda: make_response(200, headers={"Location": SESSION_URL})
    )
    final_result: Any = field(
        default_factory=lambda: {"id": "file-1", "name": "video.mp4"}
    )
    put_actions: list[ResponseAction] = field(default_factory=list)
    sources: dict[str, list[bytes | Exception]] = field(default_factory=dict)
    request_log: list[RecordedRequest] = field(default_factory=list)
    received: bytearray = field(default_factory=bytearray)
    on_put: Callable[[RecordedRequest], None] | None = None

    def queue_put(
        self,
        status: int | None,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.put_actions.append(ResponseAction(status, body, headers))

    def respond_to_session(
        self, status: int, body: Any = None, headers: dict[str, str] | None = None
    ) -> None:
        self.session_response = make_response(status, body, headers)

    @property
    def puts(self) -> list[RecordedRequest]:
        return [r for r in self.request_log if r.method == "PUT"]

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        data: bytes | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        request = RecordedRequest(method, url, dict(headers or {}), data, timeout)
        self.request_log.append(request)

        if method == "POST":
            return self.session_response

        if self.on_put:
            self.on_put(request)

        if self.put_actions:
            action = self.put_actions.pop(0)
            if action.status is None:
                raise requests.exceptions.ConnectionError("Dropped connection")
            if action.status in (200, 308):
                self.received.extend(data or b"")
            return make_response(action.status, action.body, action.headers)

        self.received.extend(data or b"")
        total = int(request.headers["Content-Range"].split("/")[-1])
        if len(self.received) >= total:
            return make_response(200, self.final_result)
        last_byte = len(self.received) - 1
        return make_response(308, headers={"Range": f"bytes=0-{last_byte}"})

    def stream(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        fragment_size: int = 1024 * 1024,
    ) -> Iterator[bytes]:
        self.request_log.append(
            RecordedRequest("GET", url, dict(headers or {}), None, timeout)
        )
        if url not in self.sources:
            raise SourceError("Source request failed with HTTP 404")
        for item in self.sources[url]:
            if isinstance(item, Exception):
                raise item
            yield item


@pytest.fixture
def session_endpoint() -> str:
    return SESSION_ENDPOINT


@pytest.fixture
def session_url() -> str:
    return SESSION_URL


@pytest.fixture
def source_url() -> str:
    return SOURCE_URL


@pytest.fixture
def server() -> FakeResumableServer:
    return FakeResumableServer()


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "video.mp4"
    path.write_bytes(bytes(range(256)) * 4 + b"tail")
    return path


@pytest.fixture
def make_config(source_file: Path) -> Callable[..., UploadConfig]:
    def _make(**overrides: Any) -> UploadConfig:
        options: dict[str, Any] = {
            "file_path": source_file,
            "session_endpoint": SESSION_ENDPOINT,
            "total_size": source_file.stat().st_size,
            "chunk_size": 256,
        }
        options.update(overrides)
        return UploadConfig(**options)

    return _make
