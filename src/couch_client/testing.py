"""In-memory transport for testing code built on the client.

Two ways to answer requests:

* two-sided: run the action in a task, ``await mock.next_request()`` on the
  test side, inspect it and call ``request.respond(...)``;
* scripted: ``MockTransport.scripted([...])`` or ``mock.expect(handler)``
  answers the next request inline with a ``MockResponse``.
"""

from __future__ import annotations

import asyncio
import json as jsonlib
from collections import deque
from collections.abc import Callable, Iterable, Mapping
from typing import Any
from urllib.parse import parse_qsl

from .errors import CouchError, PathValidationError
from .names import Revision
from .transport import JSON_MEDIA_TYPE, decode_json, revision_etag

_UNSET: Any = object()

MockHandler = Callable[["MockRequest"], "MockResponse"]


class MockResponse:
    def __init__(
        self,
        status_code: int,
        *,
        json: Any = _UNSET,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        if json is not _UNSET and body is not None:
            raise ValueError("pass either json or body, not both")
        self._status_code = status_code
        self._headers = dict(headers or {})
        if json is not _UNSET:
            self._body = jsonlib.dumps(json).encode("utf-8")
            self._headers.setdefault("Content-Type", JSON_MEDIA_TYPE)
        else:
            self._body = body or b""
        self._body_taken = False
        self.closed = False
        self.reported_errors: list[Exception] = []

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def headers(self) -> dict[str, str]:
        return self._headers

    @property
    def body(self) -> bytes:
        return self._body

    async def json_body(self, type_: Any) -> Any:
        if self._body_taken:
            raise RuntimeError("response body has already been consumed")
        self._body_taken = True
        self.closed = True
        return decode_json(self._body, type_)

    async def report_error(self, error: Exception) -> None:
        self.reported_errors.append(error)

    async def close(self) -> None:
        self.closed = True


class MockRequest:
    """A request captured by ``MockTransport``; also the test-side handle."""

    def __init__(self, transport: MockTransport, method: str, path: str, *, operation: str = "") -> None:
        url_path, _, query = path.partition("?")
        self._transport = transport
        self.method = method
        self.url_path = url_path
        self.query: dict[str, str] = dict(parse_qsl(query, keep_blank_values=True))
        self.operation = operation
        self.headers: dict[str, str] = {}
        self.content: bytes | None = None
        self._sent = False
        self._future: asyncio.Future[MockResponse] | None = None

    # Request protocol, used by actions.

    def accept_application_json(self) -> None:
        self.headers["Accept"] = JSON_MEDIA_TYPE

    def content_type_application_json(self) -> None:
        self.headers["Content-Type"] = JSON_MEDIA_TYPE

    def if_match_revision(self, rev: Revision | None) -> None:
        if rev is not None:
            self.headers["If-Match"] = revision_etag(rev)

    def if_none_match_revision(self, rev: Revision | None) -> None:
        if rev is not None:
            self.headers["If-None-Match"] = revision_etag(rev)

    def body(self, content: bytes) -> None:
        self.content = bytes(content)

    async def send(self) -> MockResponse:
        if self._sent:
            raise RuntimeError(f"{self.method} {self.url_path} has already been sent")
        self._sent = True
        return await self._transport._submit(self)

    async def send_without_body(self) -> MockResponse:
        if self.content is not None:
            raise ValueError("send_without_body() called on a request with a body")
        return await self.send()

    # Inspection, used by tests.

    def is_accept_application_json(self) -> bool:
        return self.headers.get("Accept") == JSON_MEDIA_TYPE

    def is_content_type_application_json(self) -> bool:
        return self.headers.get("Content-Type") == JSON_MEDIA_TYPE

    @property
    def if_match(self) -> str | None:
        return self.headers.get("If-Match")

    @property
    def if_none_match(self) -> str | None:
        return self.headers.get("If-None-Match")

    def json(self) -> Any:
        if self.content is None:
            raise ValueError(f"{self.method} {self.url_path} has no body")
        return jsonlib.loads(self.content)

    def respond(
        self,
        status_code: int,
        *,
        json: Any = _UNSET,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> MockResponse:
        """Deliver a response to the action waiting on this request."""
        if self._future is None:
            raise RuntimeError(f"{self.method} {self.url_path} is not awaiting a response")
        if self._future.done():
            raise RuntimeError(f"{self.method} {self.url_path} has already been answered")
        response = MockResponse(status_code, json=json, body=body, headers=headers)
        self._future.set_result(response)
        return response

    def __repr__(self) -> str:
        return f"MockRequest({self.method} {self.url_path})"


class MockTransport:
    """``Transport`` implementation that never touches the network."""

    def __init__(self, base_url: str = "http://couchdb.test") -> None:
        self._base_url = base_url
        self._handlers: deque[MockHandler] = deque()
        self._queue: asyncio.Queue[MockRequest] | None = None
        self.sent_requests: list[MockRequest] = []

    @classmethod
    def scripted(cls, responses: Iterable[MockResponse | MockHandler], *, base_url: str = "http://couchdb.test") -> MockTransport:
        transport = cls(base_url)
        for response in responses:
            transport.expect(response)
        return transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def expect(self, handler: MockResponse | MockHandler) -> None:
        """Answer the next unanswered request with ``handler``."""
        if isinstance(handler, MockResponse):
            handler = _constant(handler)
        self._handlers.append(handler)

    @property
    def handlers_remaining(self) -> int:
        return len(self._handlers)

    async def request(self, method: str, path: Any, *, operation: str = "") -> MockRequest:
        if isinstance(path, CouchError):
            raise path
        url_path = str(path)
        if not url_path.startswith("/"):
            raise PathValidationError(f"URL path does not begin with a slash: {url_path!r}")
        return MockRequest(self, method.upper(), url_path, operation=operation)

    async def next_request(self, timeout: float = 1.0) -> MockRequest:
        """Wait for the next request that has no scripted handler."""
        return await asyncio.wait_for(self._pending().get(), timeout)

    def respond(self, request: MockRequest, status_code: int, **kwargs: Any) -> MockResponse:
        return request.respond(status_code, **kwargs)

    def assert_no_pending_requests(self) -> None:
        if self._queue is not None and not self._queue.empty():
            pending = [self._queue.get_nowait() for _ in range(self._queue.qsize())]
            raise AssertionError(f"unexpected requests were sent: {pending}")

    async def _submit(self, request: MockRequest) -> MockResponse:
        self.sent_requests.append(request)
        if self._handlers:
            handler = self._handlers.popleft()
            return handler(request)

        request._future = asyncio.get_running_loop().create_future()
        await self._pending().put(request)
        return await request._future

    def _pending(self) -> asyncio.Queue[MockRequest]:
        if self._queue is None:
            self._queue = asyncio.Queue()
        return self._queue


def _constant(response: MockResponse) -> MockHandler:
    def handler(request: MockRequest) -> MockResponse:
        return response

    return handler
