"""HTTP transports for the CouchDB client.

Actions talk to the server only through a transport: they ask it for a
request bound to a URL path, set headers and an optional body, send it, and
read the status code and JSON body of the response. ``AsyncTransport`` runs
on an ``httpx.AsyncClient``; ``SyncTransport`` exposes the same coroutine
interface over a blocking ``httpx.Client``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from .errors import ClientTimeoutError, CouchError, DecodeError, PathValidationError, TransportError
from .hooks import HookRegistry, RequestCall
from .names import Revision

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"

_adapter_cache: dict[Any, TypeAdapter[Any]] = {}


def _type_adapter(type_: Any) -> TypeAdapter[Any]:
    try:
        adapter = _adapter_cache.get(type_)
    except TypeError:
        return TypeAdapter(type_)

    if adapter is None:
        adapter = TypeAdapter(type_)
        _adapter_cache[type_] = adapter
    return adapter


def decode_json(raw: bytes, type_: Any) -> Any:
    """Decode ``raw`` as JSON into ``type_`` or raise ``DecodeError``."""
    try:
        return _type_adapter(type_).validate_json(raw)
    except ValidationError as error:
        name = getattr(type_, "__name__", repr(type_))
        raise DecodeError(f"Could not decode HTTP response body as {name}: {error}") from error


def revision_etag(rev: Revision) -> str:
    return f'"{rev}"'


def wrap_http_error(error: httpx.HTTPError, description: str) -> TransportError:
    if isinstance(error, httpx.TimeoutException):
        return ClientTimeoutError(f"{description}: {error}")
    return TransportError(f"{description}: {error}")


class HttpRequest:
    """Not-yet-sent request; configured in place, then sent exactly once."""

    def __init__(self, transport: _HttpTransport, method: str, url: httpx.URL, *, operation: str = "") -> None:
        self._transport = transport
        self._method = method
        self._url = url
        self._headers: dict[str, str] = {}
        self._content: bytes | None = None
        self._sent = False
        self.operation = operation

    @property
    def method(self) -> str:
        return self._method

    @property
    def url(self) -> httpx.URL:
        return self._url

    @property
    def url_path(self) -> str:
        return self._url.raw_path.decode("ascii").partition("?")[0]

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    @property
    def content(self) -> bytes | None:
        return self._content

    def accept_application_json(self) -> None:
        self._headers["Accept"] = JSON_MEDIA_TYPE

    def content_type_application_json(self) -> None:
        self._headers["Content-Type"] = JSON_MEDIA_TYPE

    def if_match_revision(self, rev: Revision | None) -> None:
        if rev is None:
            return
        self._headers["If-Match"] = revision_etag(rev)

    def if_none_match_revision(self, rev: Revision | None) -> None:
        if rev is None:
            return
        self._headers["If-None-Match"] = revision_etag(rev)

    def body(self, content: bytes) -> None:
        self._content = bytes(content)

    async def send(self) -> HttpResponse:
        if self._sent:
            raise RuntimeError(f"{self._method} {self.url_path} has already been sent")
        self._sent = True
        return await self._transport._dispatch(self)

    async def send_without_body(self) -> HttpResponse:
        if self._content is not None:
            raise ValueError("send_without_body() called on a request with a body")
        return await self.send()


class HttpResponse:
    """Received response whose body is read lazily, at most once."""

    def __init__(self, inner: httpx.Response) -> None:
        self._inner = inner
        self._body_taken = False
        self._closed = False
        self._error_hook: Callable[[Exception], Awaitable[None]] | None = None

    @property
    def status_code(self) -> int:
        return self._inner.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._inner.headers

    async def json_body(self, type_: Any) -> Any:
        if self._body_taken:
            raise RuntimeError("response body has already been consumed")
        self._body_taken = True
        try:
            raw = await self._read()
        except httpx.HTTPError as error:
            raise wrap_http_error(error, "Could not read HTTP response body") from error
        finally:
            await self.close()
        return decode_json(raw, type_)

    async def report_error(self, error: Exception) -> None:
        """Run the request's error hooks for a failure found in this response."""
        if self._error_hook is not None:
            await self._error_hook(error)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._close()

    async def _read(self) -> bytes:
        raise NotImplementedError

    async def _close(self) -> None:
        raise NotImplementedError


class _AsyncHttpResponse(HttpResponse):
    async def _read(self) -> bytes:
        return await self._inner.aread()

    async def _close(self) -> None:
        await self._inner.aclose()


class _SyncHttpResponse(HttpResponse):
    async def _read(self) -> bytes:
        return self._inner.read()

    async def _close(self) -> None:
        self._inner.close()


class _HttpTransport:
    def __init__(self, client: httpx.Client | httpx.AsyncClient, base_url: str, *, hooks: HookRegistry | None = None) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._hooks = hooks or HookRegistry()

    @property
    def base_url(self) -> str:
        return self._base_url

    async def request(self, method: str, path: Any, *, operation: str = "") -> HttpRequest:
        if isinstance(path, CouchError):
            raise path

        url_path = str(path)
        if not url_path.startswith("/"):
            raise PathValidationError(f"URL path does not begin with a slash: {url_path!r}")

        method = method.upper()
        try:
            url = httpx.URL(self._base_url + url_path)
        except (httpx.InvalidURL, ValueError) as error:
            raise TransportError(f"Could not construct HTTP request for {method} {url_path}: {error}") from error
        return HttpRequest(self, method, url, operation=operation)

    async def _dispatch(self, request: HttpRequest) -> HttpResponse:
        call = RequestCall(
            operation=request.operation,
            method=request.method,
            path=request.url_path,
            headers=request.headers,
        )
        await self._hooks.run_before(call)

        logger.debug("sending %s %s", request.method, request.url)
        try:
            http_request = self._client.build_request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.content,
            )
            response = await self._send(http_request)
        except httpx.HTTPError as error:
            wrapped = wrap_http_error(error, "HTTP request failed")
            await self._hooks.run_error(call, wrapped)
            raise wrapped from error

        logger.debug("received %s for %s %s", response.status_code, request.method, request.url)
        response._error_hook = partial(self._hooks.run_error, call)
        await self._hooks.run_after(call, response.status_code)
        return response

    async def _send(self, http_request: httpx.Request) -> HttpResponse:
        raise NotImplementedError


class AsyncTransport(_HttpTransport):
    """Transport over ``httpx.AsyncClient``; every I/O step yields to the loop."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, *, hooks: HookRegistry | None = None) -> None:
        super().__init__(client, base_url, hooks=hooks)

    async def _send(self, http_request: httpx.Request) -> HttpResponse:
        response = await self._client.send(http_request, stream=True)
        return _AsyncHttpResponse(response)


class SyncTransport(_HttpTransport):
    """Transport over a blocking ``httpx.Client``."""

    def __init__(self, client: httpx.Client, base_url: str, *, hooks: HookRegistry | None = None) -> None:
        super().__init__(client, base_url, hooks=hooks)

    async def _send(self, http_request: httpx.Request) -> HttpResponse:
        response = self._client.send(http_request, stream=True)
        return _SyncHttpResponse(response)
