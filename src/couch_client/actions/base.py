"""Action machinery shared by every CouchDB operation.

An action knows how to build its request and how to interpret the response
status; sending, context-chaining and the one-shot guard live here.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Generator, Mapping
from typing import Any, Generic, TypeVar
from urllib.parse import urlencode

from pydantic import BaseModel

from ..errors import ActionAlreadySentError, CouchError, EncodeError, ErrorCategory, ServerResponseError
from ..models import Nok
from ..protocols import Request, Response, Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ServerResponseFuture(Generic[T]):
    """Outcome of a response whose status code has already been matched.

    Either a ready value (``ok``) or a failure still awaiting the server's
    ``{error, reason}`` body (``err``). Awaiting a failure decodes that body
    and raises the categorized ``ServerResponseError``; a body that cannot be
    decoded yields an error without one. Resolves exactly once.
    """

    __slots__ = ("_value", "_status_code", "_category", "_response", "_resolved")

    def __init__(
        self,
        *,
        value: T | None = None,
        status_code: int | None = None,
        category: ErrorCategory | None = None,
        response: Response | None = None,
    ) -> None:
        self._value = value
        self._status_code = status_code
        self._category = category
        self._response = response
        self._resolved = False

    @classmethod
    def ok(cls, value: T) -> ServerResponseFuture[T]:
        return cls(value=value)

    @classmethod
    def err(cls, response: Response, category: ErrorCategory | None) -> ServerResponseFuture[T]:
        return cls(
            status_code=response.status_code,
            category=category,
            response=response,
        )

    @property
    def is_ok(self) -> bool:
        return self._status_code is None

    def __await__(self) -> Generator[Any, None, T]:
        return self._resolve().__await__()

    async def _resolve(self) -> T:
        if self._resolved:
            raise RuntimeError("ServerResponseFuture has already been resolved")
        self._resolved = True

        if self._status_code is None:
            return self._value  # type: ignore[return-value]

        assert self._response is not None
        try:
            nok: Nok | None = await self._response.json_body(Nok)
        except CouchError as error:
            logger.debug("no error body for HTTP status %s: %s", self._status_code, error)
            nok = None
        raise ServerResponseError.from_server_response(self._status_code, nok, self._category)


class Action(Generic[T]):
    """A single logical CouchDB operation, sent at most once.

    Subclasses implement ``make_request`` and ``take_response``; the latter
    is a pure dispatch on the status code.
    """

    operation = "action"

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._sent = False

    def describe(self) -> str:
        """One-line description used as error context."""
        return f"Failed to run {self.operation}"

    async def make_request(self) -> Request:
        raise NotImplementedError

    async def take_response(self, response: Response) -> ServerResponseFuture[T]:
        raise NotImplementedError

    async def send(self) -> T:
        if self._sent:
            raise ActionAlreadySentError(f"{type(self).__name__} has already been sent")
        self._sent = True

        try:
            request = await self.make_request()
            response = await request.send()
            try:
                outcome = await self.take_response(response)
                return await outcome
            except CouchError as error:
                await response.report_error(error)
                raise
            finally:
                await response.close()
        except CouchError as error:
            error.add_context(self.describe())
            raise

    def run(self) -> T:
        """Send the action and block the calling thread until it completes."""
        return asyncio.run(self.send())

    async def _request(self, method: str, path: Any) -> Request:
        return await self._transport.request(method, path, operation=self.operation)


def encode_json(content: Any) -> bytes:
    """Encode a request body, raising ``EncodeError`` before any I/O."""
    try:
        if isinstance(content, BaseModel):
            return content.model_dump_json(by_alias=True).encode("utf-8")
        return json.dumps(content, separators=(",", ":"), allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as error:
        raise EncodeError(f"Could not encode request body as JSON: {error}") from error


def encode_query(params: Mapping[str, Any]) -> str:
    """Encode query parameters, skipping ``None`` and rendering booleans as JSON."""
    encoded: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
            continue
        encoded[key] = str(value)

    if not encoded:
        return ""
    return "?" + urlencode(encoded)

