"""View execution."""

from __future__ import annotations

from typing import Any

from ..errors import ErrorCategory
from ..models import ViewResult
from ..paths import ViewPathLike, into_view_path
from ..protocols import Request, Response, Transport
from .base import Action, ServerResponseFuture, encode_json, encode_query

_GET_VIEW_ERRORS = {
    400: ErrorCategory.INVALID_REQUEST,
    401: ErrorCategory.UNAUTHORIZED,
    404: ErrorCategory.NOT_FOUND,
}


class GetView(Action[ViewResult[Any, Any]]):
    """``GET /{db}/_design/{ddoc}/_view/{view}``.

    Row keys and values decode into ``key_type`` and ``value_type``.
    ``startkey`` and ``endkey`` are sent JSON-encoded.
    """

    operation = "view.get"

    def __init__(
        self,
        transport: Transport,
        path: ViewPathLike,
        *,
        key_type: Any = Any,
        value_type: Any = Any,
    ) -> None:
        super().__init__(transport)
        self._path = path
        self._result_type = ViewResult[key_type, value_type]
        self._params: dict[str, Any] = {}

    def describe(self) -> str:
        return f"Failed to GET view {self._path}"

    def reduce(self, enabled: bool) -> GetView:
        self._params["reduce"] = enabled
        return self

    def startkey(self, key: Any) -> GetView:
        self._params["startkey"] = _JsonKey(key)
        return self

    def endkey(self, key: Any) -> GetView:
        self._params["endkey"] = _JsonKey(key)
        return self

    def include_docs(self, enabled: bool) -> GetView:
        self._params["include_docs"] = enabled
        return self

    def limit(self, count: int) -> GetView:
        if count < 0:
            raise ValueError("limit must be non-negative")
        self._params["limit"] = count
        return self

    async def make_request(self) -> Request:
        path = into_view_path(self._path)
        params = {
            name: value.encode() if isinstance(value, _JsonKey) else value
            for name, value in self._params.items()
        }
        request = await self._request("GET", f"{path}{encode_query(params)}")
        request.accept_application_json()
        return request

    async def take_response(self, response: Response) -> ServerResponseFuture[ViewResult[Any, Any]]:
        if response.status_code == 200:
            return ServerResponseFuture.ok(await response.json_body(self._result_type))
        return ServerResponseFuture.err(response, _GET_VIEW_ERRORS.get(response.status_code))


class _JsonKey:
    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def encode(self) -> str:
        return encode_json(self.value).decode("utf-8")
