"""Protocol contracts for transports and request hooks."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .hooks import RequestCall
    from .names import Revision


@runtime_checkable
class Response(Protocol):
    @property
    def status_code(self) -> int: ...

    @property
    def headers(self) -> Mapping[str, str]: ...

    async def json_body(self, type_: Any) -> Any: ...

    async def report_error(self, error: Exception) -> None: ...

    async def close(self) -> None: ...

@runtime_checkable
class Request(Protocol):
    @property
    def method(self) -> str: ...

    @property
    def url_path(self) -> str: ...

    def accept_application_json(self) -> None: ...

    def content_type_application_json(self) -> None: ...

    def if_match_revision(self, rev: Revision | None) -> None: ...

    def if_none_match_revision(self, rev: Revision | None) -> None: ...

    def body(self, content: bytes) -> None: ...

    async def send(self) -> Response: ...

    async def send_without_body(self) -> Response: ...


@runtime_checkable
class Transport(Protocol):
    @property
    def base_url(self) -> str: ...

    async def request(self, method: str, path: Any, *, operation: str = "") -> Request: ...


@runtime_checkable
class HookMiddleware(Protocol):
    def before(self, call: RequestCall) -> Any: ...

    def after(self, call: RequestCall, status_code: int) -> Any: ...

    def on_error(self, call: RequestCall, error: Exception) -> Any: ...
