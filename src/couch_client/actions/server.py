"""Server-level actions."""

from __future__ import annotations

from ..models import Root
from ..protocols import Request, Response
from .base import Action, ServerResponseFuture


class GetRoot(Action[Root]):
    """``GET /``: the server's welcome message, uuid and version."""

    operation = "server.root"

    def describe(self) -> str:
        return "Failed to GET server root"

    async def make_request(self) -> Request:
        request = await self._request("GET", "/")
        request.accept_application_json()
        return request

    async def take_response(self, response: Response) -> ServerResponseFuture[Root]:
        if response.status_code == 200:
            return ServerResponseFuture.ok(await response.json_body(Root))
        return ServerResponseFuture.err(response, None)
