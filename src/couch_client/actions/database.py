"""Database-level actions: list, create, delete, probe and describe."""

from __future__ import annotations

from ..errors import ErrorCategory
from ..models import Changes, Database
from ..names import DatabaseName
from ..paths import DatabasePath, DatabasePathLike, into_database_path
from ..protocols import Request, Response, Transport
from .base import Action, ServerResponseFuture, T

_PUT_DATABASE_ERRORS = {
    400: ErrorCategory.INVALID_REQUEST,
    401: ErrorCategory.UNAUTHORIZED,
    412: ErrorCategory.DATABASE_EXISTS,
}

_DELETE_DATABASE_ERRORS = {
    401: ErrorCategory.UNAUTHORIZED,
    404: ErrorCategory.DATABASE_DOES_NOT_EXIST,
}

_HEAD_DATABASE_ERRORS = {
    404: ErrorCategory.NOT_FOUND,
}

_GET_DATABASE_ERRORS = {
    401: ErrorCategory.UNAUTHORIZED,
    404: ErrorCategory.DATABASE_DOES_NOT_EXIST,
}

_GET_CHANGES_ERRORS = {
    400: ErrorCategory.INVALID_REQUEST,
}


class GetAllDatabases(Action[list[DatabaseName]]):
    """``GET /_all_dbs``."""

    operation = "database.all"

    def describe(self) -> str:
        return "Failed to GET all databases"

    async def make_request(self) -> Request:
        request = await self._request("GET", "/_all_dbs")
        request.accept_application_json()
        return request

    async def take_response(self, response: Response) -> ServerResponseFuture[list[DatabaseName]]:
        if response.status_code == 200:
            return ServerResponseFuture.ok(await response.json_body(list[DatabaseName]))
        return ServerResponseFuture.err(response, None)


class _DatabaseAction(Action[T]):
    method = "GET"

    def __init__(self, transport: Transport, path: DatabasePathLike) -> None:
        super().__init__(transport)
        self._path = path

    def describe(self) -> str:
        return f"Failed to {self.method} database {self._path}"

    def database_path(self) -> DatabasePath:
        return into_database_path(self._path)


class PutDatabase(_DatabaseAction[None]):
    """``PUT /{db}``: create a database."""

    operation = "database.put"
    method = "PUT"

    async def make_request(self) -> Request:
        request = await self._request(self.method, self.database_path())
        request.accept_application_json()
        return request

    async def take_response(self, response: Response) -> ServerResponseFuture[None]:
        if response.status_code == 201:
            return ServerResponseFuture.ok(None)
        return ServerResponseFuture.err(response, _PUT_DATABASE_ERRORS.get(response.status_code))


class DeleteDatabase(_DatabaseAction[None]):
    """``DELETE /{db}``: delete a database and all its documents."""

    operation = "database.delete"
    method = "DELETE"

    async def make_request(self) -> Request:
        request = await self._request(self.method, self.database_path())
        request.accept_application_json()
        return request

    async def take_response(self, response: Response) -> ServerResponseFuture[None]:
        if response.status_code == 200:
            return ServerResponseFuture.ok(None)
        return ServerResponseFuture.err(response, _DELETE_DATABASE_ERRORS.get(response.status_code))


class HeadDatabase(_DatabaseAction[None]):
    """``HEAD /{db}``: check that a database exists."""

    operation = "database.head"
    method = "HEAD"

    async def make_request(self) -> Request:
        return await self._request(self.method, self.database_path())

    async def take_response(self, response: Response) -> ServerResponseFuture[None]:
        if response.status_code == 200:
            return ServerResponseFuture.ok(None)
        return ServerResponseFuture.err(response, _HEAD_DATABASE_ERRORS.get(response.status_code))


class GetDatabase(_DatabaseAction[Database]):
    """``GET /{db}``: database meta-information."""

    operation = "database.get"

    async def make_request(self) -> Request:
        request = await self._request(self.method, self.database_path())
        request.accept_application_json()
        return request

    async def take_response(self, response: Response) -> ServerResponseFuture[Database]:
        if response.status_code == 200:
            return ServerResponseFuture.ok(await response.json_body(Database))
        return ServerResponseFuture.err(response, _GET_DATABASE_ERRORS.get(response.status_code))


class GetChanges(_DatabaseAction[Changes]):
    """``GET /{db}/_changes``: the database's changes feed, as one response."""

    operation = "database.changes"

    def describe(self) -> str:
        return f"Failed to GET changes for database {self._path}"

    async def make_request(self) -> Request:
        request = await self._request(self.method, f"{self.database_path()}/_changes")
        request.accept_application_json()
        return request

    async def take_response(self, response: Response) -> ServerResponseFuture[Changes]:
        if response.status_code == 200:
            return ServerResponseFuture.ok(await response.json_body(Changes))
        return ServerResponseFuture.err(response, _GET_CHANGES_ERRORS.get(response.status_code))
