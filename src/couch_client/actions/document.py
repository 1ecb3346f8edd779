"""Document-level actions."""

from __future__ import annotations

from typing import Any

from ..errors import ErrorCategory
from ..models import Document, WriteResponse
from ..names import Revision
from ..paths import DatabasePathLike, DocumentPath, DocumentPathLike, into_database_path, into_document_path
from ..protocols import Request, Response, Transport
from .base import Action, ServerResponseFuture, T, encode_json, encode_query

RevisionLike = Revision | str

_GET_DOCUMENT_ERRORS = {
    400: ErrorCategory.INVALID_REQUEST,
    401: ErrorCategory.UNAUTHORIZED,
    404: ErrorCategory.NOT_FOUND,
}

_HEAD_DOCUMENT_ERRORS = {
    401: ErrorCategory.UNAUTHORIZED,
    404: ErrorCategory.NOT_FOUND,
}

_DELETE_DOCUMENT_ERRORS = {
    400: ErrorCategory.INVALID_REQUEST,
    401: ErrorCategory.UNAUTHORIZED,
    404: ErrorCategory.NOT_FOUND,
    409: ErrorCategory.CONFLICT,
}

_WRITE_DOCUMENT_ERRORS = {
    400: ErrorCategory.INVALID_REQUEST,
    401: ErrorCategory.UNAUTHORIZED,
    404: ErrorCategory.NOT_FOUND,
    409: ErrorCategory.CONFLICT,
}


def _revision(value: RevisionLike | None) -> Revision | None:
    if value is None or isinstance(value, Revision):
        return value
    return Revision.parse(value)


class _DocumentAction(Action[T]):
    method = "GET"

    def __init__(self, transport: Transport, path: DocumentPathLike) -> None:
        super().__init__(transport)
        self._path = path

    def describe(self) -> str:
        return f"Failed to {self.method} document {self._path}"

    def document_path(self) -> DocumentPath:
        return into_document_path(self._path)


class GetDocument(_DocumentAction[Document | None]):
    """``GET /{db}/{doc}``.

    Resolves to ``None`` when ``if_none_match`` was given and the server
    answers 304 Not Modified.
    """

    operation = "document.get"

    def __init__(self, transport: Transport, path: DocumentPathLike) -> None:
        super().__init__(transport, path)
        self._if_none_match: RevisionLike | None = None
        self._rev: RevisionLike | None = None

    def if_none_match(self, rev: RevisionLike | None) -> GetDocument:
        self._if_none_match = rev
        return self

    def rev(self, rev: RevisionLike | None) -> GetDocument:
        """Fetch a specific revision rather than the current one."""
        self._rev = rev
        return self

    async def make_request(self) -> Request:
        path = self.document_path()
        query = encode_query({"rev": _revision(self._rev)})
        if_none_match = _revision(self._if_none_match)
        request = await self._request(self.method, f"{path}{query}")
        request.accept_application_json()
        request.if_none_match_revision(if_none_match)
        return request

    async def take_response(self, response: Response) -> ServerResponseFuture[Document | None]:
        if response.status_code == 200:
            return ServerResponseFuture.ok(await response.json_body(Document))
        if response.status_code == 304:
            return ServerResponseFuture.ok(None)
        return ServerResponseFuture.err(response, _GET_DOCUMENT_ERRORS.get(response.status_code))


class HeadDocument(_DocumentAction[bool | None]):
    """``HEAD /{db}/{doc}``: ``True`` if it exists, ``None`` on 304 Not Modified."""

    operation = "document.head"
    method = "HEAD"

    def __init__(self, transport: Transport, path: DocumentPathLike) -> None:
        super().__init__(transport, path)
        self._if_none_match: RevisionLike | None = None

    def if_none_match(self, rev: RevisionLike | None) -> HeadDocument:
        self._if_none_match = rev
        return self

    async def make_request(self) -> Request:
        path = self.document_path()
        if_none_match = _revision(self._if_none_match)
        request = await self._request(self.method, path)
        request.if_none_match_revision(if_none_match)
        return request

    async def take_response(self, response: Response) -> ServerResponseFuture[bool | None]:
        if response.status_code == 200:
            return ServerResponseFuture.ok(True)
        if response.status_code == 304:
            return ServerResponseFuture.ok(None)
        return ServerResponseFuture.err(response, _HEAD_DOCUMENT_ERRORS.get(response.status_code))


class DeleteDocument(_DocumentAction[None]):
    """``DELETE /{db}/{doc}`` of the given revision (sent as ``If-Match``)."""

    operation = "document.delete"
    method = "DELETE"

    def __init__(self, transport: Transport, path: DocumentPathLike, rev: RevisionLike) -> None:
        super().__init__(transport, path)
        self._rev = rev

    async def make_request(self) -> Request:
        path = self.document_path()
        rev = _revision(self._rev)
        request = await self._request(self.method, path)
        request.accept_application_json()
        request.if_match_revision(rev)
        return request

    async def take_response(self, response: Response) -> ServerResponseFuture[None]:
        if response.status_code == 200:
            return ServerResponseFuture.ok(None)
        return ServerResponseFuture.err(response, _DELETE_DOCUMENT_ERRORS.get(response.status_code))


class PutDocument(_DocumentAction[Revision]):
    """``PUT /{db}/{doc}``: create a document or update it when ``if_match`` is given."""

    operation = "document.put"
    method = "PUT"

    def __init__(self, transport: Transport, path: DocumentPathLike, content: Any) -> None:
        super().__init__(transport, path)
        self._content = content
        self._if_match: RevisionLike | None = None

    def if_match(self, rev: RevisionLike | None) -> PutDocument:
        self._if_match = rev
        return self

    async def make_request(self) -> Request:
        path = self.document_path()
        rev = _revision(self._if_match)
        body = encode_json(self._content)
        request = await self._request(self.method, path)
        request.accept_application_json()
        request.content_type_application_json()
        request.if_match_revision(rev)
        request.body(body)
        return request

    async def take_response(self, response: Response) -> ServerResponseFuture[Revision]:
        if response.status_code == 201:
            written = await response.json_body(WriteResponse)
            return ServerResponseFuture.ok(written.rev)
        return ServerResponseFuture.err(response, _WRITE_DOCUMENT_ERRORS.get(response.status_code))


class PostToDatabase(Action[tuple[Revision, DocumentPath]]):
    """``POST /{db}``: create a document with a server-generated id."""

    operation = "document.post"

    def __init__(self, transport: Transport, path: DatabasePathLike, content: Any) -> None:
        super().__init__(transport)
        self._path = path
        self._content = content

    def describe(self) -> str:
        return f"Failed to POST to database {self._path}"

    async def make_request(self) -> Request:
        path = into_database_path(self._path)
        body = encode_json(self._content)
        request = await self._request("POST", path)
        request.accept_application_json()
        request.content_type_application_json()
        request.body(body)
        return request

    async def take_response(self, response: Response) -> ServerResponseFuture[tuple[Revision, DocumentPath]]:
        if response.status_code == 201:
            written = await response.json_body(WriteResponse)
            database_path = into_database_path(self._path)
            return ServerResponseFuture.ok((written.rev, database_path.with_document_id(written.id)))
        return ServerResponseFuture.err(response, _WRITE_DOCUMENT_ERRORS.get(response.status_code))
