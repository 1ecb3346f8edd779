from __future__ import annotations

import pytest
from pydantic import BaseModel

from couch_client.actions import DeleteDocument, GetDocument, HeadDocument, PostToDatabase, PutDocument
from couch_client.errors import (
    DecodeError,
    EncodeError,
    ErrorCategory,
    InvalidRevisionError,
    ServerResponseError,
    UnexpectedStatusError,
)
from couch_client.models import Design, ViewFunction
from couch_client.names import DocumentId, Revision
from couch_client.paths import DocumentPath
from couch_client.testing import MockRequest, MockResponse, MockTransport

REV = "2-1234567890abcdef1234567890abcdef"
NEW_REV = "3-fedcba0987654321fedcba0987654321"
CONFLICT = {"error": "conflict", "reason": "Document update conflict."}


class Note(BaseModel):
    title: str
    tags: list[str] = []


@pytest.mark.asyncio
async def test_get_document() -> None:
    seen: list[MockRequest] = []

    def handler(request: MockRequest) -> MockResponse:
        seen.append(request)
        return MockResponse(200, json={"_id": "note", "_rev": REV, "title": "hello", "tags": ["a"]})

    document = await GetDocument(MockTransport.scripted([handler]), "/db/note").send()

    assert document is not None
    assert document.id == DocumentId("note")
    assert document.rev == Revision.parse(REV)
    assert document.into_content(Note) == Note(title="hello", tags=["a"])
    assert seen[0].url_path == "/db/note"
    assert seen[0].query == {}
    assert seen[0].if_none_match is None


@pytest.mark.asyncio
async def test_get_document_not_modified() -> None:
    seen: list[MockRequest] = []

    def handler(request: MockRequest) -> MockResponse:
        seen.append(request)
        return MockResponse(304)

    action = GetDocument(MockTransport.scripted([handler]), "/db/note").if_none_match(REV)

    assert await action.send() is None
    assert seen[0].if_none_match == f'"{REV}"'


@pytest.mark.asyncio
async def test_get_document_specific_revision() -> None:
    seen: list[MockRequest] = []

    def handler(request: MockRequest) -> MockResponse:
        seen.append(request)
        return MockResponse(200, json={"_id": "_design/app", "_rev": REV})

    path = DocumentPath("db", DocumentId.design("app"))
    document = await GetDocument(MockTransport.scripted([handler]), path).rev(Revision.parse(REV)).send()

    assert document is not None and document.id.is_design()
    assert seen[0].url_path == "/db/_design/app"
    assert seen[0].query == {"rev": REV}


@pytest.mark.parametrize(
    ("status_code", "category"),
    [
        (400, ErrorCategory.INVALID_REQUEST),
        (401, ErrorCategory.UNAUTHORIZED),
        (404, ErrorCategory.NOT_FOUND),
    ],
)
@pytest.mark.asyncio
async def test_get_document_failures(status_code: int, category: ErrorCategory) -> None:
    transport = MockTransport.scripted([MockResponse(status_code, json={"error": "e", "reason": "r"})])

    with pytest.raises(ServerResponseError) as excinfo:
        await GetDocument(transport, "/db/note").send()

    assert excinfo.value.category is category
    assert excinfo.value.context == ["Failed to GET document /db/note"]


@pytest.mark.asyncio
async def test_get_document_malformed_body() -> None:
    transport = MockTransport.scripted([MockResponse(200, json={"_id": "note", "_rev": "garbage"})])

    with pytest.raises(DecodeError):
        await GetDocument(transport, "/db/note").send()


@pytest.mark.asyncio
async def test_invalid_revision_fails_before_request() -> None:
    transport = MockTransport()

    with pytest.raises(InvalidRevisionError):
        await GetDocument(transport, "/db/note").if_none_match("nope").send()
    assert transport.sent_requests == []


@pytest.mark.asyncio
async def test_head_document() -> None:
    transport = MockTransport.scripted([MockResponse(200), MockResponse(304), MockResponse(404)])

    assert await HeadDocument(transport, "/db/note").send() is True
    assert await HeadDocument(transport, "/db/note").if_none_match(REV).send() is None
    with pytest.raises(ServerResponseError) as excinfo:
        await HeadDocument(transport, "/db/note").send()
    assert excinfo.value.is_not_found()
    assert [request.method for request in transport.sent_requests] == ["HEAD", "HEAD", "HEAD"]


@pytest.mark.asyncio
async def test_delete_document_sends_if_match() -> None:
    seen: list[MockRequest] = []

    def handler(request: MockRequest) -> MockResponse:
        seen.append(request)
        return MockResponse(200, json={"id": "note", "ok": True, "rev": NEW_REV})

    assert await DeleteDocument(MockTransport.scripted([handler]), "/db/note", REV).send() is None
    assert seen[0].method == "DELETE"
    assert seen[0].if_match == f'"{REV}"'


@pytest.mark.parametrize(
    ("status_code", "category"),
    [
        (400, ErrorCategory.INVALID_REQUEST),
        (401, ErrorCategory.UNAUTHORIZED),
        (404, ErrorCategory.NOT_FOUND),
        (409, ErrorCategory.CONFLICT),
    ],
)
@pytest.mark.asyncio
async def test_delete_document_failures(status_code: int, category: ErrorCategory) -> None:
    transport = MockTransport.scripted([MockResponse(status_code, json=CONFLICT)])

    with pytest.raises(ServerResponseError) as excinfo:
        await DeleteDocument(transport, "/db/note", REV).send()
    assert excinfo.value.category is category


@pytest.mark.asyncio
async def test_put_document_with_if_match() -> None:
    seen: list[MockRequest] = []

    def handler(request: MockRequest) -> MockResponse:
        seen.append(request)
        return MockResponse(201, json={"id": "note", "ok": True, "rev": NEW_REV})

    content = Note(title="hello")
    rev = await PutDocument(MockTransport.scripted([handler]), "/db/note", content).if_match(REV).send()

    assert rev == Revision.parse(NEW_REV)
    request = seen[0]
    assert request.method == "PUT"
    assert request.if_match == f'"{REV}"'
    assert request.is_content_type_application_json()
    assert request.json() == {"title": "hello", "tags": []}


@pytest.mark.asyncio
async def test_put_design_document() -> None:
    seen: list[MockRequest] = []

    def handler(request: MockRequest) -> MockResponse:
        seen.append(request)
        return MockResponse(201, json={"id": "_design/app", "ok": True, "rev": NEW_REV})

    design = Design(views={"by_title": ViewFunction(map="function(doc) { emit(doc.title, null); }")})
    path = DocumentPath("db", DocumentId.design("app"))
    await PutDocument(MockTransport.scripted([handler]), path, design).send()

    assert seen[0].url_path == "/db/_design/app"
    assert seen[0].json() == {"views": {"by_title": {"map": "function(doc) { emit(doc.title, null); }"}}}


@pytest.mark.asyncio
async def test_put_document_conflict() -> None:
    transport = MockTransport.scripted([MockResponse(409, json=CONFLICT)])

    with pytest.raises(ServerResponseError) as excinfo:
        await PutDocument(transport, "/db/note", {"title": "x"}).send()

    error = excinfo.value
    assert error.is_conflict()
    assert error.reason == "Document update conflict."
    assert str(error).startswith("Failed to PUT document /db/note: ")


@pytest.mark.asyncio
async def test_put_document_unencodable_content_fails_before_request() -> None:
    transport = MockTransport()

    with pytest.raises(EncodeError):
        await PutDocument(transport, "/db/note", {"when": object()}).send()
    with pytest.raises(EncodeError):
        await PutDocument(transport, "/db/note", {"ratio": float("nan")}).send()
    assert transport.sent_requests == []


@pytest.mark.asyncio
async def test_post_to_database() -> None:
    seen: list[MockRequest] = []

    def handler(request: MockRequest) -> MockResponse:
        seen.append(request)
        return MockResponse(201, json={"id": "a1b2", "ok": True, "rev": REV})

    rev, path = await PostToDatabase(MockTransport.scripted([handler]), "/db", {"title": "new"}).send()

    assert rev == Revision.parse(REV)
    assert path == DocumentPath("db", "a1b2")
    assert (seen[0].method, seen[0].url_path) == ("POST", "/db")
    assert seen[0].json() == {"title": "new"}


@pytest.mark.parametrize(
    ("status_code", "category"),
    [
        (400, ErrorCategory.INVALID_REQUEST),
        (401, ErrorCategory.UNAUTHORIZED),
        (404, ErrorCategory.NOT_FOUND),
        (409, ErrorCategory.CONFLICT),
    ],
)
@pytest.mark.asyncio
async def test_post_to_database_failures(status_code: int, category: ErrorCategory) -> None:
    transport = MockTransport.scripted([MockResponse(status_code, json=CONFLICT)])

    with pytest.raises(ServerResponseError) as excinfo:
        await PostToDatabase(transport, "/db", {}).send()
    assert excinfo.value.category is category
    assert excinfo.value.context == ["Failed to POST to database /db"]


@pytest.mark.asyncio
async def test_post_to_database_accepted_is_unexpected() -> None:
    transport = MockTransport.scripted([MockResponse(202, json={"id": "a", "ok": True, "rev": REV})])

    with pytest.raises(UnexpectedStatusError) as excinfo:
        await PostToDatabase(transport, "/db", {}).send()
    assert excinfo.value.status_code == 202
    assert excinfo.value.nok is None
