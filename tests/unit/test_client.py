from __future__ import annotations

import json

import httpx
import pytest

from couch_client.client import AsyncCouchClient, CouchClient
from couch_client.errors import ServerResponseError
from couch_client.hooks import RequestCall
from couch_client.names import Revision
from couch_client.paths import DocumentPath
from couch_client.testing import MockResponse, MockTransport

REV = "1-1234567890abcdef1234567890abcdef"

ROOT_BODY = {
    "couchdb": "Welcome",
    "uuid": "85fb71bf700c17267fef77535820e371",
    "vendor": {"name": "The Apache Software Foundation", "version": "1.6.1_1"},
    "version": "1.6.1_1",
}


class FakeCouch:
    """Tiny in-memory server speaking just enough of the CouchDB API."""

    def __init__(self) -> None:
        self.databases: dict[str, dict[str, dict]] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        segments = [segment for segment in request.url.path.split("/") if segment]
        if not segments:
            return httpx.Response(200, json=ROOT_BODY)

        db = segments[0]
        if len(segments) == 1:
            if request.method == "PUT":
                if db in self.databases:
                    return httpx.Response(412, json={"error": "file_exists", "reason": "The database could not be created, the file already exists."})
                self.databases[db] = {}
                return httpx.Response(201, json={"ok": True})
            if request.method == "POST":
                self.databases[db]["generated"] = json.loads(request.content)
                return httpx.Response(201, json={"id": "generated", "ok": True, "rev": REV})

        doc_id = "/".join(segments[1:])
        if request.method == "GET" and doc_id in self.databases.get(db, {}):
            return httpx.Response(200, json={"_id": doc_id, "_rev": REV, **self.databases[db][doc_id]})
        return httpx.Response(404, json={"error": "not_found", "reason": "missing"})


@pytest.mark.asyncio
async def test_async_client_round_trip() -> None:
    fake = FakeCouch()
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
    calls: list[str] = []

    async with AsyncCouchClient(base_url="http://couch.test:5984", http_client=http_client) as couch:

        @couch.before("document.post")
        def record(call: RequestCall) -> None:
            calls.append(f"{call.method} {call.path}")

        root = await couch.get_root().send()
        assert root.version_triple() == (1, 6, 1)

        await couch.put_database("/inventory").send()
        with pytest.raises(ServerResponseError) as excinfo:
            await couch.put_database("/inventory").send()
        assert excinfo.value.is_database_exists()

        rev, path = await couch.post_to_database("/inventory", {"sku": "A-1"}).send()
        assert rev == Revision.parse(REV)
        assert path == DocumentPath("inventory", "generated")

        document = await couch.get_document(path).send()
        assert document is not None
        assert document.content == {"sku": "A-1"}

        with pytest.raises(ServerResponseError) as excinfo:
            await couch.get_document("/inventory/missing").send()
        assert excinfo.value.is_not_found()

    assert calls == ["POST /inventory"]
    assert all(request.url.host == "couch.test" for request in fake.requests)
    await http_client.aclose()


def test_sync_client_round_trip() -> None:
    fake = FakeCouch()
    http_client = httpx.Client(transport=httpx.MockTransport(fake))

    with CouchClient(base_url="http://couch.test:5984", http_client=http_client) as couch:
        assert couch.get_root().run().welcome == "Welcome"
        couch.put_database("/alpha").run()
        assert "alpha" in fake.databases

    http_client.close()


def test_sync_client_reports_failed_status_to_error_hooks() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/alpha/_changes":
            return httpx.Response(
                200,
                json={"results": [{"seq": 1, "id": "a", "changes": [{"rev": REV}]}], "last_seq": 1},
            )
        return httpx.Response(400, json={"error": "bad_request", "reason": "Invalid feed"})

    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    failures: list[tuple[str, int | None]] = []

    with CouchClient(base_url="http://couch.test:5984", http_client=http_client) as couch:

        @couch.on_error("database.changes")
        def record(call: RequestCall, error: Exception) -> None:
            failures.append((call.path, getattr(error, "status_code", None)))

        changes = couch.get_changes("/alpha").run()
        assert [result.id for result in changes.results] == ["a"]
        assert failures == []

        with pytest.raises(ServerResponseError) as excinfo:
            couch.get_changes("/beta").run()
        assert excinfo.value.is_invalid_request()

    assert failures == [("/beta/_changes", 400)]
    http_client.close()


@pytest.mark.asyncio
async def test_client_accepts_custom_transport() -> None:
    mock = MockTransport.scripted([MockResponse(200, json=["alpha"])])

    async with AsyncCouchClient(transport=mock) as couch:
        assert couch.transport is mock
        assert await couch.get_all_databases().send() == ["alpha"]


def test_client_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COUCHDB_URL", "http://env.test:5984")
    monkeypatch.setenv("COUCHDB_TIMEOUT_MS", "1500")

    with CouchClient.from_env() as couch:
        assert couch.client_config.base_url == "http://env.test:5984"
        assert couch.client_config.timeout_seconds == 1.5
        assert couch.transport.base_url == "http://env.test:5984"
