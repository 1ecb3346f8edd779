"""Top-level CouchDB clients (sync + async).

Each client method constructs an action without sending it. Await
``action.send()`` with ``AsyncCouchClient``; call ``action.run()`` with
``CouchClient``.
"""

from __future__ import annotations

from typing import Any, Callable

import httpx

from .actions import (
    DeleteDatabase,
    DeleteDocument,
    GetAllDatabases,
    GetChanges,
    GetDatabase,
    GetDocument,
    GetRoot,
    GetView,
    HeadDatabase,
    HeadDocument,
    PostToDatabase,
    PutDatabase,
    PutDocument,
)
from .actions.document import RevisionLike
from .config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, ClientConfig
from .hooks import HookRegistry, RequestCall
from .paths import DatabasePathLike, DocumentPathLike, ViewPathLike
from .protocols import HookMiddleware, Transport
from .transport import AsyncTransport, SyncTransport


class _ActionFactory:
    """Action constructors shared by both clients."""

    _transport: Transport
    _hooks: HookRegistry

    @property
    def transport(self) -> Transport:
        return self._transport

    def get_root(self) -> GetRoot:
        return GetRoot(self._transport)

    def get_all_databases(self) -> GetAllDatabases:
        return GetAllDatabases(self._transport)

    def put_database(self, path: DatabasePathLike) -> PutDatabase:
        return PutDatabase(self._transport, path)

    def delete_database(self, path: DatabasePathLike) -> DeleteDatabase:
        return DeleteDatabase(self._transport, path)

    def head_database(self, path: DatabasePathLike) -> HeadDatabase:
        return HeadDatabase(self._transport, path)

    def get_database(self, path: DatabasePathLike) -> GetDatabase:
        return GetDatabase(self._transport, path)

    def get_changes(self, path: DatabasePathLike) -> GetChanges:
        return GetChanges(self._transport, path)

    def get_document(self, path: DocumentPathLike) -> GetDocument:
        return GetDocument(self._transport, path)

    def head_document(self, path: DocumentPathLike) -> HeadDocument:
        return HeadDocument(self._transport, path)

    def delete_document(self, path: DocumentPathLike, rev: RevisionLike) -> DeleteDocument:
        return DeleteDocument(self._transport, path, rev)

    def post_to_database(self, path: DatabasePathLike, content: Any) -> PostToDatabase:
        return PostToDatabase(self._transport, path, content)

    def put_document(self, path: DocumentPathLike, content: Any) -> PutDocument:
        return PutDocument(self._transport, path, content)

    def get_view(self, path: ViewPathLike, *, key_type: Any = Any, value_type: Any = Any) -> GetView:
        return GetView(self._transport, path, key_type=key_type, value_type=value_type)

    def before(self, operation: str = "*") -> Callable[[Callable[[RequestCall], Any]], Callable[[RequestCall], Any]]:
        def decorator(func: Callable[[RequestCall], Any]) -> Callable[[RequestCall], Any]:
            self._hooks.add_before(operation, func)
            return func

        return decorator

    def after(self, operation: str = "*") -> Callable[[Callable[[RequestCall, int], Any]], Callable[[RequestCall, int], Any]]:
        def decorator(func: Callable[[RequestCall, int], Any]) -> Callable[[RequestCall, int], Any]:
            self._hooks.add_after(operation, func)
            return func

        return decorator

    def on_error(self, operation: str = "*") -> Callable[[Callable[[RequestCall, Exception], Any]], Callable[[RequestCall, Exception], Any]]:
        def decorator(func: Callable[[RequestCall, Exception], Any]) -> Callable[[RequestCall, Exception], Any]:
            self._hooks.add_error(operation, func)
            return func

        return decorator

    def use_middleware(self, middleware: HookMiddleware, *, operation: str = "*") -> None:
        self._hooks.add_middleware(operation, middleware)


class CouchClient(_ActionFactory):
    """Synchronous CouchDB client."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        headers: dict[str, str] | None = None,
        http_client: httpx.Client | None = None,
        transport: Transport | None = None,
        hook_registry: HookRegistry | None = None,
    ) -> None:
        self.client_config = ClientConfig(
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            headers=dict(headers or {}),
        )
        self._hooks = hook_registry or HookRegistry()
        self._client = http_client
        self._owns_client = False
        if transport is None:
            if self._client is None:
                self._client = httpx.Client(
                    timeout=self.client_config.timeout_seconds,
                    headers=self.client_config.headers,
                )
                self._owns_client = True
            transport = SyncTransport(self._client, self.client_config.base_url, hooks=self._hooks)
        self._transport = transport

    @classmethod
    def from_env(cls) -> "CouchClient":
        cfg = ClientConfig.from_env()
        return cls(base_url=cfg.base_url, timeout_seconds=cfg.timeout_seconds, headers=cfg.headers)

    @classmethod
    def from_profile(cls, profile: str | None = None) -> "CouchClient":
        cfg = ClientConfig.from_profile(profile)
        return cls(base_url=cfg.base_url, timeout_seconds=cfg.timeout_seconds, headers=cfg.headers)

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()

    def __enter__(self) -> "CouchClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class AsyncCouchClient(_ActionFactory):
    """Asynchronous CouchDB client."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        headers: dict[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
        transport: Transport | None = None,
        hook_registry: HookRegistry | None = None,
    ) -> None:
        self.client_config = ClientConfig(
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            headers=dict(headers or {}),
        )
        self._hooks = hook_registry or HookRegistry()
        self._client = http_client
        self._owns_client = False
        if transport is None:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=self.client_config.timeout_seconds,
                    headers=self.client_config.headers,
                )
                self._owns_client = True
            transport = AsyncTransport(self._client, self.client_config.base_url, hooks=self._hooks)
        self._transport = transport

    @classmethod
    def from_env(cls) -> "AsyncCouchClient":
        cfg = ClientConfig.from_env()
        return cls(base_url=cfg.base_url, timeout_seconds=cfg.timeout_seconds, headers=cfg.headers)

    @classmethod
    def from_profile(cls, profile: str | None = None) -> "AsyncCouchClient":
        cfg = ClientConfig.from_profile(profile)
        return cls(base_url=cfg.base_url, timeout_seconds=cfg.timeout_seconds, headers=cfg.headers)

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncCouchClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
