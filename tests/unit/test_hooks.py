from __future__ import annotations

import asyncio

import pytest

from couch_client.hooks import HookRegistry, RequestCall


@pytest.mark.asyncio
async def test_registry_executes_sync_and_async_hooks() -> None:
    registry = HookRegistry()
    events: list[str] = []

    def before(_call: RequestCall) -> None:
        events.append("before")

    async def after(_call: RequestCall, status_code: int) -> None:
        await asyncio.sleep(0)
        events.append(f"after:{status_code}")

    registry.add_before("*", before)
    registry.add_after("*", after)

    call = RequestCall(operation="database.get", method="GET", path="/db")
    await registry.run_before(call)
    await registry.run_after(call, 200)

    assert events == ["before", "after:200"]


@pytest.mark.asyncio
async def test_wildcard_hooks_run_before_operation_hooks() -> None:
    registry = HookRegistry()
    events: list[str] = []

    registry.add_before("document.put", lambda _call: events.append("exact"))
    registry.add_before("*", lambda _call: events.append("wildcard"))
    registry.add_before("document.get", lambda _call: events.append("other"))

    await registry.run_before(RequestCall(operation="document.put", method="PUT", path="/db/doc"))

    assert events == ["wildcard", "exact"]


@pytest.mark.asyncio
async def test_registry_executes_middleware_in_order() -> None:
    registry = HookRegistry()
    events: list[str] = []

    class Middleware:
        async def before(self, _call: RequestCall) -> None:
            events.append("mw.before")

        def after(self, _call: RequestCall, status_code: int) -> None:
            events.append(f"mw.after:{status_code}")

        def on_error(self, _call: RequestCall, error: Exception) -> None:
            events.append(f"mw.error:{error}")

    registry.add_middleware("*", Middleware())
    call = RequestCall(operation="server.root", method="GET", path="/")
    await registry.run_before(call)
    await registry.run_after(call, 200)
    await registry.run_error(call, RuntimeError("boom"))

    assert events == ["mw.before", "mw.after:200", "mw.error:boom"]


def test_middleware_requires_all_hooks() -> None:
    class Incomplete:
        def before(self, _call: RequestCall) -> None:
            return None

    with pytest.raises(TypeError):
        HookRegistry().add_middleware("*", Incomplete())
