# -*- coding: utf-8 -*-
"""Location: ./tests/unit/mcpui/services/test_message_router.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Tests for mcpui.services.message_router.
"""

# Standard
import asyncio
from unittest.mock import AsyncMock

# Third-Party
import pytest

# First-Party
from mcpui.common.errors import DeliveryFailedError, MissingSessionIdError, SessionNotFoundError
from mcpui.services.message_router import MessageRouter
from mcpui.transports.sse_transport import SSETransport


async def _open(registry, handler=None):
    transport = SSETransport("/mcp/messages")
    if handler is not None:
        transport.set_inbound_handler(handler)
    session = await registry.create(transport)
    transport.attach(session)
    return session


@pytest.mark.asyncio
@pytest.mark.parametrize("session_id", [None, ""])
async def test_missing_session_id(registry, session_id):
    with pytest.raises(MissingSessionIdError):
        await MessageRouter(registry).route(session_id, {"jsonrpc": "2.0", "method": "ping", "id": 1})


@pytest.mark.asyncio
async def test_unknown_session_leaves_registry_untouched(registry):
    existing = await _open(registry, AsyncMock())

    with pytest.raises(SessionNotFoundError) as exc_info:
        await MessageRouter(registry).route("unknown", {})

    assert exc_info.value.session_id == "unknown"
    assert [s.id for s in await registry.list_sessions()] == [existing.id]


@pytest.mark.asyncio
async def test_closed_but_registered_session_is_not_found(registry):
    session = await _open(registry, AsyncMock())
    session.close()

    with pytest.raises(SessionNotFoundError):
        await MessageRouter(registry).route(session.id, {})


@pytest.mark.asyncio
async def test_session_without_transport_is_not_found(registry):
    session = await registry.create()
    with pytest.raises(SessionNotFoundError):
        await MessageRouter(registry).route(session.id, {})


@pytest.mark.asyncio
async def test_route_delivers_payload(registry):
    handler = AsyncMock()
    session = await _open(registry, handler)
    payload = {"jsonrpc": "2.0", "id": 7, "method": "tools/list"}

    await MessageRouter(registry).route(session.id, payload)

    handler.assert_awaited_once_with(payload)


@pytest.mark.asyncio
async def test_delivery_failure_keeps_session(registry):
    session = await _open(registry, AsyncMock(side_effect=ValueError("bad payload")))

    with pytest.raises(DeliveryFailedError) as exc_info:
        await MessageRouter(registry).route(session.id, {"junk": True})

    assert isinstance(exc_info.value.cause, ValueError)
    assert exc_info.value.__cause__ is exc_info.value.cause
    assert await registry.lookup(session.id) is session
    assert session.is_open


@pytest.mark.asyncio
async def test_missing_engine_is_a_delivery_failure(registry):
    session = await _open(registry)

    with pytest.raises(DeliveryFailedError) as exc_info:
        await MessageRouter(registry).route(session.id, {})

    assert isinstance(exc_info.value.cause, RuntimeError)


@pytest.mark.asyncio
async def test_concurrent_routes_for_one_session_keep_order(registry):
    handled = []

    async def handler(payload):
        await asyncio.sleep(0.01 * (3 - payload["n"]))
        handled.append(payload["n"])

    session = await _open(registry, handler)
    router = MessageRouter(registry)

    await asyncio.gather(*(router.route(session.id, {"n": n}) for n in range(4)))

    assert handled == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_sessions_do_not_block_each_other(registry):
    gate = asyncio.Event()
    handled = []

    async def blocked(payload):
        await gate.wait()
        handled.append("a")

    async def free(payload):
        handled.append("b")

    slow = await _open(registry, blocked)
    fast = await _open(registry, free)
    router = MessageRouter(registry)

    pending = asyncio.create_task(router.route(slow.id, {}))
    await asyncio.sleep(0)
    await router.route(fast.id, {})
    assert handled == ["b"]

    gate.set()
    await pending
    assert handled == ["b", "a"]
