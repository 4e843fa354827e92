# -*- coding: utf-8 -*-
"""Location: ./tests/unit/mcpui/routers/test_mcp_stream.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Wire-level tests for the SSE endpoint.
The application runs under an in-process Uvicorn server so the stream goes
through sse_starlette's EventSourceResponse and a real client disconnect.
"""

# Standard
import asyncio
import socket
from typing import AsyncIterator, List

# Third-Party
import httpx
import orjson
import pytest
import uvicorn

# First-Party
from mcpui.main import create_app

PING = {"jsonrpc": "2.0", "id": 1, "method": "ping"}


async def _next_event(lines: AsyncIterator[str]) -> List[str]:
    """Collect the lines of the next SSE event (up to the blank separator)."""
    event: List[str] = []
    while True:
        line = await asyncio.wait_for(anext(lines), timeout=5)
        if line == "":
            if event:
                return event
            continue
        event.append(line)


async def _session_count(client: httpx.AsyncClient) -> int:
    return (await client.get("/health")).json()["sessions"]


@pytest.mark.asyncio
async def test_stream_announce_post_disconnect():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    server = uvicorn.Server(uvicorn.Config(create_app(), log_config=None, lifespan="on"))
    serving = asyncio.create_task(server.serve(sockets=[sock]))

    try:
        for _ in range(500):
            if server.started:
                break
            await asyncio.sleep(0.01)
        assert server.started

        async with httpx.AsyncClient(base_url=f"http://127.0.0.1:{port}", timeout=5) as client:
            async with client.stream("GET", "/mcp") as stream:
                assert stream.status_code == 200
                assert stream.headers["content-type"].startswith("text/event-stream")
                lines = stream.aiter_lines()

                event = await _next_event(lines)
                assert event[0] == "event: endpoint"
                assert event[2].startswith("retry: ")
                endpoint = event[1][len("data: ") :]
                assert endpoint.startswith("/mcp/messages?sessionId=")
                assert await _session_count(client) == 1

                response = await client.post(endpoint, json=PING)
                assert response.status_code == 202

                event = await _next_event(lines)
                assert event[0] == "event: message"
                assert orjson.loads(event[1][len("data: ") :]) == {"jsonrpc": "2.0", "id": 1, "result": {}}

            # Leaving the stream context drops the connection
            for _ in range(200):
                if await _session_count(client) == 0:
                    break
                await asyncio.sleep(0.025)
            assert await _session_count(client) == 0

            stale = await client.post(endpoint, json=PING)
            assert stale.status_code == 404
    finally:
        server.should_exit = True
        await asyncio.wait_for(serving, timeout=10)
