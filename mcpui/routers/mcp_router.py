# -*- coding: utf-8 -*-
"""Location: ./mcpui/routers/mcp_router.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

MCP SSE Router.
This module exposes the two HTTP endpoints of the SSE transport:

- ``GET {sse_path}`` opens a long-lived event stream; its first event tells
  the client where to POST messages and with which ``sessionId``.
- ``POST {message_path}?sessionId=...`` delivers one JSON-RPC payload to the
  session's protocol engine.
"""

# Standard
from typing import Optional

# Third-Party
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import PlainTextResponse, Response
import orjson

# First-Party
from mcpui.common.errors import DeliveryFailedError, EngineStartupError, InvalidMessageError, SessionNotFoundError
from mcpui.config import settings
from mcpui.services.connection_manager import ConnectionManager
from mcpui.services.logging_service import LoggingService
from mcpui.services.message_router import MessageRouter

# Get logger instance
logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

router = APIRouter(tags=["mcp"])


def get_connection_manager(request: Request) -> ConnectionManager:
    """Resolve the connection manager created by the application lifespan.

    Args:
        request: Incoming request.

    Returns:
        The application's connection manager.
    """
    return request.app.state.connection_manager


def get_message_router(request: Request) -> MessageRouter:
    """Resolve the message router created by the application lifespan.

    Args:
        request: Incoming request.

    Returns:
        The application's message router.
    """
    return request.app.state.message_router


@router.get(settings.sse_path)
async def open_stream(request: Request, manager: ConnectionManager = Depends(get_connection_manager)) -> Response:
    """Open an SSE stream for a new session.

    Args:
        request: Incoming request.
        manager: Connection manager.

    Returns:
        The event stream, or a 500 response if the session could not be opened.
    """
    client = request.client.host if request.client else "unknown"
    logger.info(f"New SSE connection request from {client}")
    try:
        return await manager.connect(root_path=request.scope.get("root_path", ""))
    except EngineStartupError as e:
        logger.error(f"Error establishing SSE connection: {e}")
        return PlainTextResponse("Internal Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.post(settings.message_path)
async def post_message(
    request: Request,
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
    legacy_session_id: Optional[str] = Query(default=None, alias="session_id"),
    message_router: MessageRouter = Depends(get_message_router),
) -> Response:
    """Deliver one message to the session named in the query string.

    Args:
        request: Incoming request carrying the JSON-RPC payload.
        session_id: Target session (``sessionId``).
        legacy_session_id: Target session via the ``session_id`` spelling.
        message_router: Message router.

    Returns:
        202 on success; 400 for a missing id, a malformed body or an invalid
        message; 404 for an unknown session; 500 when delivery fails.
    """
    session_id = session_id or legacy_session_id
    if not session_id:
        logger.warning("Message received without sessionId parameter")
        return PlainTextResponse("Missing sessionId parameter", status_code=status.HTTP_400_BAD_REQUEST)

    try:
        payload = orjson.loads(await request.body())
    except orjson.JSONDecodeError:
        logger.warning(f"Invalid JSON body for session {session_id}")
        return PlainTextResponse("Invalid JSON body", status_code=status.HTTP_400_BAD_REQUEST)

    try:
        await message_router.route(session_id, payload)
    except SessionNotFoundError:
        return PlainTextResponse("Session not found", status_code=status.HTTP_404_NOT_FOUND)
    except DeliveryFailedError as e:
        if isinstance(e.cause, InvalidMessageError):
            return PlainTextResponse("Invalid message", status_code=status.HTTP_400_BAD_REQUEST)
        return PlainTextResponse("Internal Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return PlainTextResponse("Accepted", status_code=status.HTTP_202_ACCEPTED)
