# -*- coding: utf-8 -*-
"""Location: ./mcpui/transports/sse_transport.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

SSE Transport Implementation.
This module implements the Server-Sent Events transport for one MCP session:
outbound protocol messages are framed onto the session's output stream and
inbound messages (received on the POST endpoint) are delivered, one at a time
and in arrival order, to the protocol engine bound to the transport.
"""

# Standard
import asyncio
import logging
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, Optional

# Third-Party
import orjson
from sse_starlette.sse import EventSourceResponse

# First-Party
from mcpui.cache.session_registry import Session, STREAM_END
from mcpui.common.errors import StreamClosedError
from mcpui.config import settings
from mcpui.services.logging_service import LoggingService
from mcpui.transports.base import InboundHandler, Transport

# Initialize logging service first
logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

# sse_starlette pings on its own schedule; keep-alive comments are written by
# the connection manager instead, so its ping is pushed out of the way.
_SSE_STARLETTE_PING_INTERVAL = 24 * 60 * 60

# Pre-computed SSE frame components
_SSE_EVENT_PREFIX = b"event: "
_SSE_DATA_PREFIX = b"\r\ndata: "
_SSE_RETRY_PREFIX = b"\r\nretry: "
_SSE_FRAME_END = b"\r\n\r\n"
_SSE_KEEPALIVE_FRAME = b": keepalive\r\n\r\n"


def _build_sse_frame(event: bytes, data: bytes, retry: int) -> bytes:
    """Build SSE frame as bytes to avoid encode/decode overhead.

    Args:
        event: SSE event type as bytes (e.g., b'message', b'endpoint')
        data: Payload as bytes (from orjson.dumps for messages)
        retry: Retry timeout in milliseconds

    Returns:
        Complete SSE frame as bytes

    Examples:
        >>> _build_sse_frame(b"message", b'{"test": 1}', 5000)
        b'event: message\\r\\ndata: {"test": 1}\\r\\nretry: 5000\\r\\n\\r\\n'

        >>> _build_sse_frame(b"endpoint", b"/mcp/messages?sessionId=abc", 5000)
        b'event: endpoint\\r\\ndata: /mcp/messages?sessionId=abc\\r\\nretry: 5000\\r\\n\\r\\n'
    """
    return _SSE_EVENT_PREFIX + event + _SSE_DATA_PREFIX + data + _SSE_RETRY_PREFIX + str(retry).encode() + _SSE_FRAME_END


class SSETransport(Transport):
    """Transport implementation using Server-Sent Events for a single session.

    The transport is created unbound, handed to the protocol engine, then
    attached to its session once the session is registered. Nothing can be
    written before attachment.

    Examples:
        >>> transport = SSETransport("/mcp/messages")
        >>> transport.session_id is None
        True
        >>> import asyncio
        >>> asyncio.run(transport.is_connected())
        False
        >>> transport.attach(Session(id="abc"))
        >>> transport.session_id
        'abc'
        >>> transport.endpoint_url
        '/mcp/messages?sessionId=abc'
        >>> asyncio.run(transport.is_connected())
        True
    """

    def __init__(self, message_path: str, retry_timeout: Optional[int] = None):
        """Initialize SSE transport.

        Args:
            message_path: Path (including any root path) clients POST messages to.
            retry_timeout: Retry field value in milliseconds; defaults to ``settings.sse_retry_timeout``.
        """
        self._message_path = message_path
        self._retry_timeout = settings.sse_retry_timeout if retry_timeout is None else retry_timeout
        self._session: Optional[Session] = None
        self._handler: Optional[InboundHandler] = None
        self._inbound_lock = asyncio.Lock()

    def attach(self, session: Session) -> None:
        """Bind the transport to its registered session.

        Args:
            session: The session whose output stream this transport owns.

        Raises:
            RuntimeError: If the transport is already bound.
        """
        if self._session is not None:
            raise RuntimeError(f"Transport already attached to session {self._session.id}")
        self._session = session
        session.transport = self
        logger.info("SSE transport attached: %s", session.id)

    @property
    def session_id(self) -> Optional[str]:
        """Get the session ID for this transport.

        Returns:
            The bound session id, or None before attachment.
        """
        return self._session.id if self._session else None

    @property
    def endpoint_url(self) -> str:
        """URL announced to the client for correlated messages.

        Returns:
            Message path with the session id as ``sessionId`` query parameter.

        Raises:
            RuntimeError: If the transport is not attached yet.
        """
        if self._session is None:
            raise RuntimeError("Transport not attached to a session")
        return f"{self._message_path}?sessionId={self._session.id}"

    async def is_connected(self) -> bool:
        """Check if the output stream is still writable.

        Returns:
            True while the bound session is open.
        """
        return self._session is not None and self._session.is_open

    def _write(self, frame: bytes) -> None:
        """Put one frame on the session's output stream.

        Args:
            frame: Complete SSE frame.

        Raises:
            StreamClosedError: If the stream is not open.
        """
        session = self._session
        if session is None or not session.is_open:
            raise StreamClosedError(self.session_id)
        session.output.put_nowait(frame)

    async def announce_endpoint(self) -> None:
        """Send the ``endpoint`` event telling the client where to POST.

        Raises:
            StreamClosedError: If the stream is not open.
        """
        self._write(_build_sse_frame(b"endpoint", self.endpoint_url.encode(), self._retry_timeout))
        logger.info("Announced endpoint for session %s: %s", self.session_id, self.endpoint_url)

    async def send_message(self, message: Dict[str, Any]) -> None:
        """Send a message over SSE.

        Args:
            message: Message to send

        Raises:
            StreamClosedError: If the stream is no longer writable
        """
        json_bytes = orjson.dumps(message)
        self._write(_build_sse_frame(b"message", json_bytes, self._retry_timeout))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Message queued for SSE: %s, %s", self.session_id, json_bytes.decode())

    async def send_keepalive(self) -> None:
        """Send a keep-alive comment line.

        Raises:
            StreamClosedError: If the stream is no longer writable
        """
        self._write(_SSE_KEEPALIVE_FRAME)

    def set_inbound_handler(self, handler: Optional[InboundHandler]) -> None:
        """Install the engine callable inbound payloads are delivered to.

        Args:
            handler: Async callable, or None to detach.
        """
        self._handler = handler

    async def deliver_inbound(self, payload: Any) -> None:
        """Deliver one inbound payload to the protocol engine.

        Deliveries for this transport run one at a time; ``asyncio.Lock`` wakes
        waiters in FIFO order so payloads are handled in arrival order.

        Args:
            payload: Protocol payload received on the POST endpoint.

        Raises:
            StreamClosedError: If the session is closed.
            RuntimeError: If no engine handler is connected.
        """
        async with self._inbound_lock:
            if not await self.is_connected():
                raise StreamClosedError(self.session_id)
            if self._handler is None:
                raise RuntimeError(f"No protocol engine connected to session {self.session_id}")
            await self._handler(payload)

    async def close(self) -> None:
        """End the outbound stream. Safe to call repeatedly."""
        if self._session is not None and self._session.close():
            logger.info("SSE transport closed: %s", self._session.id)

    async def stream(self, on_disconnect_callback: Callable[[], Awaitable[None]] | None = None) -> AsyncGenerator[bytes, None]:
        """Drain the session's output stream.

        Ends when the session is closed. The callback runs on every exit path
        (server close, client disconnect, cancellation, error).

        Args:
            on_disconnect_callback: Async callable run when the stream ends.

        Yields:
            SSE frames as bytes.

        Raises:
            RuntimeError: If the transport is not attached.
        """
        session = self._session
        if session is None:
            raise RuntimeError("Transport not attached to a session")

        try:
            while True:
                frame = await session.output.get()
                if frame is STREAM_END:
                    logger.info("SSE stream ended by server: %s", session.id)
                    break
                yield frame
        except asyncio.CancelledError:
            logger.info("SSE event generator cancelled: %s", session.id)
            raise
        except GeneratorExit:
            logger.info("SSE generator exit (client disconnected): %s", session.id)
            raise
        except Exception as e:
            logger.error("SSE event generator error for %s: %s", session.id, e)
            raise
        finally:
            logger.info("SSE event generator completed: %s", session.id)
            if on_disconnect_callback:
                try:
                    await on_disconnect_callback()
                except Exception as e:
                    logger.warning("Disconnect callback in finally failed for %s: %s", session.id, e)

    def create_sse_response(self, on_disconnect_callback: Callable[[], Awaitable[None]] | None = None) -> EventSourceResponse:
        """Create SSE response for streaming.

        Args:
            on_disconnect_callback: Async callable run when the client goes away
                or the stream ends. Must be idempotent; it may run twice.

        Returns:
            SSE response object
        """

        async def on_client_close(_message: dict) -> None:
            """Handle client close event from sse_starlette.

            Args:
                _message: The ASGI ``http.disconnect`` message.
            """
            logger.info("SSE client close handler called: %s", self.session_id)
            if on_disconnect_callback:
                try:
                    await on_disconnect_callback()
                except Exception as e:
                    logger.warning("Disconnect callback failed for %s: %s", self.session_id, e)

        return EventSourceResponse(
            self.stream(on_disconnect_callback),
            status_code=200,
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",
            },
            ping=_SSE_STARLETTE_PING_INTERVAL,
            # Timeout for ASGI send() calls; a stalled client stops the stream
            send_timeout=settings.sse_send_timeout if settings.sse_send_timeout > 0 else None,
            client_close_handler_callable=on_client_close,
        )
