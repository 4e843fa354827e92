# -*- coding: utf-8 -*-
"""Location: ./mcpui/services/connection_manager.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Connection Lifecycle Manager.
Drives every SSE connection through its states:

- **Opening**: bind a fresh protocol engine to a new transport, register the
  session, announce the message endpoint.
- **Active**: keep-alive comments are written on a fixed interval.
- **Closing**: on stream close or stream error (whichever comes first) the
  keep-alive task is cancelled, the session removed and the engine released.
- **Terminal**: the session id is no longer routable.

Teardown is guarded by a one-shot marker on the session, so the close and error
paths may both fire without side effects.
"""

# Standard
import asyncio
import time
from typing import Any, Optional

# Third-Party
from sse_starlette.sse import EventSourceResponse

# First-Party
from mcpui.cache.session_registry import Session, SessionRegistry
from mcpui.common.errors import EngineStartupError, StreamClosedError
from mcpui.config import settings
from mcpui.protocol.engine import EngineFactory
from mcpui.services.logging_service import LoggingService
from mcpui.transports.sse_transport import SSETransport

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)


class ConnectionManager:
    """Open, keep alive and tear down SSE sessions.

    Examples:
        >>> from unittest.mock import AsyncMock
        >>> manager = ConnectionManager(SessionRegistry(), AsyncMock())
        >>> manager.keepalive_interval
        15.0
    """

    def __init__(
        self,
        registry: SessionRegistry,
        engine_factory: EngineFactory,
        message_path: Optional[str] = None,
        keepalive_interval: Optional[float] = None,
        keepalive_enabled: Optional[bool] = None,
    ):
        """Initialize the manager.

        Args:
            registry: Registry holding live sessions.
            engine_factory: Async callable creating a connected engine for a transport.
            message_path: Path announced for correlated messages; defaults to ``settings.message_path``.
            keepalive_interval: Seconds between keep-alive comments; defaults to ``settings.sse_keepalive_interval``.
            keepalive_enabled: Whether to send keep-alive comments; defaults to ``settings.sse_keepalive_enabled``.
        """
        self._registry = registry
        self._engine_factory = engine_factory
        self.message_path = message_path or settings.message_path
        self.keepalive_interval = settings.sse_keepalive_interval if keepalive_interval is None else keepalive_interval
        self.keepalive_enabled = settings.sse_keepalive_enabled if keepalive_enabled is None else keepalive_enabled

    @property
    def registry(self) -> SessionRegistry:
        """Registry the manager writes to."""
        return self._registry

    async def open(self, root_path: str = "") -> Session:
        """Run the Opening state for a new connection.

        The engine is bound before the session is registered, so a failing
        engine leaves nothing behind. The session is registered before the
        endpoint announcement is written.

        Args:
            root_path: ASGI root path prefixed to the announced message path.

        Returns:
            The open, registered session with its endpoint announced.

        Raises:
            EngineStartupError: If the engine could not be bound to the transport
                or the session could not be registered.
        """
        transport = SSETransport(f"{root_path}{self.message_path}")

        try:
            engine = await self._engine_factory(transport)
        except Exception as e:
            logger.error("Protocol engine failed to start: %s", e)
            raise EngineStartupError(f"Protocol engine failed to start: {e}") from e

        try:
            session = await self._registry.create(transport)
        except Exception as e:
            logger.error("Could not register session: %s", e)
            await self._release(engine)
            raise EngineStartupError(f"Could not register session: {e}") from e
        transport.attach(session)
        session.engine = engine

        try:
            await transport.announce_endpoint()
        except StreamClosedError as e:
            await self.close(session.id, reason="announcement failed")
            raise EngineStartupError(f"Could not announce endpoint: {e}") from e

        if self.keepalive_enabled:
            session.keepalive_task = asyncio.create_task(self._keepalive_loop(session, transport), name=f"sse-keepalive-{session.id}")

        logger.info("SSE session opened: %s", session.id)
        return session

    async def connect(self, root_path: str = "") -> EventSourceResponse:
        """Open a session and return its streaming response.

        Args:
            root_path: ASGI root path of the request.

        Returns:
            The SSE response; it stays open for the lifetime of the connection.
        """
        session = await self.open(root_path)

        async def on_disconnect() -> None:
            await self.close(session.id, reason="stream closed")

        return session.transport.create_sse_response(on_disconnect_callback=on_disconnect)

    async def _keepalive_loop(self, session: Session, transport: SSETransport) -> None:
        """Write keep-alive comments while the session is open.

        Write failures are logged only; stream close detection owns teardown.

        Args:
            session: Session to keep alive.
            transport: Its transport.
        """
        while session.is_open:
            await asyncio.sleep(self.keepalive_interval)
            if not session.is_open:
                break
            try:
                await transport.send_keepalive()
                logger.debug("Sent keepalive for session %s", session.id)
            except StreamClosedError as e:
                logger.warning("Keepalive write failed for session %s: %s", session.id, e)
            except Exception as e:
                logger.warning("Unexpected keepalive error for session %s: %s", session.id, e)

    async def close(self, session_id: str, reason: str = "closed") -> bool:
        """Tear a session down. Only the first call for a session acts.

        Args:
            session_id: Session to close.
            reason: Logged reason (stream closed, stream error, shutdown, ...).

        Returns:
            True if this call performed the teardown.
        """
        session = await self._registry.lookup(session_id)
        if session is None or not session.terminate():
            logger.debug("Session %s already torn down (%s)", session_id, reason)
            return False

        session.close()
        session.cancel_keepalive()
        await self._registry.remove(session_id)

        engine, session.engine = session.engine, None
        if engine is not None:
            await self._release(engine, session_id)

        logger.info("SSE session closed: %s (%s) after %.0fs", session_id, reason, time.monotonic() - session.created_at)
        return True

    async def _release(self, engine: Any, session_id: Optional[str] = None) -> None:
        """Close a protocol engine, logging instead of raising.

        Args:
            engine: Engine to release.
            session_id: Owning session, if one was registered.
        """
        try:
            await engine.close()
        except Exception as e:
            logger.error("Error releasing protocol engine for session %s: %s", session_id, e)

    async def shutdown(self) -> None:
        """Close every live session, then shut the registry down."""
        sessions = await self._registry.list_sessions()
        logger.info("Closing %d live session(s) for shutdown", len(sessions))
        for session in sessions:
            await self.close(session.id, reason="shutdown")
        await self._registry.shutdown()
