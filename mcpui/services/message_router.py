# -*- coding: utf-8 -*-
"""Location: ./mcpui/services/message_router.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Inbound Message Router.
Resolves the session named by an inbound message and hands the payload to
that session's transport. A failed delivery is reported to the caller and
leaves the session alone; only the connection manager removes sessions.
"""

# Standard
from typing import Any, Optional

# First-Party
from mcpui.cache.session_registry import SessionRegistry
from mcpui.common.errors import DeliveryFailedError, MissingSessionIdError, SessionNotFoundError
from mcpui.services.logging_service import LoggingService

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)


class MessageRouter:
    """Route correlated inbound messages to their session.

    Examples:
        >>> import asyncio
        >>> router = MessageRouter(SessionRegistry())
        >>> try:
        ...     asyncio.run(router.route(None, {}))
        ... except MissingSessionIdError as e:
        ...     print(e)
        Missing sessionId parameter
        >>> try:
        ...     asyncio.run(router.route("nope", {}))
        ... except SessionNotFoundError as e:
        ...     print(e.session_id)
        nope
    """

    def __init__(self, registry: SessionRegistry):
        """Initialize the router.

        Args:
            registry: Registry of live sessions.
        """
        self._registry = registry

    async def route(self, session_id: Optional[str], payload: Any) -> None:
        """Deliver a payload to the session it is addressed to.

        Args:
            session_id: Session id from the request, possibly missing.
            payload: Decoded protocol payload.

        Raises:
            MissingSessionIdError: If no session id was supplied.
            SessionNotFoundError: If the session is unknown or already closed.
            DeliveryFailedError: If the transport or engine failed to handle the payload.
        """
        if not session_id:
            raise MissingSessionIdError()

        session = await self._registry.lookup(session_id)
        if session is None or not session.is_open or session.transport is None:
            logger.warning(f"Session not found: {session_id}")
            raise SessionNotFoundError(session_id)

        logger.debug(f"Handling message for session {session_id}")
        try:
            await session.transport.deliver_inbound(payload)
        except Exception as e:
            logger.error(f"Error handling message for session {session_id}: {e}")
            raise DeliveryFailedError(session_id, e) from e
