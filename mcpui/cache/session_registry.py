# -*- coding: utf-8 -*-
"""Location: ./mcpui/cache/session_registry.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Session Registry.
This module provides the in-process registry of live SSE sessions. The registry
is the single shared mutable structure of the server: stream handlers insert
and remove sessions, message handlers look them up. All access goes through one
asyncio lock.

Examples:
    >>> import asyncio
    >>> from mcpui.cache.session_registry import SessionRegistry
    >>> reg = SessionRegistry()
    >>> session = asyncio.run(reg.create())
    >>> found = asyncio.run(reg.lookup(session.id))
    >>> found is session
    True
    >>> asyncio.run(reg.remove(session.id)) is session
    True
    >>> asyncio.run(reg.lookup(session.id)) is None
    True
    >>> asyncio.run(reg.remove(session.id)) is None
    True
"""

# Standard
import asyncio
from dataclasses import dataclass, field
import time
from typing import Any, Dict, List, Optional
import uuid

# First-Party
from mcpui.services.logging_service import LoggingService

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

# Marks the end of a session's output stream
STREAM_END = None


def generate_session_id() -> str:
    """Generate a fresh, unguessable session id.

    Returns:
        A random UUID4 string.

    Examples:
        >>> a, b = generate_session_id(), generate_session_id()
        >>> a != b and len(a) == 36
        True
    """
    return str(uuid.uuid4())


@dataclass(eq=False)
class Session:
    """One streaming connection and the id clients use to reach it.

    ``output`` is written only by the session's transport and drained only by
    its stream response. ``close`` ends the stream; ``terminate`` is the
    one-shot marker guarding teardown.

    Examples:
        >>> s = Session(id="s1")
        >>> s.is_open
        True
        >>> s.close(), s.close()
        (True, False)
        >>> s.output.get_nowait() is STREAM_END
        True
        >>> s.terminate(), s.terminate()
        (True, False)
    """

    id: str
    output: "asyncio.Queue[Optional[bytes]]" = field(default_factory=asyncio.Queue)
    is_open: bool = True
    keepalive_task: Optional[asyncio.Task] = None
    transport: Any = None
    engine: Any = None
    created_at: float = field(default_factory=time.monotonic)
    _terminated: bool = field(default=False, init=False, repr=False)

    def close(self) -> bool:
        """Mark the session closed and end its output stream.

        Returns:
            True if this call closed the session, False if it was already closed.
        """
        if not self.is_open:
            return False
        self.is_open = False
        self.output.put_nowait(STREAM_END)
        return True

    def terminate(self) -> bool:
        """Enter the terminal state.

        Returns:
            True for the first caller only.
        """
        if self._terminated:
            return False
        self._terminated = True
        return True

    @property
    def terminated(self) -> bool:
        """Whether teardown has started for this session."""
        return self._terminated

    def cancel_keepalive(self) -> bool:
        """Cancel the keep-alive task if one is running.

        Returns:
            True if a running task was cancelled.

        Examples:
            >>> Session(id="s2").cancel_keepalive()
            False
        """
        task, self.keepalive_task = self.keepalive_task, None
        if task is None or task.done():
            return False
        task.cancel()
        return True


class SessionRegistry:
    """Registry of live SSE sessions keyed by session id.

    Absence of an id means the session never existed or has already been torn
    down; callers cannot and should not distinguish the two.

    Attributes:
        _sessions: Mapping of session id to Session
        _lock: Asyncio lock serializing every access to _sessions

    Examples:
        >>> import asyncio
        >>> reg = SessionRegistry()
        >>> async def open_three():
        ...     return await asyncio.gather(*(reg.create() for _ in range(3)))
        >>> sessions = asyncio.run(open_three())
        >>> len({s.id for s in sessions})
        3
        >>> asyncio.run(reg.count())
        3
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._sessions: Dict[str, Session] = {}
        self._lock = asyncio.Lock()
        self._shut_down = False

    async def create(self, transport: Any = None) -> Session:
        """Create, register and return a new open session.

        Args:
            transport: Transport to attach to the session before it becomes visible.

        Returns:
            The registered session.

        Raises:
            RuntimeError: If the registry has been shut down.
        """
        async with self._lock:
            if self._shut_down:
                raise RuntimeError("Session registry is shut down")
            session_id = generate_session_id()
            while session_id in self._sessions:
                session_id = generate_session_id()
            session = Session(id=session_id, transport=transport)
            self._sessions[session_id] = session

        logger.info(f"Registered session: {session_id}")
        return session

    async def lookup(self, session_id: str) -> Optional[Session]:
        """Get a live session by id.

        Args:
            session_id: Session identifier to look up.

        Returns:
            The session, or None when unknown.
        """
        async with self._lock:
            return self._sessions.get(session_id)

    async def remove(self, session_id: str) -> Optional[Session]:
        """Remove a session. Removing an unknown id is a no-op.

        Args:
            session_id: Session identifier to remove.

        Returns:
            The removed session, or None if it was not registered.
        """
        async with self._lock:
            session = self._sessions.pop(session_id, None)

        if session is not None:
            logger.info(f"Removed session: {session_id}")
        else:
            logger.debug(f"Session {session_id} already removed")
        return session

    async def list_sessions(self) -> List[Session]:
        """Snapshot of every live session.

        Returns:
            List of sessions at the time of the call.
        """
        async with self._lock:
            return list(self._sessions.values())

    async def count(self) -> int:
        """Number of live sessions.

        Returns:
            Session count.
        """
        async with self._lock:
            return len(self._sessions)

    async def shutdown(self) -> None:
        """Refuse new sessions and drop any that remain registered.

        Owners are expected to close their sessions first; anything left here
        is closed so its stream ends.
        """
        async with self._lock:
            self._shut_down = True
            leftover = list(self._sessions.values())
            self._sessions.clear()

        for session in leftover:
            logger.warning(f"Session {session.id} still registered at shutdown, closing")
            session.cancel_keepalive()
            session.close()
        logger.info("Session registry shut down")
