# -*- coding: utf-8 -*-
"""Location: ./mcpui/transports/base.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Base Transport Interface.
A session transport is asymmetric: frames leave over a push-only stream while
client messages arrive through separate requests correlated by session id.
The two directions are modelled as independent interfaces, ``Outbound`` and
``Inbound``, composed into ``Transport``.
"""

# Standard
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional

InboundHandler = Callable[[Any], Awaitable[None]]


class Outbound(ABC):
    """Server-to-client direction."""

    @abstractmethod
    async def send_message(self, message: Dict[str, Any]) -> None:
        """Push one protocol message to the client.

        Args:
            message: JSON-serializable message.
        """

    @abstractmethod
    async def close(self) -> None:
        """End the outbound stream."""


class Inbound(ABC):
    """Client-to-server direction."""

    @abstractmethod
    def set_inbound_handler(self, handler: Optional[InboundHandler]) -> None:
        """Install the callable inbound payloads are delivered to.

        Args:
            handler: Async callable taking one payload, or None to detach.
        """

    @abstractmethod
    async def deliver_inbound(self, payload: Any) -> None:
        """Hand one inbound payload to the installed handler.

        Args:
            payload: Protocol payload as received.
        """


class Transport(Outbound, Inbound):
    """A logical bidirectional channel bound to one session.

    Examples:
        >>> issubclass(Transport, Outbound) and issubclass(Transport, Inbound)
        True
    """

    @property
    @abstractmethod
    def session_id(self) -> Optional[str]:
        """Session id the transport is bound to, or None before binding."""

    @abstractmethod
    async def is_connected(self) -> bool:
        """Check whether the outbound stream is still writable."""
