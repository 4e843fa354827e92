# -*- coding: utf-8 -*-
"""Location: ./tests/conftest.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Shared fixtures for the mcpui test suite.
"""

# Standard
from typing import Any, List, Optional
from unittest.mock import AsyncMock

# Third-Party
import pytest

# First-Party
from mcpui.cache.session_registry import SessionRegistry
import mcpui.services.logging_service as logging_service_module
from mcpui.transports.base import InboundHandler, Transport


@pytest.fixture(autouse=True)
def _keep_pytest_logging(monkeypatch):
    """Stop the application lifespan from replacing pytest's log handlers."""
    monkeypatch.setattr(logging_service_module, "_configured", True)


@pytest.fixture
def registry() -> SessionRegistry:
    """A fresh, empty session registry."""
    return SessionRegistry()


class RecordingTransport(Transport):
    """In-memory transport that records what the engine sends."""

    def __init__(self, session_id: str = "test-session"):
        self._session_id = session_id
        self.sent: List[Any] = []
        self.handler: Optional[InboundHandler] = None
        self.closed = False

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    async def is_connected(self) -> bool:
        return not self.closed

    async def send_message(self, message) -> None:
        self.sent.append(message)

    async def close(self) -> None:
        self.closed = True

    def set_inbound_handler(self, handler: Optional[InboundHandler]) -> None:
        self.handler = handler

    async def deliver_inbound(self, payload: Any) -> None:
        await self.handler(payload)


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport()


class FakeEngine:
    """Stand-in protocol engine; records its transport and close calls."""

    def __init__(self, transport: Transport):
        self.transport = transport
        self.handler = AsyncMock()
        self.close = AsyncMock()
        transport.set_inbound_handler(self.handler)


@pytest.fixture
def fake_engines() -> List[FakeEngine]:
    """Engines created by ``fake_engine_factory``, in creation order."""
    return []


@pytest.fixture
def fake_engine_factory(fake_engines):
    async def factory(transport: Transport) -> FakeEngine:
        engine = FakeEngine(transport)
        fake_engines.append(engine)
        return engine

    return factory

