# -*- coding: utf-8 -*-
"""Location: ./tests/unit/mcpui/test_main.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Tests for the application factory and lifespan in mcpui.main.
"""

# Standard
from unittest.mock import AsyncMock

# Third-Party
from fastapi.middleware.cors import CORSMiddleware
from fastapi.testclient import TestClient

# First-Party
from mcpui import __version__
import mcpui.main as main
from mcpui.main import create_app
from mcpui.services.connection_manager import ConnectionManager
from mcpui.services.message_router import MessageRouter


def test_health_reports_session_count():
    with TestClient(create_app()) as client:
        assert client.get("/health").json() == {"status": "healthy", "version": __version__, "sessions": 0}

        client.portal.call(client.app.state.connection_manager.open)
        client.portal.call(client.app.state.connection_manager.open)

        assert client.get("/health").json()["sessions"] == 2


def test_lifespan_wires_services_and_closes_sessions_on_shutdown():
    app = create_app()
    with TestClient(app) as client:
        registry = app.state.session_registry
        assert isinstance(app.state.connection_manager, ConnectionManager)
        assert isinstance(app.state.message_router, MessageRouter)
        assert app.state.connection_manager.registry is registry

        session = client.portal.call(app.state.connection_manager.open)
        engine = session.engine

    assert session.is_open is False
    assert engine.closed is True
    assert session.keepalive_task is None
    assert registry._shut_down is True


def test_custom_engine_factory_is_used():
    factory = AsyncMock(return_value=AsyncMock())
    app = create_app(engine_factory=factory)
    with TestClient(app) as client:
        session = client.portal.call(app.state.connection_manager.open)
        factory.assert_awaited_once_with(session.transport)


def test_cors_middleware_follows_settings(monkeypatch):
    assert CORSMiddleware in [m.cls for m in create_app().user_middleware]

    monkeypatch.setattr(main.settings, "cors_enabled", False)
    assert CORSMiddleware not in [m.cls for m in create_app().user_middleware]
