# -*- coding: utf-8 -*-
"""Location: ./mcpui/main.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

MCP UI Server - main FastAPI application.
Wires the session registry, connection manager and message router into the
application lifespan, installs CORS and mounts the SSE endpoints.

Examples:
    >>> from mcpui.main import app
    >>> sorted(r.path for r in app.routes if r.path in {"/mcp", "/mcp/messages", "/health"})
    ['/health', '/mcp', '/mcp/messages']
"""

# Standard
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

# Third-Party
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# First-Party
from mcpui import __version__
from mcpui.cache.session_registry import SessionRegistry
from mcpui.config import settings
from mcpui.protocol.capabilities import open_default_engine
from mcpui.protocol.engine import EngineFactory
from mcpui.routers.mcp_router import router as mcp_router
from mcpui.services.connection_manager import ConnectionManager
from mcpui.services.logging_service import LoggingService
from mcpui.services.message_router import MessageRouter

# Initialize logging service first
logging_service = LoggingService()
logger = logging_service.get_logger("mcpui")


def create_app(engine_factory: Optional[EngineFactory] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        engine_factory: Per-connection engine factory; defaults to the demo capability engine.

    Returns:
        The configured application.
    """
    factory = engine_factory or open_default_engine

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Create the session services at start-up and close every session at shutdown.

        Args:
            app: The application.

        Yields:
            None while the application serves requests.
        """
        await logging_service.initialize()
        logger.info(f"Starting {settings.app_name} {__version__}")

        registry = SessionRegistry()
        manager = ConnectionManager(registry, factory)
        app.state.session_registry = registry
        app.state.connection_manager = manager
        app.state.message_router = MessageRouter(registry)
        logger.info(f"SSE endpoint {settings.sse_path}, message endpoint {settings.message_path}")

        try:
            yield
        finally:
            logger.info("Shutting down session services")
            await manager.shutdown()
            await logging_service.shutdown()

    application = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)

    if settings.cors_enabled:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(settings.allowed_origins),
            allow_credentials="*" not in settings.allowed_origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    application.include_router(mcp_router)

    @application.get("/health")
    async def health(request: Request) -> Dict[str, Any]:
        """Report liveness and the number of live sessions.

        Args:
            request: Incoming request.

        Returns:
            Health payload.
        """
        registry: SessionRegistry = request.app.state.session_registry
        return {"status": "healthy", "version": __version__, "sessions": await registry.count()}

    return application


app = create_app()
