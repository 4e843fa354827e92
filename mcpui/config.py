# -*- coding: utf-8 -*-
"""Location: ./mcpui/config.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

MCP UI Server Configuration.
This module defines configuration settings for the MCP UI server using
Pydantic settings. Every value can be overridden through environment
variables or a ``.env`` file.

Examples:
    >>> from mcpui.config import Settings
    >>> s = Settings(_env_file=None)
    >>> s.sse_path, s.message_path
    ('/mcp', '/mcp/messages')
    >>> s.sse_keepalive_interval
    15.0
"""

# Standard
from functools import lru_cache
from typing import Annotated, Literal, Set

# Third-Party
import orjson
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """MCP UI server configuration settings.

    Examples:
        >>> s = Settings(allowed_origins="https://a.com, https://b.com", _env_file=None)
        >>> sorted(s.allowed_origins)
        ['https://a.com', 'https://b.com']
        >>> Settings(port=8080, _env_file=None).port
        8080
    """

    app_name: str = Field(default="MCP_UI_Server", description="Application name shown in logs and health checks")
    host: str = Field(default="127.0.0.1", description="Interface to bind the HTTP server to")
    port: int = Field(default=3001, ge=1, le=65535, description="Port to bind the HTTP server to")

    # Endpoints
    sse_path: str = Field(default="/mcp", description="Path of the stream-open (SSE) endpoint")
    message_path: str = Field(default="/mcp/messages", description="Path clients POST correlated messages to")

    # SSE transport
    sse_keepalive_enabled: bool = Field(default=True, description="Emit periodic keep-alive comments on open streams")
    sse_keepalive_interval: float = Field(default=15.0, gt=0, description="Seconds between keep-alive comments")
    sse_retry_timeout: int = Field(default=5000, ge=0, description="Client reconnect delay (ms) advertised in the retry field of each frame")
    sse_send_timeout: float = Field(default=30.0, ge=0, description="Timeout for a single ASGI send on a stream (0 disables)")

    # CORS
    cors_enabled: bool = Field(default=True, description="Enable the CORS middleware")
    allowed_origins: Annotated[Set[str], NoDecode] = Field(default_factory=lambda: {"*"}, description="Allowed CORS origins (JSON list or comma separated)")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Root log level")
    log_format: Literal["text", "json"] = Field(default="text", description="Console log format")

    # Protocol engine
    server_name: str = Field(default="mcp-ui-server", description="serverInfo.name reported on initialize")
    server_version: str = Field(default="1.0.0", description="serverInfo.version reported on initialize")
    ui_external_url: str = Field(default="https://google.com", description="iframe target used by the demo externalUrl UI resources")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_allowed_origins(cls, v):
        """Accept a JSON array or a comma separated string.

        Args:
            v: Raw value from the environment or constructor.

        Returns:
            Set of origins.
        """
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("["):
                return set(orjson.loads(v))
            return {origin.strip() for origin in v.split(",") if origin.strip()}
        return set(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        """Normalise the log level to upper case.

        Args:
            v: Raw log level.

        Returns:
            Upper-cased log level.
        """
        return v.upper() if isinstance(v, str) else v

    @field_validator("sse_path", "message_path")
    @classmethod
    def _validate_path(cls, v: str) -> str:
        """Endpoint paths must be absolute and must not end with a slash.

        Args:
            v: Configured path.

        Returns:
            The path without a trailing slash.

        Raises:
            ValueError: If the path does not start with ``/``.
        """
        if not v.startswith("/"):
            raise ValueError(f"Endpoint path must start with '/': {v!r}")
        return v.rstrip("/") or "/"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: A cached instance of the Settings class.

    Examples:
        >>> get_settings() is get_settings()
        True
    """
    return Settings()


settings = get_settings()
