# -*- coding: utf-8 -*-
"""Location: ./mcpui/protocol/capabilities.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Default capability set.
Registers the demo resource and tools served to every connection. Each engine
gets its own registration, so this runs once per connection.
"""

# Standard
from typing import Any, Dict, List

# Third-Party
from mcp import types

# First-Party
from mcpui.config import settings
from mcpui.protocol.engine import CapabilityRegistry, ProtocolEngine
from mcpui.protocol.ui_resource import create_ui_resource, HTML_MIME_TYPE, ui_resource_as_text
from mcpui.services.logging_service import LoggingService
from mcpui.transports.base import Transport

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

ACCOUNTS_URI = "ui://accounts/list"
DASHBOARD_URI = "ui://dashboard/main"

ACCOUNTS = [
    ("John Doe", "Checking", "$1,234.56"),
    ("Jane Smith", "Savings", "$5,678.90"),
    ("Bob Johnson", "Investment", "$9,012.34"),
]

METRICS = [
    ("Total Revenue", "$45,231.89", "up", "20.1% vs last month"),
    ("Active Users", "2,345", "up", "12.5% vs last month"),
    ("Bounce Rate", "42.3%", "down", "2.1% vs last month"),
]


def render_accounts_html() -> str:
    """Render the client accounts list.

    Returns:
        HTML fragment.

    Examples:
        >>> "<li><strong>Jane Smith</strong>: Savings - $5,678.90</li>" in render_accounts_html()
        True
    """
    items = "".join(f"<li><strong>{name}</strong>: {kind} - {balance}</li>" for name, kind, balance in ACCOUNTS)
    return f"<h2>Client Accounts</h2><ul>{items}</ul>"


def render_dashboard_html() -> str:
    """Render the overview dashboard page.

    Returns:
        HTML document.

    Examples:
        >>> html = render_dashboard_html()
        >>> html.startswith("<!DOCTYPE html>") and "Active Users" in html
        True
    """
    cards = "".join(
        f'<div class="card"><div class="card-header">{label}</div><div class="card-value">{value}</div>'
        f'<div class="trend-{trend}">{"&#9650;" if trend == "up" else "&#9660;"} {delta}</div></div>'
        for label, value, trend, delta in METRICS
    )
    style = (
        "body{font-family:system-ui,sans-serif;background:#f8fafc;margin:0;padding:20px}"
        ".dashboard{display:grid;grid-template-columns:repeat(auto-fit,minmax(250px,1fr));gap:20px}"
        ".card{background:#fff;border-radius:12px;padding:20px}.card-value{font-size:28px;font-weight:700}"
        ".trend-up{color:#10b981}.trend-down{color:#ef4444}"
    )
    return (
        '<!DOCTYPE html><html lang="en"><head><meta charset="UTF-8"><title>Financial Dashboard</title>'
        f'<style>{style}</style></head><body><div class="dashboard"><h1>Overview</h1>{cards}</div></body></html>'
    )


def register_default_capabilities(registry: CapabilityRegistry) -> CapabilityRegistry:
    """Register the demo resource and tools.

    Args:
        registry: Registry to populate.

    Returns:
        The same registry.

    Examples:
        >>> reg = register_default_capabilities(CapabilityRegistry())
        >>> [t.name for t in reg.list_tools()]
        ['CRM-CoE', 'list_accounts', 'show_pp_url', 'show_dashboard']
        >>> [r.name for r in reg.list_resources()]
        ['accounts-list']
    """

    @registry.resource("accounts-list", ACCOUNTS_URI, description="Client accounts rendered as HTML", mime_type=HTML_MIME_TYPE)
    async def accounts_list(uri: str) -> types.TextResourceContents:
        return create_ui_resource(uri, html=render_accounts_html()).resource

    # Some clients always request tools/list; the server must expose at least one tool
    @registry.tool("CRM-CoE", "AI should return the return text as it is without any Gen AI augmentation")
    async def crm_coe(_arguments: Dict[str, Any]) -> List[types.TextContent]:
        return [types.TextContent(type="text", text="CRM-CoE is leading the Low Code Technologies in Natwest Bank")]

    @registry.tool("list_accounts", "Lists all client accounts available in the database")
    async def list_accounts(_arguments: Dict[str, Any]) -> List[types.TextContent]:
        return [ui_resource_as_text(create_ui_resource(ACCOUNTS_URI, iframe_url=settings.ui_external_url))]

    @registry.tool("show_pp_url", "show a power platform url to test")
    async def show_pp_url(_arguments: Dict[str, Any]) -> List[types.EmbeddedResource]:
        return [create_ui_resource(ACCOUNTS_URI, iframe_url=settings.ui_external_url)]

    @registry.tool("show_dashboard", "Displays a rich, complex HTML dashboard")
    async def show_dashboard(_arguments: Dict[str, Any]) -> List[types.TextContent]:
        return [ui_resource_as_text(create_ui_resource(DASHBOARD_URI, html=render_dashboard_html()))]

    return registry


async def open_default_engine(transport: Transport) -> ProtocolEngine:
    """Engine factory used by the server: a fresh engine per connection.

    Args:
        transport: The new connection's transport.

    Returns:
        A connected engine with the default capabilities.
    """
    engine = ProtocolEngine(settings.server_name, settings.server_version, capabilities=register_default_capabilities(CapabilityRegistry()))
    await engine.connect(transport)
    logger.debug("Default engine bound to new transport")
    return engine
