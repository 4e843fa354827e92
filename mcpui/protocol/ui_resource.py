# -*- coding: utf-8 -*-
"""Location: ./mcpui/protocol/ui_resource.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

MCP-UI resource helpers.
MCP-UI clients render embedded resources whose URI uses the ``ui://`` scheme:
``text/html`` resources are rendered as inline HTML, ``text/uri-list``
resources as an iframe pointing at the listed URL.

Examples:
    >>> res = create_ui_resource("ui://demo/1", html="<p>hi</p>")
    >>> (res.type, res.resource.mimeType, res.resource.text)
    ('resource', 'text/html', '<p>hi</p>')
    >>> res = create_ui_resource("ui://demo/2", iframe_url="https://example.com", encoding="blob")
    >>> (res.resource.mimeType, res.resource.blob)
    ('text/uri-list', 'aHR0cHM6Ly9leGFtcGxlLmNvbQ==')
"""

# Standard
import base64
from typing import Literal, Optional

# Third-Party
from mcp import types
import orjson

UI_SCHEME = "ui://"
HTML_MIME_TYPE = "text/html"
URI_LIST_MIME_TYPE = "text/uri-list"


def create_ui_resource(
    uri: str,
    *,
    html: Optional[str] = None,
    iframe_url: Optional[str] = None,
    encoding: Literal["text", "blob"] = "text",
) -> types.EmbeddedResource:
    """Build an MCP-UI embedded resource.

    Exactly one of ``html`` and ``iframe_url`` must be given.

    Args:
        uri: Resource URI; must start with ``ui://``.
        html: Raw HTML to render inline.
        iframe_url: External URL to render in an iframe.
        encoding: ``text`` stores the payload as text, ``blob`` as base64.

    Returns:
        The embedded resource content block.

    Raises:
        ValueError: On a non ``ui://`` URI, a bad content combination or an unknown encoding.

    Examples:
        >>> create_ui_resource("https://x", html="<p/>")
        Traceback (most recent call last):
        ...
        ValueError: UI resource URI must start with 'ui://': 'https://x'
        >>> create_ui_resource("ui://x")
        Traceback (most recent call last):
        ...
        ValueError: Exactly one of html or iframe_url is required
    """
    if not uri.startswith(UI_SCHEME):
        raise ValueError(f"UI resource URI must start with {UI_SCHEME!r}: {uri!r}")
    if (html is None) == (iframe_url is None):
        raise ValueError("Exactly one of html or iframe_url is required")

    if html is not None:
        mime_type, payload = HTML_MIME_TYPE, html
    else:
        mime_type, payload = URI_LIST_MIME_TYPE, iframe_url

    if encoding == "text":
        contents = types.TextResourceContents(uri=uri, mimeType=mime_type, text=payload)
    elif encoding == "blob":
        blob = base64.b64encode(payload.encode("utf-8")).decode("ascii")
        contents = types.BlobResourceContents(uri=uri, mimeType=mime_type, blob=blob)
    else:
        raise ValueError(f"Unknown encoding: {encoding!r}")

    return types.EmbeddedResource(type="resource", resource=contents)


def ui_resource_as_text(resource: types.EmbeddedResource) -> types.TextContent:
    """Wrap a UI resource as a JSON text block.

    Some clients only forward text content from tool results; they receive the
    serialized resource and render it themselves.

    Args:
        resource: The embedded UI resource.

    Returns:
        Text content holding the resource as JSON.

    Examples:
        >>> block = ui_resource_as_text(create_ui_resource("ui://a", html="<b>x</b>"))
        >>> orjson.loads(block.text)["resource"]["mimeType"]
        'text/html'
    """
    data = resource.model_dump(by_alias=True, mode="json", exclude_none=True)
    return types.TextContent(type="text", text=orjson.dumps(data).decode())
