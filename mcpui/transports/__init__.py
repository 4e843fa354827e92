# -*- coding: utf-8 -*-
"""Location: ./mcpui/transports/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

MCP Transport Implementations.
"""

# First-Party
from mcpui.transports.base import Inbound, Outbound, Transport
from mcpui.transports.sse_transport import SSETransport

__all__ = ["Inbound", "Outbound", "SSETransport", "Transport"]
