# -*- coding: utf-8 -*-
"""Location: ./mcpui/protocol/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

MCP protocol engine and MCP-UI capabilities.
"""

# First-Party
from mcpui.protocol.engine import CapabilityRegistry, ProtocolEngine

__all__ = ["CapabilityRegistry", "ProtocolEngine"]
