# -*- coding: utf-8 -*-
"""Location: ./mcpui/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

MCP UI Server - an SSE session transport for Model Context Protocol servers that
serve MCP-UI resources.
"""

__author__ = "MCP UI Server Contributors"
__copyright__ = "Copyright 2025"
__license__ = "Apache 2.0"
__version__ = "1.0.0"
__description__ = "Session-oriented SSE transport for MCP-UI servers"
__packages__ = ["mcpui"]
