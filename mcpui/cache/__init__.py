# -*- coding: utf-8 -*-
"""Location: ./mcpui/cache/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

In-process session storage.
"""

# First-Party
from mcpui.cache.session_registry import Session, SessionRegistry

__all__ = ["Session", "SessionRegistry"]
