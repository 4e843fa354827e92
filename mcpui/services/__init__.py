# -*- coding: utf-8 -*-
"""Location: ./mcpui/services/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Session services: connection lifecycle, message routing and logging.
"""
