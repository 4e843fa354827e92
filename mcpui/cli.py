# -*- coding: utf-8 -*-
"""Location: ./mcpui/cli.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

mcp-ui-server CLI - a thin wrapper around Uvicorn.
The ``mcp-ui-server`` console script forwards its arguments to Uvicorn,
injecting the application path and the configured host and port when the user
did not give them::

    mcp-ui-server                      # serve mcpui.main:app on settings.host:settings.port
    mcp-ui-server --reload             # any Uvicorn flag is passed through
    mcp-ui-server --port 9000          # explicit values win
    mcp-ui-server --version

Sessions live in process memory, so the server must run as one worker.
"""

# Future
from __future__ import annotations

# Standard
import sys
from typing import List

# Third-Party
import uvicorn

# First-Party
from mcpui import __version__
from mcpui.config import settings

DEFAULT_APP = "mcpui.main:app"
DEFAULT_HOST = settings.host
DEFAULT_PORT = settings.port


def _needs_app(args: List[str]) -> bool:
    """Return True when no positional application path was given.

    Args:
        args: Arguments after the program name.

    Returns:
        True if the first argument is missing or is an option.

    Examples:
        >>> _needs_app([])
        True
        >>> _needs_app(["--reload"])
        True
        >>> _needs_app(["pkg.app:app"])
        False
    """
    return not args or args[0].startswith("-")


def _insert_defaults(raw_args: List[str]) -> List[str]:
    """Return a copy of the arguments with app, host and port defaults filled in.

    Args:
        raw_args: Arguments after the program name.

    Returns:
        New argument list for Uvicorn.

    Examples:
        >>> _insert_defaults(["--reload"])[0] == DEFAULT_APP
        True
        >>> "--host" in _insert_defaults(["--uds", "/tmp/s.sock"])
        False
    """
    args = list(raw_args)

    if _needs_app(args):
        args.insert(0, DEFAULT_APP)

    if "--uds" not in args:
        if "--host" not in args and "--http" not in args:
            args.extend(["--host", DEFAULT_HOST])
        if "--port" not in args:
            args.extend(["--port", str(DEFAULT_PORT)])

    return args


def main() -> None:
    """Entry point for the ``mcp-ui-server`` console script."""
    if "--version" in sys.argv[1:] or "-V" in sys.argv[1:]:
        print(f"mcp-ui-server {__version__}")
        return

    sys.argv = [sys.argv[0], *_insert_defaults(sys.argv[1:])]
    # uvicorn.main is a click command; it parses sys.argv itself
    uvicorn.main()  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":  # pragma: no cover
    main()
