# -*- coding: utf-8 -*-
"""Location: ./tests/unit/mcpui/test_cli.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Tests for the mcp-ui-server console script (mcpui.cli).
"""

# Future
from __future__ import annotations

# Standard
import sys
from typing import Any, Dict, List

# Third-Party
import pytest

# First-Party
import mcpui.cli as cli


@pytest.fixture(autouse=True)
def _restore_sys_argv():
    original = sys.argv.copy()
    yield
    sys.argv[:] = original


def _fake_uvicorn(monkeypatch) -> Dict[str, Any]:
    seen: Dict[str, Any] = {}

    def _main() -> None:
        seen["argv"] = sys.argv.copy()

    monkeypatch.setattr(cli.uvicorn, "main", _main)
    return seen


@pytest.mark.parametrize(("argv", "missing"), [([], True), (["--workers", "1"], True), (["other.app:app"], False)])
def test_needs_app(argv: List[str], missing: bool) -> None:
    assert cli._needs_app(argv) is missing


def test_insert_defaults_fills_app_host_and_port() -> None:
    raw = ["--reload"]
    out = cli._insert_defaults(raw)

    assert raw == ["--reload"]
    assert out == [cli.DEFAULT_APP, "--reload", "--host", cli.DEFAULT_HOST, "--port", str(cli.DEFAULT_PORT)]


@pytest.mark.parametrize(
    ("raw", "absent"),
    [
        (["x:app", "--host", "0.0.0.0"], "--host"),
        (["x:app", "--http", "h11"], "--host"),
        (["x:app", "--port", "9000"], "--port"),
    ],
)
def test_insert_defaults_keeps_explicit_values(raw: List[str], absent: str) -> None:
    out = cli._insert_defaults(raw)
    assert out[0] == "x:app"
    assert out.count(absent) == raw.count(absent)


def test_insert_defaults_unix_socket_skips_host_and_port() -> None:
    out = cli._insert_defaults(["--uds", "/tmp/mcpui.sock"])
    assert out == [cli.DEFAULT_APP, "--uds", "/tmp/mcpui.sock"]


@pytest.mark.parametrize("flag", ["--version", "-V"])
def test_version_flag_short_circuits(flag: str, capsys, monkeypatch) -> None:
    seen = _fake_uvicorn(monkeypatch)
    monkeypatch.setattr(sys, "argv", ["mcp-ui-server", flag])

    cli.main()

    assert capsys.readouterr().out.strip() == f"mcp-ui-server {cli.__version__}"
    assert seen == {}


def test_main_hands_rewritten_argv_to_uvicorn(monkeypatch) -> None:
    seen = _fake_uvicorn(monkeypatch)
    monkeypatch.setattr(sys, "argv", ["mcp-ui-server", "--log-level", "debug"])

    cli.main()

    assert seen["argv"][:2] == ["mcp-ui-server", cli.DEFAULT_APP]
    assert seen["argv"][2:4] == ["--log-level", "debug"]
    assert "--port" in seen["argv"]
