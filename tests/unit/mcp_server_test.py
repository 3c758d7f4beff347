"""Tests for the MCP server tool definitions."""

from __future__ import annotations

import inspect

import pytest

from go_to_java.config import Settings
from go_to_java.core.generator import EMPTY_UNIT_MARKER
from go_to_java.mcp.server import create_mcp_server


def _tool(name: str, settings: Settings | None = None):  # type: ignore[no-untyped-def]
    server = create_mcp_server(settings or Settings())
    return server._tool_manager._tools[name].fn  # type: ignore[attr-defined]


class TestMcpServerCreation:
    def test_creates_server(self) -> None:
        server = create_mcp_server(Settings())
        assert server is not None
        assert server.name == "go-to-java"

    def test_server_has_tools(self) -> None:
        server = create_mcp_server(Settings())
        tool_names = {t.name for t in server._tool_manager._tools.values()}
        assert tool_names == {"convert_go", "convert_function", "parse_go"}

    def test_convert_function_method_only_defaults_to_false(self) -> None:
        sig = inspect.signature(_tool("convert_function"))
        assert sig.parameters["method_only"].default is False


class TestMcpTools:
    """Tests calling the tool functions directly."""

    @pytest.mark.asyncio
    async def test_convert_go(self, user_service_source: str) -> None:
        java = await _tool("convert_go")(user_service_source, class_name="UserService")
        assert "public class UserService {" in java
        assert "public static class User {" in java

    @pytest.mark.asyncio
    async def test_convert_go_without_declarations(self) -> None:
        java = await _tool("convert_go")("// nothing here")
        assert java.startswith("Error: no recognizable Go declarations found")
        assert EMPTY_UNIT_MARKER in java

    @pytest.mark.asyncio
    async def test_convert_function(self) -> None:
        java = await _tool("convert_function")("func Add(a, b int) int", method_only=True)
        assert "public static int add(int a, int b) {" in java
        assert "class" not in java

    @pytest.mark.asyncio
    async def test_convert_function_rejects_non_function(self) -> None:
        assert await _tool("convert_function")("type X int") == "Error: no Go function declaration found"

    @pytest.mark.asyncio
    async def test_parse_go(self) -> None:
        unit = await _tool("parse_go")("package p\n\ntype T struct {\n    A int\n}\n", parser="scanner")
        assert unit["package"] == "p"
        assert unit["structs"][0]["fields"][0]["type"] == {"kind": "primitive", "name": "int"}

    @pytest.mark.asyncio
    async def test_parse_go_unknown_parser(self) -> None:
        result = await _tool("parse_go")("package p", parser="antlr")
        assert "Unsupported parser" in result["error"]
