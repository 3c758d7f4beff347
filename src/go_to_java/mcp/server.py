"""FastMCP server exposing go-to-java translation tools."""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from go_to_java.config import Settings, load_settings
from go_to_java.core.parsing import normalize_parser, parse_unit
from go_to_java.core.translate import run_translation, translate_function


def create_mcp_server(settings: Settings | None = None) -> FastMCP:
    """Create a FastMCP server translating with the given settings."""

    settings = settings or load_settings()
    mcp = FastMCP(
        "go-to-java",
        instructions="Translate Go declarations into structurally equivalent Java for Java developers.",
    )

    @mcp.tool()
    async def convert_go(code: str, class_name: str | None = None) -> str:
        """Translate a Go source file into one Java class."""
        result = await run_translation(code, settings, class_name=class_name)
        if not result.ok:
            return f"Error: {result.error}\n{result.java}"
        return result.java

    @mcp.tool()
    async def convert_function(code: str, method_only: bool = False) -> str:
        """Translate a single Go function declaration into a Java method."""
        result = translate_function(code, settings, method_only=method_only)
        if not result.ok:
            return f"Error: {result.error}"
        return result.java

    @mcp.tool()
    async def parse_go(code: str, parser: str | None = None) -> dict[str, Any]:
        """Parse Go source and return the recognised declarations."""
        try:
            strategy = normalize_parser(parser) if parser else settings.parser
        except ValueError as exc:
            return {"error": str(exc)}
        return parse_unit(code, strategy).model_dump(mode="json")

    return mcp
