from typing import Annotated

import typer
from rich.console import Console

from go_to_java.cli.options import ParserOption, settings_or_exit

# stdout belongs to the stdio transport
err_console = Console(stderr=True)


def serve(
    transport: Annotated[str, typer.Option(help="MCP transport: 'stdio', 'sse' or 'http'.")] = "stdio",
    host: str = "127.0.0.1",
    port: int = 8000,
    parser: ParserOption = None,
) -> None:
    """Start the MCP server exposing the translation tools."""
    from go_to_java.mcp.server import create_mcp_server

    server = create_mcp_server(settings_or_exit(parser=parser))
    err_console.print(f"[green]Starting MCP server (transport: {transport})[/green]")
    if transport == "stdio":
        server.run(transport="stdio")
    else:
        server.run(transport=transport, host=host, port=port)  # type: ignore[arg-type]
