"""MCP server command."""

from typing import Optional

import typer
from loguru import logger

import pocketbase_mcp
from pocketbase_mcp.cli.app import app

# Import mcp instance
from pocketbase_mcp.mcp.server import mcp as mcp_server  # pragma: no cover

# Import mcp tools to register them
import pocketbase_mcp.mcp.tools  # noqa: F401  # pragma: no cover


@app.command()
def mcp(
    host: Optional[str] = typer.Option(None, "--host", help="Host for the HTTP transport"),
    port: Optional[int] = typer.Option(
        None, "--port", help="Serve streamable HTTP on this port instead of stdio"
    ),
):  # pragma: no cover
    """Run the MCP server (stdio by default, streamable HTTP with --port)."""
    from pocketbase_mcp.mcp.container import MCPContainer

    container = MCPContainer.create()
    config = container.config

    try:
        container.base_url
    except RuntimeError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)

    port = port or config.port
    logger.info(f"Starting PocketBase MCP server {pocketbase_mcp.__version__}")
    logger.info(f"PocketBase URL: {config.url}")

    if port:
        mcp_server.run(transport="streamable-http", host=host or config.host, port=port)
    else:
        mcp_server.run()
