"""MCP tools for PocketBase.

Importing this package registers every tool with the FastMCP server.
"""

from pocketbase_mcp.mcp.tools.analysis import analyze_collection_data
from pocketbase_mcp.mcp.tools.migration import migrate_collection
from pocketbase_mcp.mcp.tools.schema import (
    generate_pb_schema,
    generate_typescript_interfaces,
    get_collection_schema,
)

__all__ = [
    "analyze_collection_data",
    "generate_pb_schema",
    "generate_typescript_interfaces",
    "get_collection_schema",
    "migrate_collection",
]
