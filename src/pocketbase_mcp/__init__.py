"""pocketbase-mcp - PocketBase schema generation, profiling and migration tools over MCP."""

__version__ = "0.2.0"
