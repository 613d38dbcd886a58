"""MCP server, PocketBase client and tools."""
