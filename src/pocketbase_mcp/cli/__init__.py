"""Command line interface for pocketbase-mcp."""
