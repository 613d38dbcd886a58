"""CLI commands for pocketbase-mcp."""

from . import mcp, schema

__all__ = ["mcp", "schema"]
