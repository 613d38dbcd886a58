"""Typed clients for the PocketBase API."""

from pocketbase_mcp.mcp.clients.store import PocketBaseClient

__all__ = ["PocketBaseClient"]
