"""The store capability consumed by the profiler and the migration orchestrator.

The engine talks to PocketBase only through this protocol, so it can run
against the HTTP client or an in-memory double.
"""

from typing import Any, Optional, Protocol

from pocketbase_mcp.schemas.collection import CollectionSchema, RecordPage


class CollectionStore(Protocol):
    """Collection and record operations of a PocketBase-compatible store."""

    async def list_collections(self, page: int = 1, per_page: int = 30) -> list[CollectionSchema]:
        """List one page of collections."""
        ...

    async def get_collection(self, id_or_name: str) -> CollectionSchema:
        """Fetch one collection by id or name."""
        ...

    async def create_collection(self, config: dict[str, Any]) -> CollectionSchema:
        """Create a collection from a create-collection payload."""
        ...

    async def update_collection(self, id_or_name: str, data: dict[str, Any]) -> CollectionSchema:
        """Apply a partial update (schema, indexes, rename)."""
        ...

    async def delete_collection(self, id_or_name: str) -> None:
        """Delete a collection and its records."""
        ...

    async def list_records(
        self,
        collection: str,
        page: int = 1,
        per_page: int = 30,
        filter: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> RecordPage:
        """List one page of records."""
        ...

    async def get_full_record_list(self, collection: str) -> list[dict[str, Any]]:
        """Fetch every record of a collection."""
        ...

    async def create_record(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create one record."""
        ...
