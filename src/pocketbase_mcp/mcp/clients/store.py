"""Typed client for the PocketBase collections and records API.

Encapsulates the endpoints the schema engine needs and implements the
CollectionStore protocol on top of them.
"""

from typing import Any, Optional
from urllib.parse import quote

from httpx import AsyncClient
from loguru import logger

from pocketbase_mcp.mcp.tools.utils import call_delete, call_get, call_patch, call_post
from pocketbase_mcp.schemas.collection import CollectionSchema, RecordPage

SUPERUSERS_COLLECTION = "_superusers"


class PocketBaseClient:
    """Typed client for PocketBase collection and record operations.

    Centralizes:
    - API path construction for collection and record endpoints
    - Response validation via Pydantic models
    - Consistent error handling through call_* utilities

    Usage:
        async with get_client() as http_client:
            client = PocketBaseClient(http_client)
            collection = await client.get_collection("posts")
    """

    def __init__(self, http_client: AsyncClient, full_list_batch_size: int = 500):
        """Initialize the PocketBase client.

        Args:
            http_client: HTTPX AsyncClient whose base_url points at PocketBase
            full_list_batch_size: Page size used when fetching every record
        """
        self.http_client = http_client
        self.full_list_batch_size = full_list_batch_size

    @staticmethod
    def _collection_path(id_or_name: str) -> str:
        return f"/api/collections/{quote(id_or_name, safe='')}"

    def _records_path(self, collection: str) -> str:
        return f"{self._collection_path(collection)}/records"

    # --- Auth ---

    async def authenticate_superuser(self, email: str, password: str) -> str:
        """Authenticate as a superuser and return the auth token.

        Raises:
            StoreOperationError: If the credentials are rejected
        """
        response = await call_post(
            self.http_client,
            f"{self._collection_path(SUPERUSERS_COLLECTION)}/auth-with-password",
            json={"identity": email, "password": password},
        )
        return response.json()["token"]

    # --- Collections ---

    async def list_collections(self, page: int = 1, per_page: int = 30) -> list[CollectionSchema]:
        """List one page of collections.

        Raises:
            StoreOperationError: If the request fails
        """
        response = await call_get(
            self.http_client,
            "/api/collections",
            params={"page": page, "perPage": per_page},
        )
        items = response.json().get("items", [])
        return [CollectionSchema.model_validate(item) for item in items]

    async def get_collection(self, id_or_name: str) -> CollectionSchema:
        """Fetch one collection by id or name.

        Raises:
            StoreOperationError: If the collection does not exist or the request fails
        """
        response = await call_get(self.http_client, self._collection_path(id_or_name))
        return CollectionSchema.model_validate(response.json())

    async def create_collection(self, config: dict[str, Any]) -> CollectionSchema:
        """Create a collection from a create-collection payload.

        Raises:
            StoreOperationError: If PocketBase rejects the definition
        """
        response = await call_post(self.http_client, "/api/collections", json=config)
        return CollectionSchema.model_validate(response.json())

    async def update_collection(self, id_or_name: str, data: dict[str, Any]) -> CollectionSchema:
        """Apply a partial update to a collection (fields, rules, rename).

        Raises:
            StoreOperationError: If the request fails
        """
        response = await call_patch(
            self.http_client, self._collection_path(id_or_name), json=data
        )
        return CollectionSchema.model_validate(response.json())

    async def delete_collection(self, id_or_name: str) -> None:
        """Delete a collection together with its records.

        Raises:
            StoreOperationError: If the request fails
        """
        await call_delete(self.http_client, self._collection_path(id_or_name))

    # --- Records ---

    async def list_records(
        self,
        collection: str,
        page: int = 1,
        per_page: int = 30,
        filter: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> RecordPage:
        """List one page of records.

        Raises:
            StoreOperationError: If the request fails
        """
        params: dict[str, Any] = {"page": page, "perPage": per_page}
        if filter:
            params["filter"] = filter
        if sort:
            params["sort"] = sort
        response = await call_get(self.http_client, self._records_path(collection), params=params)
        return RecordPage.model_validate(response.json())

    async def get_full_record_list(self, collection: str) -> list[dict[str, Any]]:
        """Fetch every record of a collection, batch by batch, in store order.

        Total counts are skipped; paging stops at the first short batch.

        Raises:
            StoreOperationError: If any page request fails
        """
        records: list[dict[str, Any]] = []
        page = 1
        while True:
            response = await call_get(
                self.http_client,
                self._records_path(collection),
                params={"page": page, "perPage": self.full_list_batch_size, "skipTotal": 1},
            )
            items = response.json().get("items", [])
            records.extend(items)
            if len(items) < self.full_list_batch_size:
                break
            page += 1

        logger.debug(f"Fetched {len(records)} records from {collection} in {page} pages")
        return records

    async def create_record(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create one record.

        Raises:
            StoreOperationError: If PocketBase rejects the record
        """
        response = await call_post(self.http_client, self._records_path(collection), json=data)
        return response.json()
