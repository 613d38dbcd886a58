"""Shared fixtures: an in-memory PocketBase served through httpx.MockTransport."""

import itertools
import json
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

import httpx
import pytest
import pytest_asyncio
from loguru import logger

from pocketbase_mcp.mcp import async_client as async_client_module
from pocketbase_mcp.mcp.async_client import set_client_factory
from pocketbase_mcp.mcp.clients.store import PocketBaseClient

BASE_URL = "http://pocketbase.test"
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "secret-password"
ADMIN_TOKEN = "superuser-token"

RECORD_TIMESTAMP = "2024-01-01 00:00:00.000Z"


def _error(status: int, message: str, data: Optional[dict] = None) -> httpx.Response:
    return httpx.Response(status, json={"status": status, "message": message, "data": data or {}})


class FakePocketBase:
    """Just enough of the PocketBase REST API for the store client and the engine.

    Collections are keyed by id; lookups accept id or name, like PocketBase.
    Records carry collectionId/collectionName and created/updated, like PocketBase.
    """

    def __init__(self):
        self.collections: dict[str, dict[str, Any]] = {}
        self.records: dict[str, list[dict[str, Any]]] = {}
        self.requests: list[tuple[str, str]] = []
        self.auth_headers: list[Optional[str]] = []
        self._failures: list[dict[str, Any]] = []
        self._ids = itertools.count(1)

    # --- Setup helpers ---

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids):06d}"

    def add_collection(
        self,
        name: str,
        fields: list[dict[str, Any]],
        records: Optional[list[dict[str, Any]]] = None,
        **extra: Any,
    ) -> dict[str, Any]:
        collection = self._build_collection({"name": name, "fields": fields, **extra})
        self.collections[collection["id"]] = collection
        self.records[collection["id"]] = []
        for record in records or []:
            self._insert_record(collection, record)
        return collection

    def find_collection(self, id_or_name: str) -> Optional[dict[str, Any]]:
        if id_or_name in self.collections:
            return self.collections[id_or_name]
        for collection in self.collections.values():
            if collection["name"].lower() == id_or_name.lower():
                return collection
        return None

    def records_of(self, id_or_name: str) -> list[dict[str, Any]]:
        collection = self.find_collection(id_or_name)
        assert collection is not None, f"no collection {id_or_name}"
        return self.records[collection["id"]]

    def collection_names(self) -> list[str]:
        return [c["name"] for c in self.collections.values()]

    def fail(
        self,
        method: str,
        path: str,
        status: int = 400,
        message: str = "Something went wrong while processing your request.",
        data: Optional[dict[str, Any]] = None,
        after: int = 0,
    ) -> None:
        """Make requests matching method and path prefix fail, after `after` successes."""
        self._failures.append(
            {
                "method": method,
                "path": path,
                "status": status,
                "message": message,
                "data": data,
                "remaining_successes": after,
            }
        )

    # --- Internals ---

    def _build_collection(self, config: dict[str, Any]) -> dict[str, Any]:
        fields = []
        for field in config.get("fields", []):
            field = dict(field)
            field.setdefault("id", self._next_id("field"))
            field.setdefault("required", False)
            field.setdefault("system", False)
            fields.append(field)
        return {
            "id": config.get("id") or self._next_id("pbc_"),
            "name": config["name"],
            "type": config.get("type", "base"),
            "system": False,
            "fields": fields,
            "listRule": config.get("listRule"),
            "viewRule": config.get("viewRule"),
            "createRule": config.get("createRule"),
            "updateRule": config.get("updateRule"),
            "deleteRule": config.get("deleteRule"),
            "indexes": config.get("indexes", []),
        }

    def _insert_record(self, collection: dict[str, Any], data: dict[str, Any]) -> dict[str, Any]:
        record = {
            "id": data.get("id") or self._next_id("rec"),
            "collectionId": collection["id"],
            "collectionName": collection["name"],
            "created": data.get("created", RECORD_TIMESTAMP),
            "updated": data.get("updated", RECORD_TIMESTAMP),
        }
        record.update({k: v for k, v in data.items() if k not in record})
        self.records[collection["id"]].append(record)
        return record

    def _check_failure(self, method: str, path: str) -> Optional[httpx.Response]:
        for rule in self._failures:
            if rule["method"] == method and path.startswith(rule["path"]):
                if rule["remaining_successes"] > 0:
                    rule["remaining_successes"] -= 1
                    return None
                return _error(rule["status"], rule["message"], rule["data"])
        return None

    def _name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        return any(
            c["name"].lower() == name.lower() and c["id"] != exclude_id
            for c in self.collections.values()
        )

    # --- Request handling ---

    def handler(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path
        self.requests.append((method, path))
        self.auth_headers.append(request.headers.get("Authorization"))

        failure = self._check_failure(method, path)
        if failure is not None:
            return failure

        body = json.loads(request.content) if request.content else {}
        params = request.url.params
        parts = [p for p in path.split("/") if p]

        if parts[:2] != ["api", "collections"]:
            return _error(404, "The requested resource wasn't found.")

        if parts == ["api", "collections", "_superusers", "auth-with-password"]:
            if body.get("identity") == ADMIN_EMAIL and body.get("password") == ADMIN_PASSWORD:
                return httpx.Response(
                    200, json={"token": ADMIN_TOKEN, "record": {"email": ADMIN_EMAIL}}
                )
            return _error(400, "Failed to authenticate.")

        if len(parts) == 2:
            if method == "GET":
                return self._list_collections(params)
            if method == "POST":
                return self._create_collection(body)

        if len(parts) == 3:
            collection = self.find_collection(parts[2])
            if collection is None:
                return _error(404, "The requested resource wasn't found.")
            if method == "GET":
                return httpx.Response(200, json=collection)
            if method == "PATCH":
                return self._update_collection(collection, body)
            if method == "DELETE":
                del self.collections[collection["id"]]
                del self.records[collection["id"]]
                return httpx.Response(204)

        if len(parts) == 4 and parts[3] == "records":
            collection = self.find_collection(parts[2])
            if collection is None:
                return _error(404, "Missing collection context.")
            if method == "GET":
                return self._list_records(collection, params)
            if method == "POST":
                return self._create_record(collection, body)

        return _error(404, "The requested resource wasn't found.")

    def _list_collections(self, params: httpx.QueryParams) -> httpx.Response:
        page = int(params.get("page", 1))
        per_page = int(params.get("perPage", 30))
        items = list(self.collections.values())
        start = (page - 1) * per_page
        return httpx.Response(
            200,
            json={
                "page": page,
                "perPage": per_page,
                "totalItems": len(items),
                "totalPages": -(-len(items) // per_page),
                "items": items[start : start + per_page],
            },
        )

    def _create_collection(self, body: dict[str, Any]) -> httpx.Response:
        name = body.get("name") or ""
        if not name:
            return _error(400, "Failed to create collection.", {"name": {"code": "validation_required", "message": "Cannot be blank."}})
        if self._name_taken(name):
            return _error(
                400,
                "Failed to create collection.",
                {
                    "name": {
                        "code": "validation_collection_name_exists",
                        "message": "Collection name must be unique (case insensitive).",
                    }
                },
            )
        collection = self._build_collection(body)
        self.collections[collection["id"]] = collection
        self.records[collection["id"]] = []
        return httpx.Response(200, json=collection)

    def _update_collection(self, collection: dict[str, Any], body: dict[str, Any]) -> httpx.Response:
        if "name" in body and self._name_taken(body["name"], exclude_id=collection["id"]):
            return _error(
                400,
                "Failed to update collection.",
                {"name": {"code": "validation_collection_name_exists", "message": "Collection name must be unique (case insensitive)."}},
            )
        collection.update(body)
        for record in self.records[collection["id"]]:
            record["collectionName"] = collection["name"]
        return httpx.Response(200, json=collection)

    def _list_records(self, collection: dict[str, Any], params: httpx.QueryParams) -> httpx.Response:
        page = int(params.get("page", 1))
        per_page = int(params.get("perPage", 30))
        skip_total = params.get("skipTotal") in ("1", "true")
        items = self.records[collection["id"]]
        start = (page - 1) * per_page
        return httpx.Response(
            200,
            json={
                "page": page,
                "perPage": per_page,
                "totalItems": -1 if skip_total else len(items),
                "totalPages": -1 if skip_total else -(-len(items) // per_page),
                "items": items[start : start + per_page],
            },
        )

    def _create_record(self, collection: dict[str, Any], body: dict[str, Any]) -> httpx.Response:
        errors = {}
        for field in collection["fields"]:
            if field.get("required") and body.get(field["name"]) in (None, "", [], {}):
                errors[field["name"]] = {"code": "validation_required", "message": "Cannot be blank."}
        if errors:
            return _error(400, "Failed to create record.", errors)
        known = {f["name"] for f in collection["fields"]} | {"id", "created", "updated"}
        data = {k: v for k, v in body.items() if k in known}
        return httpx.Response(200, json=self._insert_record(collection, data))


# --- Environment ---


@pytest.fixture(autouse=True)
def test_env(monkeypatch, tmp_path):
    """Point the config at the fake instance and keep logs out of the home directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("POCKETBASE_ENV", "test")
    monkeypatch.setenv("POCKETBASE_URL", BASE_URL)
    monkeypatch.setenv("POCKETBASE_LOG_DIR", str(tmp_path / "logs"))
    for name in ("POCKETBASE_ADMIN_EMAIL", "POCKETBASE_ADMIN_PASSWORD", "POCKETBASE_PORT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_mcp_state():
    async_client_module._client_factory = None
    async_client_module._auth_token = None
    yield
    async_client_module._client_factory = None
    async_client_module._auth_token = None
    # CLI commands bind sinks to streams that are closed after each invocation
    logger.remove()


@pytest.fixture
def admin_credentials(monkeypatch):
    monkeypatch.setenv("POCKETBASE_ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setenv("POCKETBASE_ADMIN_PASSWORD", ADMIN_PASSWORD)


# --- PocketBase ---


@pytest.fixture
def fake_pb() -> FakePocketBase:
    return FakePocketBase()


@pytest_asyncio.fixture
async def http_client(fake_pb: FakePocketBase) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(fake_pb.handler), base_url=BASE_URL
    ) as client:
        yield client


@pytest.fixture
def store(http_client: httpx.AsyncClient) -> PocketBaseClient:
    return PocketBaseClient(http_client)


@pytest.fixture
def pb_server(fake_pb: FakePocketBase) -> FakePocketBase:
    """Route get_client()/get_store() to the fake instance."""

    @asynccontextmanager
    async def factory():
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(fake_pb.handler), base_url=BASE_URL
        ) as client:
            yield client

    set_client_factory(factory)
    return fake_pb


# --- Sample data ---


@pytest.fixture
def posts(fake_pb: FakePocketBase) -> dict[str, Any]:
    """A posts collection with a few records."""
    return fake_pb.add_collection(
        "posts",
        fields=[
            {"name": "title", "type": "text", "required": True},
            {"name": "views", "type": "number"},
            {"name": "status", "type": "select", "values": ["draft", "published"], "maxSelect": 1},
        ],
        records=[
            {"id": "post1", "title": "First", "views": 10, "status": "draft"},
            {"id": "post2", "title": "Second", "views": 25, "status": "published"},
            {"id": "post3", "title": "Third", "views": None, "status": "draft"},
        ],
        listRule="",
    )
