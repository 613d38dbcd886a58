from contextlib import asynccontextmanager, AbstractAsyncContextManager
from typing import TYPE_CHECKING, AsyncIterator, Callable, Optional

from httpx import AsyncClient

from pocketbase_mcp.config import ConfigManager

if TYPE_CHECKING:  # pragma: no cover
    from pocketbase_mcp.mcp.clients.store import PocketBaseClient


# Optional factory override for dependency injection
_client_factory: Optional[Callable[[], AbstractAsyncContextManager[AsyncClient]]] = None

# Superuser token obtained at server startup, sent with every request
_auth_token: Optional[str] = None


def set_client_factory(factory: Optional[Callable[[], AbstractAsyncContextManager[AsyncClient]]]) -> None:
    """Override the default client factory (for testing or embedding).

    Args:
        factory: An async context manager that yields an AsyncClient, or None
            to restore the default

    Example:
        @asynccontextmanager
        async def custom_client_factory():
            async with AsyncClient(...) as client:
                yield client

        set_client_factory(custom_client_factory)
    """
    global _client_factory
    _client_factory = factory


def set_auth_token(token: Optional[str]) -> None:
    """Remember the superuser token for clients created from now on."""
    global _auth_token
    _auth_token = token


def get_auth_token() -> Optional[str]:
    return _auth_token


@asynccontextmanager
async def get_client() -> AsyncIterator[AsyncClient]:
    """Get an AsyncClient as a context manager.

    Uses the injected factory when one is set, otherwise an HTTP client for
    the configured PocketBase URL.

    Usage:
        async with get_client() as client:
            response = await client.get("/api/collections")

    Raises:
        RuntimeError: If no PocketBase URL is configured
    """
    # Config is rebuilt each time; logging is initialized once by the entrypoint
    from pocketbase_mcp.mcp.container import MCPContainer

    config = ConfigManager().config
    container = MCPContainer(config=config, auth_token=_auth_token)
    factory = container.get_client_factory(override_factory=_client_factory)

    async with factory() as client:
        yield client


@asynccontextmanager
async def get_store() -> AsyncIterator["PocketBaseClient"]:
    """Get a PocketBaseClient bound to a fresh AsyncClient.

    Usage:
        async with get_store() as store:
            collection = await store.get_collection("posts")
    """
    from pocketbase_mcp.mcp.clients.store import PocketBaseClient

    config = ConfigManager().config
    async with get_client() as client:
        yield PocketBaseClient(client, full_list_batch_size=config.full_list_batch_size)
