import pytest

from pocketbase_mcp.mcp.async_client import get_auth_token, get_store
from pocketbase_mcp.mcp.server import authenticate_superuser, lifespan, mcp


@pytest.mark.asyncio
async def test_lifespan_without_credentials(pb_server):
    async with lifespan(mcp):
        assert get_auth_token() is None
    assert pb_server.requests == []


@pytest.mark.asyncio
async def test_lifespan_authenticates_and_clears_token(admin_credentials, pb_server, posts):
    async with lifespan(mcp):
        assert get_auth_token() == "superuser-token"
        async with get_store() as store:
            await store.get_collection("posts")
    assert get_auth_token() is None

    assert pb_server.requests[0] == ("POST", "/api/collections/_superusers/auth-with-password")


@pytest.mark.asyncio
async def test_bad_credentials_keep_server_running(monkeypatch, admin_credentials, pb_server):
    monkeypatch.setenv("POCKETBASE_ADMIN_PASSWORD", "wrong")
    assert await authenticate_superuser() is False
    async with lifespan(mcp):
        assert get_auth_token() is None


@pytest.mark.asyncio
async def test_missing_url_is_logged_not_raised(monkeypatch, admin_credentials):
    monkeypatch.delenv("POCKETBASE_URL")
    assert await authenticate_superuser() is False
