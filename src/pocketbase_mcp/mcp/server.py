"""
PocketBase MCP FastMCP server.
"""

from contextlib import asynccontextmanager

from fastmcp import FastMCP
from loguru import logger

from pocketbase_mcp.config import ConfigManager
from pocketbase_mcp.errors import StoreOperationError
from pocketbase_mcp.mcp.async_client import get_store, set_auth_token


async def authenticate_superuser() -> bool:
    """Authenticate with the configured superuser credentials, if any.

    Failure is logged and the server keeps running unauthenticated; tools that
    need superuser access then report PocketBase's 401/403 errors.

    Returns:
        True if a token was obtained
    """
    app_config = ConfigManager().config
    if not app_config.has_admin_credentials:
        logger.info("No superuser credentials configured - running unauthenticated")
        return False

    try:
        async with get_store() as store:
            token = await store.authenticate_superuser(
                app_config.admin_email, app_config.admin_password
            )
    except (StoreOperationError, RuntimeError) as e:
        logger.error(f"Superuser authentication failed: {e}")
        return False

    set_auth_token(token)
    logger.info(f"Authenticated as superuser {app_config.admin_email}")
    return True


@asynccontextmanager
async def lifespan(app: FastMCP):
    """Lifecycle manager for the MCP server.

    Handles:
    - Superuser authentication against the configured PocketBase instance
    - Dropping the token on shutdown
    """
    app_config = ConfigManager().config
    logger.info(f"Starting PocketBase MCP server url={app_config.url}")

    await authenticate_superuser()

    try:
        yield
    finally:
        logger.info("Shutting down PocketBase MCP server")
        set_auth_token(None)


mcp = FastMCP(
    name="PocketBase MCP",
    lifespan=lifespan,
)
