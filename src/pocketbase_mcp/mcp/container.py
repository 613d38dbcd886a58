"""Composition root for MCP entrypoint.

This module owns:
- Reading ConfigManager + environment variables
- Providing the httpx client factory pointed at PocketBase
- Initializing logging for MCP

This centralizes composition concerns and reduces coupling between
modules and runtime environment decisions.
"""

from contextlib import asynccontextmanager, AbstractAsyncContextManager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

from httpx import AsyncClient, Timeout
from loguru import logger

from pocketbase_mcp.config import (
    MISSING_URL_MESSAGE,
    ConfigManager,
    PocketBaseMCPConfig,
    init_mcp_logging,
)


@dataclass
class MCPContainer:
    """Composition root for MCP entrypoint.

    Responsibilities:
    - Configuration loading
    - Logging initialization
    - HTTP client factory provision

    The container is built once at startup and provides factories
    for creating properly configured dependencies.
    """

    config: PocketBaseMCPConfig
    auth_token: Optional[str] = None

    @classmethod
    def create(cls) -> "MCPContainer":
        """Build container with all dependencies.

        This is the single point where we:
        1. Initialize logging for MCP mode (never stdout)
        2. Load configuration from environment and .env

        Returns:
            Configured MCPContainer ready for use
        """
        # Initialize logging first (MCP: stderr and file, never stdout)
        init_mcp_logging()

        config = ConfigManager().config

        return cls(config=config)

    @property
    def is_test_env(self) -> bool:
        return self.config.is_test_env

    @property
    def base_url(self) -> str:
        """PocketBase base URL.

        Raises:
            RuntimeError: If no URL is configured
        """
        if not self.config.url:
            raise RuntimeError(MISSING_URL_MESSAGE)
        return self.config.url

    def get_client_factory(
        self, override_factory: Optional[Callable[[], AbstractAsyncContextManager[AsyncClient]]] = None
    ) -> Callable[[], AbstractAsyncContextManager[AsyncClient]]:
        """Get HTTP client factory.

        Priority order:
        1. Override factory (for dependency injection in tests)
        2. HTTP client for the configured PocketBase URL, carrying the
           superuser token when one was obtained

        Args:
            override_factory: Optional factory override for testing

        Returns:
            Async context manager factory that yields configured AsyncClient
        """
        if override_factory:
            return override_factory

        @asynccontextmanager
        async def _client_factory() -> AsyncIterator[AsyncClient]:
            """Factory that creates a client for the configured PocketBase instance."""
            base_url = self.base_url
            timeout = Timeout(self.config.request_timeout, connect=10.0)

            # PocketBase expects the raw token in the Authorization header
            headers = {"Authorization": self.auth_token} if self.auth_token else {}
            logger.debug(f"Creating HTTP client for PocketBase at: {base_url}")
            async with AsyncClient(base_url=base_url, headers=headers, timeout=timeout) as client:
                yield client

        return _client_factory
