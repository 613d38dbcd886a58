"""Configuration and logging for pocketbase-mcp.

Settings are read from environment variables (prefix ``POCKETBASE_``) and an
optional ``.env`` file. The CLI writes its options into the environment before
the config is built, so command-line values win over anything else.
"""

import sys
from pathlib import Path
from typing import Literal, Optional

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FILE_NAME = "pocketbase-mcp.log"

MISSING_URL_MESSAGE = (
    "PocketBase URL is required. Provide it via --url parameter "
    "or POCKETBASE_URL environment variable."
)


class PocketBaseMCPConfig(BaseSettings):
    """Runtime configuration for the MCP server and CLI."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POCKETBASE_",
        case_sensitive=False,
        extra="ignore",
    )

    # PocketBase connection
    url: Optional[str] = Field(default=None, description="PocketBase base URL")
    admin_email: Optional[str] = Field(
        default=None, description="Superuser email used to authenticate on startup"
    )
    admin_password: Optional[str] = Field(
        default=None, description="Superuser password used to authenticate on startup"
    )

    # MCP transport. When port is set the server speaks streamable HTTP instead of stdio.
    host: str = "127.0.0.1"
    port: Optional[int] = None

    # Logging
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".pocketbase-mcp")

    env: Literal["dev", "test", "prod"] = "dev"

    # Store client tuning
    request_timeout: float = 30.0
    full_list_batch_size: int = Field(default=500, ge=1, le=1000)

    # Tool defaults
    default_sample_size: int = Field(default=100, ge=1)
    interface_collection_limit: int = Field(default=100, ge=1)

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value.rstrip("/") or None

    @property
    def has_admin_credentials(self) -> bool:
        return bool(self.admin_email and self.admin_password)

    @property
    def is_test_env(self) -> bool:
        return self.env == "test"

    @property
    def log_file(self) -> Path:
        return self.log_dir / LOG_FILE_NAME


class ConfigManager:
    """Builds the validated configuration from the current environment.

    A fresh config is created on every access so that values written into the
    environment by the CLI (or by tests via monkeypatch) are always honoured.
    """

    @property
    def config(self) -> PocketBaseMCPConfig:
        return PocketBaseMCPConfig()

    def require_url(self) -> str:
        """Return the configured PocketBase URL or fail with setup guidance."""
        url = self.config.url
        if not url:
            raise RuntimeError(MISSING_URL_MESSAGE)
        return url


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    log_to_stderr: bool = True,
) -> None:
    """Configure loguru sinks.

    stdout is never used: the stdio MCP transport owns it.
    """
    logger.remove()

    if log_to_stderr:
        logger.add(sys.stderr, level=log_level, backtrace=False, diagnose=False)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level=log_level,
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )


def init_mcp_logging() -> None:
    """Initialize logging for the MCP entrypoint (stderr plus rotating file)."""
    config = ConfigManager().config
    log_file = None if config.is_test_env else config.log_file
    setup_logging(log_level=config.log_level, log_file=log_file)
    logger.debug(f"Logging initialized level={config.log_level} file={log_file}")


def init_cli_logging() -> None:
    """Initialize logging for CLI commands (warnings and above to stderr only)."""
    setup_logging(log_level="WARNING")
