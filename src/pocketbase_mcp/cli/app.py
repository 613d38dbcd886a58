import os
from typing import Optional

import typer

from pocketbase_mcp.config import init_cli_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import pocketbase_mcp

        typer.echo(f"pocketbase-mcp version: {pocketbase_mcp.__version__}")
        raise typer.Exit()


app = typer.Typer(name="pocketbase-mcp")


@app.callback()
def app_callback(
    url: Optional[str] = typer.Option(
        None,
        "--url",
        "-u",
        help="PocketBase base URL",
        envvar="POCKETBASE_URL",
    ),
    admin_email: Optional[str] = typer.Option(
        None,
        "--admin-email",
        "-e",
        help="Superuser email",
        envvar="POCKETBASE_ADMIN_EMAIL",
    ),
    admin_password: Optional[str] = typer.Option(
        None,
        "--admin-password",
        "-p",
        help="Superuser password",
        envvar="POCKETBASE_ADMIN_PASSWORD",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """PocketBase MCP - schema generation, data analysis and collection migration."""

    init_cli_logging()

    # Options are written back to the environment; ConfigManager reads them from there
    if url:
        os.environ["POCKETBASE_URL"] = url
    if admin_email:
        os.environ["POCKETBASE_ADMIN_EMAIL"] = admin_email
    if admin_password:
        os.environ["POCKETBASE_ADMIN_PASSWORD"] = admin_password
