"""Main CLI entry point for pocketbase-mcp."""  # pragma: no cover

from pocketbase_mcp.cli.app import app  # pragma: no cover

# Register commands
from pocketbase_mcp.cli.commands import mcp, schema  # noqa: F401  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    # start the app
    app()
