"""Allow running the CLI with `python -m pocketbase_mcp`."""  # pragma: no cover

from pocketbase_mcp.cli.main import app  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
