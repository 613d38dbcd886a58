"""Schema CLI commands for pocketbase-mcp.

Provides CLI access to schema generation, interface generation and data analysis.
Registered as a subcommand group: `pocketbase-mcp schema generate`,
`pocketbase-mcp schema interfaces`, `pocketbase-mcp schema analyze`.
"""

import asyncio
import json
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from pocketbase_mcp.cli.app import app
from pocketbase_mcp.config import ConfigManager
from pocketbase_mcp.mcp.async_client import get_store
from pocketbase_mcp.mcp.server import authenticate_superuser
from pocketbase_mcp.schema.emitter import generate_interfaces
from pocketbase_mcp.schema.profiler import analyze_collection
from pocketbase_mcp.schema.synthesizer import synthesize_collections
from pocketbase_mcp.schemas.analysis import CollectionAnalysis
from pocketbase_mcp.schemas.options import SchemaGenerationOptions

console = Console()

schema_app = typer.Typer(help="Schema generation and analysis commands")
app.add_typer(schema_app, name="schema")


def _fail(command: str, e: Exception) -> NoReturn:
    logger.error(f"Error during schema {command}: {e}")
    typer.echo(f"Error during schema {command}: {e}", err=True)
    raise typer.Exit(1)


# --- Generate ---


@schema_app.command()
def generate(
    source: Annotated[
        Path,
        typer.Argument(help="TypeScript file with interface or type declarations", exists=True),
    ],
    auth: bool = typer.Option(
        False, "--auth", help="Append email/password fields to a User/Users type"
    ),
    timestamps: bool = typer.Option(
        False, "--timestamps", help="Append created/updated date fields"
    ),
):
    """Print PocketBase collection schemas generated from TypeScript declarations.

    Runs offline: nothing is sent to PocketBase.
    """
    try:
        options = SchemaGenerationOptions(
            include_authentication=auth, include_timestamps=timestamps
        )
        collections = synthesize_collections(source.read_text(encoding="utf-8"), options)
    except Exception as e:
        _fail("generate", e)

    if not collections:
        typer.echo("No interface or type declarations found.", err=True)
    typer.echo(json.dumps([c.to_payload() for c in collections], indent=2))


# --- Interfaces ---


async def _run_interfaces(names: list[str], include_relations: bool) -> str:
    await authenticate_superuser()
    async with get_store() as store:
        if names:
            collections = [await store.get_collection(name) for name in names]
        else:
            limit = ConfigManager().config.interface_collection_limit
            collections = await store.list_collections(page=1, per_page=limit)
    return generate_interfaces(collections, include_relations=include_relations)


@schema_app.command()
def interfaces(
    names: Annotated[
        Optional[list[str]],
        typer.Argument(help="Collections to include (default: all)"),
    ] = None,
    relations: bool = typer.Option(
        True, "--relations/--no-relations", help="Type relation fields with their target"
    ),
):
    """Print TypeScript interfaces for stored collections."""
    try:
        output = asyncio.run(_run_interfaces(names or [], relations))
    except Exception as e:
        _fail("interfaces", e)

    typer.echo(output, nl=False)


# --- Analyze ---


async def _run_analyze(
    collection: str, sample_size: int, fields: Optional[list[str]]
) -> CollectionAnalysis:
    await authenticate_superuser()
    async with get_store() as store:
        return await analyze_collection(store, collection, sample_size=sample_size, fields=fields)


def _print_analysis(analysis: CollectionAnalysis) -> None:
    table = Table(
        title=f"{analysis.collection_name}: {analysis.sample_count} of "
        f"{analysis.record_count} records sampled"
    )
    table.add_column("Field", style="cyan")
    table.add_column("Type")
    table.add_column("Non-null", justify="right")
    table.add_column("Unique", justify="right")
    table.add_column("Fill rate", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")

    for profile in analysis.fields:
        table.add_row(
            profile.name,
            profile.type,
            str(profile.non_null_count),
            str(profile.unique_value_count),
            profile.fill_rate,
            "" if profile.min is None else str(profile.min),
            "" if profile.max is None else str(profile.max),
        )

    if analysis.fields:
        console.print(table)
    for insight in analysis.insights:
        console.print(f"[yellow]- {insight}[/yellow]")


@schema_app.command()
def analyze(
    collection: Annotated[str, typer.Argument(help="Collection name or id")],
    sample_size: Optional[int] = typer.Option(
        None, "--sample-size", "-n", min=1, help="Records to sample (default 100)"
    ),
    field: Annotated[
        Optional[list[str]],
        typer.Option("--field", "-f", help="Restrict the analysis to this field (repeatable)"),
    ] = None,
):
    """Profile a sample of records and print per-field statistics."""
    sample_size = sample_size or ConfigManager().config.default_sample_size
    try:
        analysis = asyncio.run(_run_analyze(collection, sample_size, field or None))
    except Exception as e:
        _fail("analyze", e)

    _print_analysis(analysis)
