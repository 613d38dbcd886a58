"""Schema tools for the PocketBase MCP server.

Provides conversion between TypeScript interface declarations and PocketBase
collection schemas, plus read access to a stored collection definition.
"""

import json
from typing import Optional

from fastmcp.exceptions import ToolError
from loguru import logger

from pocketbase_mcp.config import ConfigManager
from pocketbase_mcp.errors import ArgumentValidationError
from pocketbase_mcp.mcp.async_client import get_store
from pocketbase_mcp.mcp.server import mcp
from pocketbase_mcp.schema.emitter import generate_interfaces
from pocketbase_mcp.schema.synthesizer import synthesize_collections
from pocketbase_mcp.schemas.collection import CollectionSchema
from pocketbase_mcp.schemas.options import InterfaceOptions, SchemaGenerationOptions


@mcp.tool(
    description="Generate PocketBase collection schemas from TypeScript interfaces or types.",
)
async def generate_pb_schema(
    sourceCode: str,
    options: Optional[SchemaGenerationOptions] = None,
) -> str:
    """Generate one collection schema per interface or type alias in sourceCode.

    Members are mapped to PocketBase field types (string -> text, number ->
    number, boolean -> bool, Date -> date, arrays and objects -> json). Members
    marked optional with '?' become non-required fields. Nothing is written to
    PocketBase.

    Args:
        sourceCode: TypeScript source with one or more interface/type declarations
        options: includeAuthentication appends email/password to a User type;
            includeTimestamps appends created/updated date fields

    Returns:
        JSON array of create-collection payloads

    Examples:
        generate_pb_schema("interface Post { title: string; views?: number }")
        generate_pb_schema(source, options={"includeTimestamps": True})
    """
    options = options or SchemaGenerationOptions()
    logger.info(
        f"MCP tool call tool=generate_pb_schema source_length={len(sourceCode or '')} "
        f"auth={options.include_authentication} timestamps={options.include_timestamps}"
    )

    try:
        collections = synthesize_collections(sourceCode or "", options)
    except Exception as e:
        logger.error(f"Schema generation failed: {e}")
        raise ToolError(f"Failed to generate schema: {e}") from e

    logger.info(
        f"MCP tool response: tool=generate_pb_schema collections={[c.name for c in collections]}"
    )
    return json.dumps([c.to_payload() for c in collections], indent=2)


@mcp.tool(
    description="Generate TypeScript interfaces from PocketBase collections.",
)
async def generate_typescript_interfaces(
    collections: Optional[list[str]] = None,
    options: Optional[InterfaceOptions] = None,
) -> str:
    """Render stored collections as TypeScript interfaces.

    Args:
        collections: Collection names to include. Empty or omitted means all
            collections (up to the configured limit).
        options: includeRelations (default true) types relation fields as
            'string | <Target>'

    Returns:
        TypeScript source text with one interface per collection
    """
    options = options or InterfaceOptions()
    names = [name for name in (collections or []) if name]
    logger.info(
        f"MCP tool call tool=generate_typescript_interfaces collections={names or 'all'} "
        f"include_relations={options.include_relations}"
    )

    try:
        async with get_store() as store:
            if names:
                fetched: list[CollectionSchema] = []
                for name in names:
                    fetched.append(await store.get_collection(name))
            else:
                limit = ConfigManager().config.interface_collection_limit
                fetched = await store.list_collections(page=1, per_page=limit)

        output = generate_interfaces(fetched, include_relations=options.include_relations)
    except Exception as e:
        logger.error(f"Interface generation failed: {e}")
        raise ToolError(f"Failed to generate TypeScript interfaces: {e}") from e

    logger.info(
        f"MCP tool response: tool=generate_typescript_interfaces interfaces={len(fetched)}"
    )
    return output


@mcp.tool(
    description="Get the stored schema of a PocketBase collection.",
)
async def get_collection_schema(collection: str) -> str:
    """Fetch a collection definition: fields, access rules and indexes.

    Useful to inspect a schema before calling migrate_collection.

    Args:
        collection: Collection name or id

    Returns:
        JSON object describing the collection
    """
    logger.info(f"MCP tool call tool=get_collection_schema collection={collection}")

    try:
        if not collection or not collection.strip():
            raise ArgumentValidationError("Collection name is required")
        async with get_store() as store:
            result = await store.get_collection(collection)
    except Exception as e:
        logger.error(f"Failed to get collection schema: {e}, collection: {collection}")
        raise ToolError(f"Failed to get collection schema: {e}") from e

    logger.info(
        f"MCP tool response: tool=get_collection_schema collection={result.name} "
        f"fields={len(result.fields)}"
    )
    return json.dumps(result.to_json_dict(), indent=2)
