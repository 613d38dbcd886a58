"""Collection migration tool for the PocketBase MCP server."""

import json
from typing import Any, Optional

from fastmcp.exceptions import ToolError
from loguru import logger

from pocketbase_mcp.mcp.async_client import get_store
from pocketbase_mcp.mcp.server import mcp
from pocketbase_mcp.schema.migration import CollectionMigrator, build_migration_plan


@mcp.tool(
    description=(
        "Migrate a PocketBase collection to a new schema while preserving its data, "
        "optionally transforming field values and renaming the collection."
    ),
)
async def migrate_collection(
    collection: str,
    fields: list[dict[str, Any]],
    dataTransforms: Optional[dict[str, str]] = None,
    name: Optional[str] = None,
    listRule: Optional[str] = None,
    viewRule: Optional[str] = None,
    createRule: Optional[str] = None,
    updateRule: Optional[str] = None,
    deleteRule: Optional[str] = None,
) -> str:
    """Rebuild a collection with a new field list and copy its records over.

    A temporary collection '<collection>_migration_<timestamp>' is created with
    the new fields, every record is copied (with transforms applied), the old
    collection is deleted and the temporary one is renamed. The swap is not
    atomic: if a step fails, collections created so far are left in place and
    the error names the step that failed.

    Transforms are expressions over 'oldValue', the field's previous value,
    e.g. "oldValue.toUpperCase()", "Number(oldValue) * 100",
    "oldValue ? 'yes' : 'no'". A transform that fails for a record leaves that
    field unchanged.

    Args:
        collection: Collection to migrate
        fields: New field definitions ({name, type, required, ...options})
        dataTransforms: Field name -> transform expression
        name: New collection name. Defaults to the current name.
        listRule: List access rule for the new collection ('' means public)
        viewRule: View access rule
        createRule: Create access rule
        updateRule: Update access rule
        deleteRule: Delete access rule

    Returns:
        JSON object describing the migrated collection
    """
    logger.info(
        f"MCP tool call tool=migrate_collection collection={collection} name={name} "
        f"fields={len(fields or [])} transforms={sorted(dataTransforms or {})}"
    )

    try:
        plan = build_migration_plan(
            collection,
            fields,
            data_transforms=dataTransforms,
            name=name,
            access_rules={
                "listRule": listRule,
                "viewRule": viewRule,
                "createRule": createRule,
                "updateRule": updateRule,
                "deleteRule": deleteRule,
            },
        )
        async with get_store() as store:
            result = await CollectionMigrator(store).migrate(plan)
    except Exception as e:
        logger.error(f"Collection migration failed: {e}, collection: {collection}")
        raise ToolError(f"Failed to migrate collection: {e}") from e

    if result.transform_failures:
        logger.warning(
            f"Migration of {collection} completed with "
            f"{len(result.transform_failures)} transform failures"
        )
    logger.info(
        f"MCP tool response: tool=migrate_collection collection={result.collection.name} "
        f"records={result.records_copied}"
    )
    return json.dumps(result.collection.to_json_dict(), indent=2)
