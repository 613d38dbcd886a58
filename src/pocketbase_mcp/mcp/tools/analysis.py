"""Data analysis tool for the PocketBase MCP server."""

import json
from typing import Optional

from fastmcp.exceptions import ToolError
from loguru import logger

from pocketbase_mcp.config import ConfigManager
from pocketbase_mcp.errors import ArgumentValidationError
from pocketbase_mcp.mcp.async_client import get_store
from pocketbase_mcp.mcp.server import mcp
from pocketbase_mcp.schema.profiler import analyze_collection
from pocketbase_mcp.schemas.options import AnalysisOptions


@mcp.tool(
    description="Analyze the data in a PocketBase collection and suggest improvements.",
)
async def analyze_collection_data(
    collection: str,
    options: Optional[AnalysisOptions] = None,
) -> str:
    """Profile a sample of records from one collection.

    Reports per field the non-null count, fill rate, number of distinct values
    and, for number fields, min/max. Insights flag fields that look like
    identifiers or are never populated. Statistics cover the sample only.

    Args:
        collection: Collection name or id
        options: sampleSize (default 100) and fields to restrict the analysis

    Returns:
        JSON object with collectionName, recordCount, sampleCount, fields and insights

    Examples:
        analyze_collection_data("posts")
        analyze_collection_data("posts", options={"sampleSize": 20, "fields": ["title"]})
    """
    options = options or AnalysisOptions()
    sample_size = options.sample_size or ConfigManager().config.default_sample_size
    logger.info(
        f"MCP tool call tool=analyze_collection_data collection={collection} "
        f"sample_size={sample_size} fields={options.fields}"
    )

    try:
        if not collection or not collection.strip():
            raise ArgumentValidationError("Collection name is required")
        if sample_size < 1:
            raise ArgumentValidationError(f"sampleSize must be at least 1, got {sample_size}")

        async with get_store() as store:
            analysis = await analyze_collection(
                store, collection, sample_size=sample_size, fields=options.fields
            )
    except Exception as e:
        logger.error(f"Collection analysis failed: {e}, collection: {collection}")
        raise ToolError(f"Failed to analyze collection data: {e}") from e

    logger.info(
        f"MCP tool response: tool=analyze_collection_data collection={collection} "
        f"sampled={analysis.sample_count} fields={len(analysis.fields)} "
        f"insights={len(analysis.insights)}"
    )
    return json.dumps(analysis.model_dump(by_alias=True), indent=2)
