"""Pydantic models exchanged with PocketBase and returned by the tools."""

from pocketbase_mcp.schemas.analysis import (
    NO_RECORDS_INSIGHT,
    CollectionAnalysis,
    FieldProfile,
)
from pocketbase_mcp.schemas.collection import (
    COLLECTION_KINDS,
    RULE_NAMES,
    STORE_TYPES,
    CollectionSchema,
    FieldSchema,
    RecordPage,
)
from pocketbase_mcp.schemas.options import (
    AnalysisOptions,
    InterfaceOptions,
    SchemaGenerationOptions,
)

__all__ = [
    "NO_RECORDS_INSIGHT",
    "CollectionAnalysis",
    "FieldProfile",
    "COLLECTION_KINDS",
    "RULE_NAMES",
    "STORE_TYPES",
    "CollectionSchema",
    "FieldSchema",
    "RecordPage",
    "AnalysisOptions",
    "InterfaceOptions",
    "SchemaGenerationOptions",
]
