"""Schema engine for PocketBase collections.

Turns TypeScript interface declarations into collection definitions, renders
collections back into interfaces, profiles sampled records and migrates
collections onto new schemas while preserving their data.
"""

from pocketbase_mcp.schema.extractor import (
    ExtractedType,
    FieldDescription,
    InterfaceExtractor,
    extract_interfaces,
)
from pocketbase_mcp.schema.type_mapper import (
    is_store_type,
    to_primitive_kind,
    to_store_type,
)
from pocketbase_mcp.schema.synthesizer import (
    build_collection,
    synthesize_collections,
)
from pocketbase_mcp.schema.emitter import (
    emit_interface,
    generate_interfaces,
)
from pocketbase_mcp.schema.store import CollectionStore
from pocketbase_mcp.schema.profiler import (
    analyze_collection,
    profile_records,
)
from pocketbase_mcp.schema.migration import (
    CollectionMigrator,
    MigrationPlan,
    MigrationResult,
    MigrationState,
    TransformFailure,
    apply_transforms,
    build_migration_plan,
    compile_transforms,
)

__all__ = [
    # Extractor
    "ExtractedType",
    "FieldDescription",
    "InterfaceExtractor",
    "extract_interfaces",
    # Type mapping
    "is_store_type",
    "to_primitive_kind",
    "to_store_type",
    # Synthesizer
    "build_collection",
    "synthesize_collections",
    # Emitter
    "emit_interface",
    "generate_interfaces",
    # Store
    "CollectionStore",
    # Profiler
    "analyze_collection",
    "profile_records",
    # Migration
    "CollectionMigrator",
    "MigrationPlan",
    "MigrationResult",
    "MigrationState",
    "TransformFailure",
    "apply_transforms",
    "build_migration_plan",
    "compile_transforms",
]
