"""Collection migration with data preservation.

Moves a collection onto an incompatible schema by building a replacement next
to it and swapping identities:

  Planning -> ShadowCreated -> RecordsCopied -> OldDeleted -> Renamed

1. Create ``<source>_migration_<ms timestamp>`` with the target fields and any
   access rules the caller supplied (others are left to the store defaults).
2. Read every source record, apply the per-field transforms, and create each
   result in the shadow collection, one at a time, in source order.
3. Delete the source collection.
4. Rename the shadow collection to the final name (the source name by default).

The swap is not transactional and nothing is rolled back. A failed step raises
MigrationError carrying the last completed state and the plan, so the operator
knows whether a shadow collection is left behind. If the source is already
deleted when the rename fails, ConsistencyError is raised instead.

A transform that fails for one field of one record is logged and leaves that
field at its old value; it never aborts the migration.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

from loguru import logger
from pydantic import ValidationError

from pocketbase_mcp.errors import ArgumentValidationError, ConsistencyError, MigrationError
from pocketbase_mcp.schema.store import CollectionStore
from pocketbase_mcp.schema.type_mapper import is_store_type
from pocketbase_mcp.schemas.collection import RULE_NAMES, CollectionSchema, FieldSchema
from pocketbase_mcp.transforms import Transform, TransformError, compile_transform

# Response-only keys of a fetched record that must not be written back.
RECORD_METADATA_KEYS = frozenset({"collectionId", "collectionName", "expand"})


class MigrationState(str, Enum):
    """Steps of a migration, in order. FAILED is terminal."""

    PLANNING = "planning"
    SHADOW_CREATED = "shadow_created"
    RECORDS_COPIED = "records_copied"
    OLD_DELETED = "old_deleted"
    RENAMED = "renamed"
    FAILED = "failed"


# --- Plan ---


@dataclass
class TransformFailure:
    """A transform that could not be compiled or applied."""

    field: str
    error: str
    record_id: str | None = None  # None for compile failures, which affect every record


@dataclass
class MigrationPlan:
    """Working state of one migration run. Never persisted."""

    source_collection: str
    shadow_collection_name: str
    target_fields: list[FieldSchema]
    field_transforms: dict[str, str]
    final_name: str
    access_rules: dict[str, str] = field(default_factory=dict)  # Only rules the caller supplied
    compiled_transforms: dict[str, Transform] = field(default_factory=dict)
    compile_failures: list[TransformFailure] = field(default_factory=list)

    def shadow_config(self) -> dict[str, Any]:
        """Create-collection payload for the shadow collection."""
        config: dict[str, Any] = {
            "name": self.shadow_collection_name,
            "fields": [f.to_payload() for f in self.target_fields],
        }
        config.update(self.access_rules)
        return config


def shadow_collection_name(source_collection: str, timestamp_ms: int | None = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{source_collection}_migration_{timestamp_ms}"


def _parse_field(raw: FieldSchema | Mapping[str, Any]) -> FieldSchema:
    if isinstance(raw, FieldSchema):
        parsed = raw
    else:
        try:
            parsed = FieldSchema.model_validate(dict(raw))
        except ValidationError as e:
            raise ArgumentValidationError(f"Invalid field definition {dict(raw)!r}: {e}") from e
    if not is_store_type(parsed.type):
        raise ArgumentValidationError(
            f"Unsupported field type '{parsed.type}' for field '{parsed.name}'"
        )
    return parsed


def build_migration_plan(
    collection: str,
    fields: Iterable[FieldSchema | Mapping[str, Any]],
    data_transforms: Mapping[str, str] | None = None,
    name: str | None = None,
    access_rules: Mapping[str, str | None] | None = None,
    timestamp_ms: int | None = None,
) -> MigrationPlan:
    """Validate migration arguments and derive the plan.

    Args:
        collection: Source collection name.
        fields: Target field definitions, in the order they should appear.
        data_transforms: Field name -> transform expression over ``oldValue``.
        name: Final collection name. Defaults to the source name.
        access_rules: listRule/viewRule/... overrides. None values are treated
            as not supplied.
        timestamp_ms: Clock override for the shadow collection name.

    Raises:
        ArgumentValidationError: On a missing collection name, an unknown field
            type, an unknown rule name or a non-string transform.
    """
    if not collection or not collection.strip():
        raise ArgumentValidationError("Collection name is required")
    if fields is None:
        raise ArgumentValidationError("Target fields are required")

    target_fields = [_parse_field(raw) for raw in fields]

    transforms: dict[str, str] = {}
    for field_name, expression in (data_transforms or {}).items():
        if not isinstance(expression, str):
            raise ArgumentValidationError(
                f"Transform for field '{field_name}' must be an expression string"
            )
        transforms[field_name] = expression

    rules: dict[str, str] = {}
    for rule_name, rule in (access_rules or {}).items():
        if rule_name not in RULE_NAMES:
            raise ArgumentValidationError(f"Unknown access rule '{rule_name}'")
        if rule is not None:
            rules[rule_name] = rule

    # Compile errors surface here, before the shadow collection exists
    compiled, compile_failures = compile_transforms(transforms)

    return MigrationPlan(
        source_collection=collection,
        shadow_collection_name=shadow_collection_name(collection, timestamp_ms),
        target_fields=target_fields,
        field_transforms=transforms,
        final_name=name or collection,
        access_rules=rules,
        compiled_transforms=compiled,
        compile_failures=compile_failures,
    )


# --- Record transformation ---


@dataclass
class MigrationResult:
    collection: CollectionSchema
    records_copied: int
    transform_failures: list[TransformFailure] = field(default_factory=list)


def compile_transforms(
    field_transforms: Mapping[str, str],
) -> tuple[dict[str, Transform], list[TransformFailure]]:
    """Compile every expression once. Invalid ones are reported, not raised."""
    compiled: dict[str, Transform] = {}
    failures: list[TransformFailure] = []
    for field_name, expression in field_transforms.items():
        try:
            compiled[field_name] = compile_transform(expression)
        except TransformError as e:
            logger.warning(
                f"Failed to compile transform for field {field_name}: {e}; "
                f"field will be copied unchanged"
            )
            failures.append(TransformFailure(field=field_name, error=str(e)))
    return compiled, failures


def apply_transforms(
    record: Mapping[str, Any],
    transforms: Mapping[str, Transform],
) -> tuple[dict[str, Any], list[TransformFailure]]:
    """Copy a record and overwrite each transformed field with its result.

    Each transform sees only the field's old value. A failing transform leaves
    its field unchanged and does not affect the others.
    """
    new_record = {k: v for k, v in record.items() if k not in RECORD_METADATA_KEYS}
    failures: list[TransformFailure] = []
    record_id = record.get("id")

    for field_name, transform in transforms.items():
        try:
            new_record[field_name] = transform.apply(record.get(field_name))
        except TransformError as e:
            logger.warning(f"Failed to transform field {field_name} of record {record_id}: {e}")
            failures.append(TransformFailure(field=field_name, error=str(e), record_id=record_id))

    return new_record, failures


# --- Orchestration ---


class CollectionMigrator:
    """Runs a migration plan against a store, one step at a time.

    Calls are awaited strictly in sequence; there is no concurrency, locking or
    cancellation. ``state`` reflects the last completed step.

    Usage:
        plan = build_migration_plan("posts", fields, {"title": "oldValue.trim()"})
        result = await CollectionMigrator(store).migrate(plan)
    """

    def __init__(self, store: CollectionStore):
        self.store = store
        self.state = MigrationState.PLANNING

    def _fail(self, message: str, plan: MigrationPlan, error_cls: type[MigrationError] = MigrationError) -> MigrationError:
        reached = self.state
        self.state = MigrationState.FAILED
        logger.error(f"Migration of '{plan.source_collection}' failed after {reached.value}: {message}")
        return error_cls(message, state=reached, plan=plan)

    async def migrate(self, plan: MigrationPlan) -> MigrationResult:
        source = plan.source_collection
        shadow = plan.shadow_collection_name
        self.state = MigrationState.PLANNING
        logger.info(
            f"Migrating collection={source} shadow={shadow} final_name={plan.final_name} "
            f"fields={len(plan.target_fields)} transforms={sorted(plan.field_transforms)}"
        )

        # --- Create shadow collection ---
        try:
            await self.store.create_collection(plan.shadow_config())
        except Exception as e:
            raise self._fail(f"Failed to create shadow collection '{shadow}': {e}", plan) from e
        self.state = MigrationState.SHADOW_CREATED

        # --- Copy and transform records ---
        try:
            records = await self.store.get_full_record_list(source)
        except Exception as e:
            raise self._fail(
                f"Failed to read records from '{source}': {e}. "
                f"Shadow collection '{shadow}' was left in place",
                plan,
            ) from e

        transform_failures = list(plan.compile_failures)
        copied = 0
        for record in records:
            new_record, failures = apply_transforms(record, plan.compiled_transforms)
            transform_failures.extend(failures)
            try:
                await self.store.create_record(shadow, new_record)
            except Exception as e:
                raise self._fail(
                    f"Failed to copy record '{record.get('id')}' into '{shadow}' "
                    f"after {copied} of {len(records)} records: {e}. "
                    f"Shadow collection '{shadow}' was left in place",
                    plan,
                ) from e
            copied += 1
        self.state = MigrationState.RECORDS_COPIED
        logger.info(f"Copied {copied} records from {source} to {shadow}")

        # --- Delete source collection ---
        try:
            await self.store.delete_collection(source)
        except Exception as e:
            raise self._fail(
                f"Failed to delete source collection '{source}': {e}. "
                f"Shadow collection '{shadow}' holds the migrated records "
                f"and must be reconciled manually",
                plan,
            ) from e
        self.state = MigrationState.OLD_DELETED

        # --- Rename shadow collection ---
        try:
            collection = await self.store.update_collection(shadow, {"name": plan.final_name})
        except Exception as e:
            raise self._fail(
                f"Source collection '{source}' was deleted but renaming '{shadow}' "
                f"to '{plan.final_name}' failed: {e}. Rename it manually",
                plan,
                ConsistencyError,
            ) from e
        self.state = MigrationState.RENAMED

        logger.info(
            f"Migration complete collection={collection.name} records={copied} "
            f"transform_failures={len(transform_failures)}"
        )
        return MigrationResult(
            collection=collection,
            records_copied=copied,
            transform_failures=transform_failures,
        )
