"""Collection schema synthesis from interface text.

Combines the extractor and the type mapper: every type block becomes one base
collection named after the lower-cased type name, fields in declaration order.
Optional augmentations are appended after the extracted fields:

  - authentication: a type named User/Users gets required email and password
  - timestamps: every type gets optional created and updated date fields

Appended fields are not deduplicated against extracted ones. A collision is
reported with a warning and both entries are kept in append order.
"""

from loguru import logger

from pocketbase_mcp.schema.extractor import ExtractedType, FieldDescription, extract_interfaces
from pocketbase_mcp.schema.type_mapper import to_store_type
from pocketbase_mcp.schemas.collection import CollectionSchema, FieldSchema
from pocketbase_mcp.schemas.options import SchemaGenerationOptions

AUTH_TYPE_NAMES = frozenset({"user", "users"})


def _auth_fields() -> list[FieldSchema]:
    return [
        FieldSchema(name="email", type="email", required=True),
        FieldSchema(name="password", type="text", required=True),
    ]


def _timestamp_fields() -> list[FieldSchema]:
    return [
        FieldSchema(name="created", type="date", required=False),
        FieldSchema(name="updated", type="date", required=False),
    ]


def field_from_description(description: FieldDescription) -> FieldSchema:
    """Store field for one extracted member. Required unless marked optional."""
    return FieldSchema(
        name=description.name,
        type=to_store_type(description.kind, description.is_array),
        required=not description.optional,
    )


def build_collection(
    extracted: ExtractedType,
    options: SchemaGenerationOptions | None = None,
) -> CollectionSchema:
    """Build one collection schema from an extracted type."""
    options = options or SchemaGenerationOptions()
    name = extracted.name.lower()
    fields = [field_from_description(d) for d in extracted.fields]

    appended: list[FieldSchema] = []
    if options.include_authentication and name in AUTH_TYPE_NAMES:
        appended.extend(_auth_fields())
    if options.include_timestamps:
        appended.extend(_timestamp_fields())

    existing = {f.name for f in fields}
    collisions = [f.name for f in appended if f.name in existing]
    if collisions:
        logger.warning(
            f"Generated collection '{name}' has duplicate field names {collisions}; "
            f"augmented fields were appended after the extracted ones"
        )

    return CollectionSchema(name=name, type="base", fields=fields + appended)


def synthesize_collections(
    source_code: str,
    options: SchemaGenerationOptions | None = None,
) -> list[CollectionSchema]:
    """Generate one collection schema per type block found in source_code."""
    options = options or SchemaGenerationOptions()
    collections = [build_collection(extracted, options) for extracted in extract_interfaces(source_code)]
    logger.debug(
        f"Synthesized {len(collections)} collections "
        f"auth={options.include_authentication} timestamps={options.include_timestamps}"
    )
    return collections
