"""Interface emitter: stored collection schemas -> TypeScript interface text.

Pure transform once the collection list is known. Output is deterministic and
follows field declaration order. Each interface carries ``id`` first and the
``created``/``updated`` system members last; stored fields with those names are
skipped so that no member is declared twice.
"""

from typing import Iterable

from pocketbase_mcp.schema.type_mapper import to_primitive_kind
from pocketbase_mcp.schemas.collection import CollectionSchema

INTERFACE_HEADER = "/**\n * PocketBase TypeScript Interfaces\n * Generated automatically\n */\n\n"

SYSTEM_MEMBERS = ("id", "created", "updated")


def pascal_case(name: str) -> str:
    """posts_archive -> PostsArchive"""
    return "".join(word[:1].upper() + word[1:] for word in name.split("_"))


def _relation_target(
    collection_id: str | None,
    names_by_id: dict[str, str],
) -> str | None:
    if not collection_id:
        return None
    return pascal_case(names_by_id.get(collection_id, collection_id))


def emit_interface(
    collection: CollectionSchema,
    names_by_id: dict[str, str] | None = None,
    include_relations: bool = True,
) -> str:
    """Emit one interface block for a collection."""
    names_by_id = names_by_id or {}
    lines = [f"interface {pascal_case(collection.name)} {{", "  id: string;"]

    for field in collection.fields:
        if field.name in SYSTEM_MEMBERS:
            continue
        target = (
            _relation_target(field.target_collection_id, names_by_id)
            if include_relations and field.type == "relation"
            else None
        )
        optional = "" if field.required else "?"
        lines.append(f"  {field.name}{optional}: {to_primitive_kind(field.type, target)};")

    lines.append("  created: string;")
    lines.append("  updated: string;")
    lines.append("}")
    return "\n".join(lines) + "\n\n"


def generate_interfaces(
    collections: Iterable[CollectionSchema],
    include_relations: bool = True,
) -> str:
    """Emit interfaces for all collections, in the order given.

    Relation targets are named after the target collection when it is part of
    the list; otherwise the raw collection id is used.
    """
    collections = list(collections)
    names_by_id = {c.id: c.name for c in collections if c.id}
    output = INTERFACE_HEADER
    for collection in collections:
        output += emit_interface(collection, names_by_id, include_relations)
    return output
