"""Mapping between interface primitive kinds and PocketBase store types.

The two directions are consistent but not inverses; a round trip loses detail:

  forward   string -> text, number -> number, boolean -> bool, date -> date,
            object -> json, any array -> json
  backward  text/editor/url/email -> string, number -> number, bool -> boolean,
            date -> string (store dates travel as text), json -> any,
            relation -> string, or "string | Target" with a target hint

Neither function raises: unknown input falls back to text / string.
"""

from pocketbase_mcp.schemas.collection import STORE_TYPES

PRIMITIVE_KINDS = frozenset({"string", "number", "boolean", "date", "array", "object"})

_FORWARD = {
    "string": "text",
    "number": "number",
    "boolean": "bool",
    "date": "date",
    "array": "json",
    "object": "json",
}

_BACKWARD = {
    "text": "string",
    "editor": "string",
    "url": "string",
    "email": "string",
    "number": "number",
    "bool": "boolean",
    "date": "string",
    "autodate": "string",
    "json": "any",
    "select": "string",
    "file": "string",
}

UNTYPED = "any"


def to_store_type(primitive_kind: str, is_array: bool = False) -> str:
    """Store type for a primitive kind. Array-flagged fields always become json."""
    if is_array:
        return "json"
    return _FORWARD.get(primitive_kind, "text")


def to_primitive_kind(store_type: str, target_type: str | None = None) -> str:
    """Interface type for a store type.

    Args:
        store_type: The field's store type.
        target_type: For relation fields, the interface name of the target
            collection. Without it a relation is just the related id.
    """
    if store_type == "relation":
        return f"string | {target_type}" if target_type else "string"
    return _BACKWARD.get(store_type, "string")


def is_store_type(value: str) -> bool:
    return value in STORE_TYPES
