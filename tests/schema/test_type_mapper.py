"""Tests for pocketbase_mcp.schema.type_mapper."""

import pytest

from pocketbase_mcp.schema.type_mapper import (
    PRIMITIVE_KINDS,
    is_store_type,
    to_primitive_kind,
    to_store_type,
)


@pytest.mark.parametrize(
    "kind,expected",
    [
        ("string", "text"),
        ("number", "number"),
        ("boolean", "bool"),
        ("date", "date"),
        ("object", "json"),
        ("array", "json"),
    ],
)
def test_forward_map(kind, expected):
    assert to_store_type(kind) == expected


def test_forward_map_is_a_function_of_kind_alone():
    first = {kind: to_store_type(kind) for kind in PRIMITIVE_KINDS}
    to_store_type("number", is_array=True)
    second = {kind: to_store_type(kind) for kind in PRIMITIVE_KINDS}
    assert first == second


def test_arrays_map_to_json_whatever_the_element_kind():
    assert to_store_type("number", is_array=True) == "json"
    assert to_store_type("string", is_array=True) == "json"


def test_unknown_kind_falls_back_to_text():
    assert to_store_type("tuple") == "text"


@pytest.mark.parametrize(
    "store_type,expected",
    [
        ("text", "string"),
        ("editor", "string"),
        ("email", "string"),
        ("url", "string"),
        ("number", "number"),
        ("bool", "boolean"),
        ("date", "string"),
        ("json", "any"),
        ("select", "string"),
        ("file", "string"),
        ("relation", "string"),
        ("geoPoint", "string"),
    ],
)
def test_backward_map(store_type, expected):
    assert to_primitive_kind(store_type) == expected


def test_relation_with_target_hint():
    assert to_primitive_kind("relation", "Users") == "string | Users"


def test_maps_are_not_inverses():
    # date survives the trip out but comes back as a string
    assert to_primitive_kind(to_store_type("date")) == "string"


def test_is_store_type():
    assert is_store_type("relation")
    assert not is_store_type("varchar")
