"""Tests for pocketbase_mcp.schema.synthesizer -- collections from interface text."""

from pocketbase_mcp.schema.synthesizer import synthesize_collections
from pocketbase_mcp.schemas.options import SchemaGenerationOptions


def _fields(collection) -> list[tuple[str, str, bool]]:
    return [(f.name, f.type, f.required) for f in collection.fields]


def test_product_with_timestamps():
    source = "interface Product { name: string; price: number; tags: string[]; }"
    (product,) = synthesize_collections(
        source, SchemaGenerationOptions(include_timestamps=True)
    )

    assert product.name == "product"
    assert product.type == "base"
    assert _fields(product) == [
        ("name", "text", True),
        ("price", "number", True),
        ("tags", "json", True),
        ("created", "date", False),
        ("updated", "date", False),
    ]


def test_user_gets_auth_fields_appended():
    (user,) = synthesize_collections(
        "interface User { username: string }",
        SchemaGenerationOptions(include_authentication=True),
    )
    assert _fields(user) == [
        ("username", "text", True),
        ("email", "email", True),
        ("password", "text", True),
    ]


def test_auth_fields_only_for_user_types():
    (post,) = synthesize_collections(
        "interface Post { title: string }",
        SchemaGenerationOptions(include_authentication=True),
    )
    assert [f.name for f in post.fields] == ["title"]


def test_users_plural_is_an_auth_type():
    (users,) = synthesize_collections(
        "type Users = { name: string }",
        SchemaGenerationOptions(include_authentication=True, include_timestamps=True),
    )
    assert [f.name for f in users.fields] == ["name", "email", "password", "created", "updated"]


def test_optional_members_are_not_required():
    (post,) = synthesize_collections("interface Post { title: string; subtitle?: string }")
    assert _fields(post) == [("title", "text", True), ("subtitle", "text", False)]


def test_options_default_to_no_augmentation():
    (user,) = synthesize_collections("interface User { name: string }")
    assert [f.name for f in user.fields] == ["name"]


def test_options_accept_camel_case_keys():
    options = SchemaGenerationOptions.model_validate({"includeTimestamps": True})
    (post,) = synthesize_collections("interface Post { title: string }", options)
    assert [f.name for f in post.fields][-2:] == ["created", "updated"]


def test_colliding_augmented_fields_are_kept():
    (post,) = synthesize_collections(
        "interface Post { title: string; created: Date }",
        SchemaGenerationOptions(include_timestamps=True),
    )
    assert [f.name for f in post.fields] == ["title", "created", "created", "updated"]


def test_one_collection_per_block():
    collections = synthesize_collections(
        "interface Author { name: string }\ninterface BlogPost { title: string; author: Author }"
    )
    assert [c.name for c in collections] == ["author", "blogpost"]
    assert collections[1].fields[1].type == "text"


def test_no_blocks_no_collections():
    assert synthesize_collections("const x = 1;") == []


def test_payload_shape():
    (post,) = synthesize_collections("interface Post { title: string }")
    assert post.to_payload() == {
        "name": "post",
        "type": "base",
        "fields": [{"name": "title", "type": "text", "required": True}],
    }
