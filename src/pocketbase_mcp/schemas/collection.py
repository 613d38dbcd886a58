"""Collection, field and record models as exchanged with PocketBase.

PocketBase 0.23+ puts type-specific field settings (``collectionId``,
``values``, ``maxSelect``...) at the top level of each field, while older
releases nest them under ``options`` and call the field list ``schema``. Both
shapes are accepted; settings always end up in ``FieldSchema.options``.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Every store type the engine knows how to create.
STORE_TYPES = frozenset(
    {
        "text",
        "number",
        "bool",
        "email",
        "url",
        "date",
        "select",
        "relation",
        "file",
        "json",
        "editor",
        "autodate",
    }
)

COLLECTION_KINDS = frozenset({"base", "auth", "view"})

RULE_NAMES = ("listRule", "viewRule", "createRule", "updateRule", "deleteRule")


class FieldSchema(BaseModel):
    """A single field descriptor of a collection.

    ``type`` is kept as a plain string so that collections fetched from newer
    PocketBase releases (``password``, ``geoPoint``...) still load. Fields
    supplied for creation are checked against STORE_TYPES by the caller.
    """

    id: Optional[str] = None
    name: str
    type: str
    required: bool = False
    system: bool = False
    options: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_options(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        options = dict(data.pop("options", None) or {})
        for key in list(data):
            if key not in cls.model_fields:
                options[key] = data.pop(key)
        data["options"] = options
        return data

    @property
    def target_collection_id(self) -> Optional[str]:
        """Target collection of a relation field, when known."""
        target = self.options.get("collectionId")
        return str(target) if target else None

    def to_payload(self) -> dict[str, Any]:
        """Flattened shape accepted by the collections API."""
        payload: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "required": self.required,
        }
        payload.update(self.options)
        return payload


class CollectionSchema(BaseModel):
    """A collection definition: name, kind, ordered fields, access rules, indexes."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = None
    name: str
    type: str = "base"
    fields: list[FieldSchema] = Field(default_factory=list)
    list_rule: Optional[str] = Field(default=None, alias="listRule")
    view_rule: Optional[str] = Field(default=None, alias="viewRule")
    create_rule: Optional[str] = Field(default=None, alias="createRule")
    update_rule: Optional[str] = Field(default=None, alias="updateRule")
    delete_rule: Optional[str] = Field(default=None, alias="deleteRule")
    indexes: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_schema_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and "fields" not in data and "schema" in data:
            data = dict(data)
            data["fields"] = data.pop("schema") or []
        return data

    @property
    def access_rules(self) -> dict[str, Optional[str]]:
        return {
            "listRule": self.list_rule,
            "viewRule": self.view_rule,
            "createRule": self.create_rule,
            "updateRule": self.update_rule,
            "deleteRule": self.delete_rule,
        }

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def to_payload(self) -> dict[str, Any]:
        """Create-collection payload. Unset rules are omitted so the store defaults apply."""
        payload: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "fields": [f.to_payload() for f in self.fields],
        }
        for rule_name, rule in self.access_rules.items():
            if rule is not None:
                payload[rule_name] = rule
        if self.indexes:
            payload["indexes"] = list(self.indexes)
        return payload

    def to_json_dict(self) -> dict[str, Any]:
        """Full description as returned to tool callers."""
        data = self.model_dump(by_alias=True, exclude={"fields"})
        data["fields"] = [
            {**({"id": f.id} if f.id else {}), **f.to_payload(), "system": f.system}
            for f in self.fields
        ]
        return data


class RecordPage(BaseModel):
    """One page of records from the records list endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = 1
    per_page: int = Field(default=30, alias="perPage")
    total_items: int = Field(default=-1, alias="totalItems")
    total_pages: int = Field(default=-1, alias="totalPages")
    items: list[dict[str, Any]] = Field(default_factory=list)
