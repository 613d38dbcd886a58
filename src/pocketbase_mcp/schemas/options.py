"""Option objects accepted by the schema tools.

Tool callers send camelCase keys (``includeTimestamps``); Python callers may use
either spelling.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SchemaGenerationOptions(BaseModel):
    """Options for generating collection schemas from interface text."""

    model_config = ConfigDict(populate_by_name=True)

    include_authentication: bool = Field(
        default=False,
        alias="includeAuthentication",
        description="Append email/password fields to a User/Users type",
    )
    include_timestamps: bool = Field(
        default=False,
        alias="includeTimestamps",
        description="Append optional created/updated date fields",
    )


class InterfaceOptions(BaseModel):
    """Options for emitting interfaces from stored collections."""

    model_config = ConfigDict(populate_by_name=True)

    include_relations: bool = Field(
        default=True,
        alias="includeRelations",
        description="Type relation fields as a union with the target interface",
    )


class AnalysisOptions(BaseModel):
    """Options for profiling a collection."""

    model_config = ConfigDict(populate_by_name=True)

    sample_size: Optional[int] = Field(
        default=None,
        alias="sampleSize",
        description="Maximum number of records to sample (default 100)",
    )
    fields: Optional[list[str]] = Field(
        default=None, description="Restrict the analysis to these field names"
    )
