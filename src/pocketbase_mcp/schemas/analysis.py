"""Data profiling report models.

Serialized with ``by_alias=True`` the reports use the camelCase keys MCP
clients already consume (``collectionName``, ``fillRate``...).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

NO_RECORDS_INSIGHT = "No records available for analysis"


class FieldProfile(BaseModel):
    """Summary statistics for one field over a bounded record sample."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: str
    non_null_count: int = Field(
        ..., alias="nonNullValues", description="Sampled records where the value is not null"
    )
    unique_value_count: int = Field(
        ..., alias="uniqueValueCount", description="Distinct values after canonical encoding"
    )
    fill_rate: str = Field(
        ..., alias="fillRate", description="non_null_count / sample size, e.g. '83.33%'"
    )
    min: Optional[float | int] = None
    max: Optional[float | int] = None


class CollectionAnalysis(BaseModel):
    """Profiler output for one collection."""

    model_config = ConfigDict(populate_by_name=True)

    collection_name: str = Field(..., alias="collectionName")
    record_count: int = Field(
        ..., alias="recordCount", description="Total records reported by the store"
    )
    sample_count: int = Field(..., alias="sampleCount", description="Records actually analyzed")
    fields: list[FieldProfile] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)
