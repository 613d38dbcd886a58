"""Data profiler for PocketBase collections.

Samples one page of records and computes per-field statistics:

  - non-null count and fill rate (non-null / sampled, two decimals)
  - unique value count, values compared by their canonical JSON encoding so
    equal nested content counts once
  - min/max for number fields

Insights are advisory and bounded by the sample; no population inference is made:

  - all sampled values distinct (and more than 5 records) -> identifier candidate
  - no values at all -> unused field
"""

import json
import math
from collections.abc import Iterable
from typing import Any

from loguru import logger

from pocketbase_mcp.schema.store import CollectionStore
from pocketbase_mcp.schemas.analysis import NO_RECORDS_INSIGHT, CollectionAnalysis, FieldProfile
from pocketbase_mcp.schemas.collection import FieldSchema

DEFAULT_SAMPLE_SIZE = 100

# The identifier insight needs more than this many sampled records.
MIN_IDENTIFIER_SAMPLE = 5


def canonical_encoding(value: Any) -> str:
    """Stable string form of a value; dict key order does not matter."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def profile_field(field: FieldSchema, records: list[dict[str, Any]]) -> FieldProfile:
    """Compute statistics for one field over the sampled records."""
    non_null = 0
    unique: set[str] = set()
    minimum = None
    maximum = None

    for record in records:
        value = record.get(field.name)
        if value is None:
            continue
        non_null += 1
        unique.add(canonical_encoding(value))

        if field.type == "number" and _is_number(value):
            if minimum is None or value < minimum:
                minimum = value
            if maximum is None or value > maximum:
                maximum = value

    fill_rate = non_null / len(records) * 100 if records else 0.0
    return FieldProfile(
        name=field.name,
        type=field.type,
        non_null_count=non_null,
        unique_value_count=len(unique),
        fill_rate=f"{fill_rate:.2f}%",
        min=minimum,
        max=maximum,
    )


def field_insights(profile: FieldProfile, sample_count: int) -> list[str]:
    """Advisory messages derived from one field profile."""
    insights = []
    if profile.unique_value_count == sample_count and sample_count > MIN_IDENTIFIER_SAMPLE:
        insights.append(
            f"Field '{profile.name}' contains all unique values, "
            f"consider using it as an identifier."
        )
    if profile.non_null_count == 0:
        insights.append(
            f"Field '{profile.name}' has no values. "
            f"Consider removing it or ensuring it's populated."
        )
    return insights


def profile_records(
    collection_name: str,
    fields: list[FieldSchema],
    records: list[dict[str, Any]],
    record_count: int | None = None,
    selected_fields: Iterable[str] | None = None,
) -> CollectionAnalysis:
    """Profile an already fetched sample.

    Args:
        collection_name: Name reported in the analysis.
        fields: Field descriptors of the collection, in declaration order.
        records: The sampled records.
        record_count: Total records in the collection, if the store reported it.
        selected_fields: Restrict the analysis to these field names. None means
            every field; an empty list selects none.
    """
    record_count = len(records) if record_count is None or record_count < 0 else record_count
    analysis = CollectionAnalysis(
        collection_name=collection_name,
        record_count=record_count,
        sample_count=len(records),
    )

    if not records:
        analysis.insights.append(NO_RECORDS_INSIGHT)
        return analysis

    selected = set(selected_fields) if selected_fields is not None else None
    for field in fields:
        if selected is not None and field.name not in selected:
            continue
        profile = profile_field(field, records)
        analysis.fields.append(profile)
        analysis.insights.extend(field_insights(profile, len(records)))

    return analysis


async def analyze_collection(
    store: CollectionStore,
    collection: str,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    fields: Iterable[str] | None = None,
) -> CollectionAnalysis:
    """Fetch a collection's fields and one page of records, then profile them.

    Store errors from the two fetches propagate; the per-field analysis itself
    never raises.
    """
    collection_info = await store.get_collection(collection)
    page = await store.list_records(collection, page=1, per_page=sample_size)
    logger.debug(
        f"Profiling collection={collection} sampled={len(page.items)} total={page.total_items}"
    )
    return profile_records(
        collection_name=collection,
        fields=collection_info.fields,
        records=page.items,
        record_count=page.total_items,
        selected_fields=fields,
    )
