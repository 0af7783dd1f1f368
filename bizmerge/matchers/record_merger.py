# bizmerge/matchers/record_merger.py
import uuid
from dataclasses import fields, replace
from datetime import datetime, timezone
from typing import Any, Optional, TypeVar

from bizmerge.models import BusinessRecord, MatchCandidate, Source

SCALAR_FIELDS = ("name", "category", "address", "phone", "website", "email")
NESTED_FIELDS = ("opening_hours", "maps_info", "review_info", "page_info", "social_profiles")

T = TypeVar("T")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def prefer(base_value: T, other_value: T) -> T:
    """Base value unless it is missing or blank."""
    return other_value if _is_empty(base_value) else base_value


def merge_nested(base: Optional[T], other: Optional[T]) -> Optional[T]:
    """
    Merge two optional sub-structs key by key with base precedence.
    A side that is missing entirely yields the other side unchanged.
    """
    if base is None:
        return other
    if other is None:
        return base
    merged = {
        f.name: prefer(getattr(base, f.name), getattr(other, f.name))
        for f in fields(base)
    }
    return replace(base, **merged)


def new_merged_id() -> str:
    return f"merged_{uuid.uuid4().hex}"


def merge_two_records(record_a: BusinessRecord, record_b: BusinessRecord) -> BusinessRecord:
    """
    Build the canonical record for two records describing the same business.

    The record with the higher confidence is the base (ties go to record_a); every
    field takes the base value when present and falls back to the other record.

    Args:
        record_a (BusinessRecord): First record of the accepted pair.
        record_b (BusinessRecord): Second record of the accepted pair.

    Returns:
        BusinessRecord: New record with a fresh id and source MERGED. Inputs are
                        left untouched.
    """
    if record_a.confidence >= record_b.confidence:
        base, other = record_a, record_b
    else:
        base, other = record_b, record_a

    values = {name: prefer(getattr(base, name), getattr(other, name)) for name in SCALAR_FIELDS}
    values.update(
        {name: merge_nested(getattr(base, name), getattr(other, name)) for name in NESTED_FIELDS}
    )

    return BusinessRecord(
        id=new_merged_id(),
        source=Source.MERGED,
        business_status=prefer(base.business_status, other.business_status),
        last_updated=datetime.now(timezone.utc).isoformat(),
        confidence=max(base.confidence, other.confidence),
        merged_from=(base.id, other.id),
        **values,
    )


def merge_candidate(candidate: MatchCandidate) -> BusinessRecord:
    return merge_two_records(candidate.record_a, candidate.record_b)
