"""Matching, resolution and merging of business records across sources."""
from bizmerge.matchers.merge_orchestrator import (
    merge_records,
    merge_records_async,
    run_deduplication,
    run_deduplication_async,
)

__all__ = ["merge_records", "merge_records_async", "run_deduplication", "run_deduplication_async"]
