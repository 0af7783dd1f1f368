# bizmerge/matchers/merge_orchestrator.py

import asyncio
from collections import Counter
from datetime import datetime, timezone
from itertools import combinations
from typing import Dict, List, Sequence, Tuple

from loguru import logger

from bizmerge.config import BLOCKING_PREFIX_LENGTH
from bizmerge.matchers.match_resolver import resolve_matches
from bizmerge.matchers.pairwise_matcher import find_candidates_between
from bizmerge.matchers.record_merger import merge_candidate
from bizmerge.models import BusinessRecord, DeduplicationSummary, MatchCandidate, Source

BucketPair = Tuple[List[BusinessRecord], List[BusinessRecord], int]


def group_by_source(records: Sequence[BusinessRecord]) -> Dict[Source, List[BusinessRecord]]:
    """
    Partition records by source. Buckets appear in the order their source is first
    seen and keep the input order of their records.
    """
    groups: Dict[Source, List[BusinessRecord]] = {}
    for record in records:
        groups.setdefault(record.source, []).append(record)
    return groups


def bucket_pairs(groups: Dict[Source, List[BusinessRecord]]) -> List[BucketPair]:
    """
    Every unordered pair of distinct buckets (i < j), each with the enumeration
    index of its first record pair.
    """
    pairs: List[BucketPair] = []
    start_order = 0
    for bucket_a, bucket_b in combinations(groups.values(), 2):
        pairs.append((bucket_a, bucket_b, start_order))
        start_order += len(bucket_a) * len(bucket_b)
    return pairs


def _assemble(
    records: Sequence[BusinessRecord],
    candidates: List[MatchCandidate],
) -> List[BusinessRecord]:
    """Resolve, merge, and append the records no accepted candidate consumed."""
    accepted = resolve_matches(candidates, records)
    merged = [merge_candidate(cand) for cand in accepted]

    matched_ids = set()
    for cand in accepted:
        matched_ids.add(cand.record_a.id)
        matched_ids.add(cand.record_b.id)
    unmatched = [record for record in records if record.id not in matched_ids]

    return merged + unmatched


def _collect_candidates(
    records: Sequence[BusinessRecord],
    prefix_length: int,
) -> List[MatchCandidate]:
    candidates: List[MatchCandidate] = []
    for bucket_a, bucket_b, start_order in bucket_pairs(group_by_source(records)):
        candidates.extend(find_candidates_between(bucket_a, bucket_b, start_order, prefix_length))
    return candidates


async def _collect_candidates_async(
    records: Sequence[BusinessRecord],
    prefix_length: int,
) -> List[MatchCandidate]:
    pairs = bucket_pairs(group_by_source(records))

    # Compare all bucket pairs in parallel; gather keeps bucket-pair order
    per_pair = await asyncio.gather(*[
        asyncio.to_thread(find_candidates_between, bucket_a, bucket_b, start_order, prefix_length)
        for bucket_a, bucket_b, start_order in pairs
    ])
    return [cand for pair_candidates in per_pair for cand in pair_candidates]


def summarize(
    records: Sequence[BusinessRecord],
    results: Sequence[BusinessRecord],
    candidates: int = 0,
) -> DeduplicationSummary:
    """Counts per input source plus merged / unique output counts."""
    by_source = Counter(record.source.value for record in records)
    merged = sum(1 for record in results if record.source == Source.MERGED)
    return DeduplicationSummary(
        input_total=len(records),
        input_by_source=dict(by_source),
        candidates=candidates,
        merged=merged,
        unique=len(results) - merged,
        output_total=len(results),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


def _finish(
    records: Sequence[BusinessRecord],
    candidates: List[MatchCandidate],
) -> Tuple[List[BusinessRecord], DeduplicationSummary]:
    results = _assemble(records, candidates)
    summary = summarize(records, results, candidates=len(candidates))
    logger.info(
        f"Deduplication complete: {summary.input_total} → {summary.output_total} businesses "
        f"({summary.merged} merged, {summary.unique} unique, {summary.candidates} candidates)"
    )
    return results, summary


def run_deduplication(
    records: Sequence[BusinessRecord],
    prefix_length: int = BLOCKING_PREFIX_LENGTH,
) -> Tuple[List[BusinessRecord], DeduplicationSummary]:
    """
    Deduplicate records collected from several sources and describe the run.

    Args:
        records (Sequence[BusinessRecord]): Producer records, each with a unique id.
        prefix_length (int): Optional blocking prefix length (0 disables blocking).

    Returns:
        Tuple[List[BusinessRecord], DeduplicationSummary]: Merged records in
            acceptance order followed by the unmatched input records in input
            order, and the run summary.
    """
    logger.info(f"Starting deduplication process with {len(records)} businesses")
    return _finish(records, _collect_candidates(records, prefix_length))


async def run_deduplication_async(
    records: Sequence[BusinessRecord],
    prefix_length: int = BLOCKING_PREFIX_LENGTH,
) -> Tuple[List[BusinessRecord], DeduplicationSummary]:
    """
    Same output as run_deduplication, with each bucket pair compared in a worker
    thread. Resolution stays sequential.
    """
    logger.info(f"Starting deduplication process with {len(records)} businesses")
    return _finish(records, await _collect_candidates_async(records, prefix_length))


def merge_records(
    records: Sequence[BusinessRecord],
    prefix_length: int = BLOCKING_PREFIX_LENGTH,
) -> List[BusinessRecord]:
    """Deduplicated records: merged pairs first, then untouched records."""
    results, _ = run_deduplication(records, prefix_length)
    return results


async def merge_records_async(
    records: Sequence[BusinessRecord],
    prefix_length: int = BLOCKING_PREFIX_LENGTH,
) -> List[BusinessRecord]:
    results, _ = await run_deduplication_async(records, prefix_length)
    return results
