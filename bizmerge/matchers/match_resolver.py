# bizmerge/matchers/match_resolver.py
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
from loguru import logger

from bizmerge.models import BusinessRecord, MatchCandidate


def _index_records(
    candidates: Sequence[MatchCandidate],
    records: Optional[Iterable[BusinessRecord]],
) -> Dict[str, int]:
    """Map every record id that can be consumed to a slot in the consumed bitset."""
    index: Dict[str, int] = {}
    if records is not None:
        for record in records:
            index.setdefault(record.id, len(index))
    for cand in candidates:
        index.setdefault(cand.record_a.id, len(index))
        index.setdefault(cand.record_b.id, len(index))
    return index


def resolve_matches(
    candidates: Sequence[MatchCandidate],
    records: Optional[Iterable[BusinessRecord]] = None,
) -> List[MatchCandidate]:
    """
    Select a one-to-one subset of candidates, greedily by confidence.

    Candidates are visited by confidence descending, ties broken by enumeration
    order (bucket pair, then record_a index, then record_b index). A candidate is
    accepted only when neither of its records was consumed by an earlier accepted
    candidate. This is not a maximum-weight matching.

    Args:
        candidates (Sequence[MatchCandidate]): Candidates from every bucket pair.
        records (Optional[Iterable[BusinessRecord]]): Input records, used to size
                                                      the consumed bitset.

    Returns:
        List[MatchCandidate]: Accepted candidates in acceptance order.
    """
    index = _index_records(candidates, records)
    consumed = np.zeros(len(index), dtype=bool)

    ordered = sorted(candidates, key=lambda c: (-c.confidence, c.order))

    accepted: List[MatchCandidate] = []
    for cand in ordered:
        slot_a = index[cand.record_a.id]
        slot_b = index[cand.record_b.id]
        if consumed[slot_a] or consumed[slot_b]:
            logger.debug(f"Skipping {cand.record_a.id} <-> {cand.record_b.id}: record already matched")
            continue
        consumed[slot_a] = True
        consumed[slot_b] = True
        accepted.append(cand)

    logger.debug(f"Accepted {len(accepted)} of {len(candidates)} candidates")
    return accepted
