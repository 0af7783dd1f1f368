# bizmerge/matchers/pairwise_matcher.py
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from loguru import logger

from bizmerge.config import (
    ADDRESS_THRESHOLD,
    ADDRESS_WEIGHT,
    BLOCKING_PREFIX_LENGTH,
    EXACT_NAME_WEIGHT,
    FUZZY_NAME_THRESHOLD,
    FUZZY_NAME_WEIGHT,
    MATCH_THRESHOLD,
    PHONE_WEIGHT,
    SCORE_PRECISION,
    WEBSITE_WEIGHT,
)
from bizmerge.matchers.similarity import (
    normalize_host,
    normalize_text,
    phones_match,
    text_similarity,
)
from bizmerge.models import BusinessRecord, MatchCandidate, MatchType


@dataclass(frozen=True)
class RuleHit:
    """Contribution of one fired rule. match_type None keeps the current type."""
    contribution: float
    match_type: Optional[MatchType] = None


Rule = Callable[[BusinessRecord, BusinessRecord, float, MatchType], Optional[RuleHit]]


def exact_name_rule(a: BusinessRecord, b: BusinessRecord, score: float, match_type: MatchType) -> Optional[RuleHit]:
    if normalize_text(a.name) == normalize_text(b.name):
        return RuleHit(EXACT_NAME_WEIGHT, MatchType.NAME_ADDRESS)
    return None


def fuzzy_name_rule(a: BusinessRecord, b: BusinessRecord, score: float, match_type: MatchType) -> Optional[RuleHit]:
    # Only considered while nothing has scored yet, i.e. the exact name rule missed
    if score != 0:
        return None
    similarity = text_similarity(a.name, b.name)
    if similarity > FUZZY_NAME_THRESHOLD:
        return RuleHit(similarity * FUZZY_NAME_WEIGHT, MatchType.FUZZY)
    return None


def address_rule(a: BusinessRecord, b: BusinessRecord, score: float, match_type: MatchType) -> Optional[RuleHit]:
    if not (a.address and b.address):
        return None
    similarity = text_similarity(a.address, b.address)
    if similarity > ADDRESS_THRESHOLD:
        upgraded = MatchType.NAME_ADDRESS if match_type == MatchType.FUZZY else None
        return RuleHit(similarity * ADDRESS_WEIGHT, upgraded)
    return None


def phone_rule(a: BusinessRecord, b: BusinessRecord, score: float, match_type: MatchType) -> Optional[RuleHit]:
    if a.phone and b.phone and phones_match(a.phone, b.phone):
        return RuleHit(PHONE_WEIGHT, MatchType.NAME_PHONE)
    return None


def website_rule(a: BusinessRecord, b: BusinessRecord, score: float, match_type: MatchType) -> Optional[RuleHit]:
    if a.website and b.website and normalize_host(a.website) == normalize_host(b.website):
        return RuleHit(WEBSITE_WEIGHT, MatchType.WEBSITE)
    return None


# Evaluation order is part of the contract: later rules win on match type.
MATCH_RULES: Tuple[Rule, ...] = (
    exact_name_rule,
    fuzzy_name_rule,
    address_rule,
    phone_rule,
    website_rule,
)


def score_pair(
    a: BusinessRecord,
    b: BusinessRecord,
    rules: Sequence[Rule] = MATCH_RULES,
) -> Tuple[float, MatchType]:
    """
    Fold the match rules over a pair of records.

    Args:
        a (BusinessRecord): First record.
        b (BusinessRecord): Second record.
        rules (Sequence[Rule]): Rules in evaluation order.

    Returns:
        Tuple[float, MatchType]: (accumulated score, final match type). The score
                                 is rounded to SCORE_PRECISION places after every
                                 rule so that e.g. 0.4 + 0.3 equals 0.7 exactly.
    """
    score = 0.0
    match_type = MatchType.FUZZY
    for rule in rules:
        hit = rule(a, b, score, match_type)
        if hit is None:
            continue
        score = round(score + hit.contribution, SCORE_PRECISION)
        if hit.match_type is not None:
            match_type = hit.match_type
    return score, match_type


def calculate_match(a: BusinessRecord, b: BusinessRecord, order: int = 0) -> Optional[MatchCandidate]:
    """
    Score two records from different sources.

    Returns:
        Optional[MatchCandidate]: A candidate when the score is strictly above
                                  MATCH_THRESHOLD, otherwise None.
    """
    confidence, match_type = score_pair(a, b)
    if confidence > MATCH_THRESHOLD:
        logger.debug(f"Candidate {a.id} <-> {b.id}: {confidence:.3f} ({match_type.value})")
        return MatchCandidate(
            record_a=a,
            record_b=b,
            confidence=confidence,
            match_type=match_type,
            order=order,
        )
    return None


def blocking_key(record: BusinessRecord, prefix_length: int) -> str:
    """Normalized-name prefix used by the optional blocking pre-filter."""
    return normalize_text(record.name).replace(" ", "")[:prefix_length]


def iter_pairs(
    records_a: Sequence[BusinessRecord],
    records_b: Sequence[BusinessRecord],
    prefix_length: int = BLOCKING_PREFIX_LENGTH,
) -> Iterator[Tuple[BusinessRecord, BusinessRecord]]:
    """Cross product in (record_a index, record_b index) order, optionally blocked."""
    if prefix_length <= 0:
        for a in records_a:
            for b in records_b:
                yield a, b
        return

    keys_b = [blocking_key(b, prefix_length) for b in records_b]
    for a in records_a:
        key_a = blocking_key(a, prefix_length)
        for b, key_b in zip(records_b, keys_b):
            if key_a == key_b:
                yield a, b


def find_candidates_between(
    records_a: Sequence[BusinessRecord],
    records_b: Sequence[BusinessRecord],
    start_order: int = 0,
    prefix_length: int = BLOCKING_PREFIX_LENGTH,
) -> List[MatchCandidate]:
    """
    Run the matcher over every pair drawn from two source buckets.

    Args:
        records_a (Sequence[BusinessRecord]): Records of the first source.
        records_b (Sequence[BusinessRecord]): Records of the second source.
        start_order (int): Enumeration index of the first pair of this bucket pair.
        prefix_length (int): Blocking prefix length; 0 compares the full cross product.

    Returns:
        List[MatchCandidate]: Candidates in enumeration order.
    """
    candidates = []
    for offset, (a, b) in enumerate(iter_pairs(records_a, records_b, prefix_length)):
        candidate = calculate_match(a, b, order=start_order + offset)
        if candidate is not None:
            candidates.append(candidate)
    return candidates
