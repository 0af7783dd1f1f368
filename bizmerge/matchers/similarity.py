# bizmerge/matchers/similarity.py
import re
from typing import Optional
from urllib.parse import urlsplit

from rapidfuzz import fuzz

_NON_WORD = re.compile(r"[^\w\s]|_")
_NON_DIGIT = re.compile(r"\D")

# Longest international calling code prefix tolerated by phones_match
MAX_COUNTRY_CODE_DIGITS = 3
# Shortest full national number (e.g. NANP area code + subscriber number)
MIN_NATIONAL_PHONE_DIGITS = 10


def normalize_text(text: Optional[str]) -> str:
    """Lowercase, trim, and drop everything that is not alphanumeric or whitespace."""
    return _NON_WORD.sub("", str(text or "").lower().strip())


def text_similarity(text1: Optional[str], text2: Optional[str]) -> float:
    """
    Similarity of two strings in [0, 1]: 1.0 means identical after normalization,
    0.0 means nothing in common.

    Args:
        text1 (str): First string. None is treated as empty.
        text2 (str): Second string. None is treated as empty.

    Returns:
        float: 1.0 exactly for identical normalized strings, otherwise the
               normalized Indel similarity (rapidfuzz ratio / 100).
    """
    normalized1 = normalize_text(text1)
    normalized2 = normalize_text(text2)

    if normalized1 == normalized2:
        return 1.0

    return fuzz.ratio(normalized1, normalized2) / 100.0


def normalize_phone(phone: Optional[str]) -> str:
    """Strip every non-digit character."""
    return _NON_DIGIT.sub("", str(phone or ""))


def phones_match(phone1: Optional[str], phone2: Optional[str]) -> bool:
    """
    Compare two phone numbers on their digits.

    A leading country calling code on one side only (e.g. "+1-555-123-4567" vs
    "555-123-4567") still counts as a match, provided the shorter side is a full
    national number. Local numbers without an area code only match exactly.
    """
    digits1 = normalize_phone(phone1)
    digits2 = normalize_phone(phone2)
    if not digits1 or not digits2:
        return False
    if digits1 == digits2:
        return True

    shorter, longer = sorted((digits1, digits2), key=len)
    return (
        len(shorter) >= MIN_NATIONAL_PHONE_DIGITS
        and len(longer) - len(shorter) <= MAX_COUNTRY_CODE_DIGITS
        and longer.endswith(shorter)
    )


def normalize_host(url: Optional[str]) -> str:
    """Lowercased hostname of a URL, or the raw lowercased string if it has none."""
    raw = str(url or "").strip().lower()
    try:
        host = urlsplit(raw).hostname
    except ValueError:
        return raw
    return host or raw
