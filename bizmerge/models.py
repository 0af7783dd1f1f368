"""
Typed data models for the business consolidation pipeline.
All data structures used throughout the codebase should be defined here.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


class Source(str, Enum):
    """Origin system of a record. MERGED is reserved for the record merger."""
    MAPS_SERVICE = "maps_service"
    REVIEW_SITE = "review_site"
    SOCIAL_PAGE = "social_page"
    MERGED = "merged"


class BusinessStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    TEMPORARILY_CLOSED = "temporarily_closed"


class MatchType(str, Enum):
    NAME_ADDRESS = "name_address"
    NAME_PHONE = "name_phone"
    WEBSITE = "website"
    FUZZY = "fuzzy"


@dataclass(frozen=True)
class OpeningHours:
    """Opening hours per weekday, free-form strings as scraped."""
    monday: Optional[str] = None
    tuesday: Optional[str] = None
    wednesday: Optional[str] = None
    thursday: Optional[str] = None
    friday: Optional[str] = None
    saturday: Optional[str] = None
    sunday: Optional[str] = None


@dataclass(frozen=True)
class RatingInfo:
    """Rating block of a mapping service or review site listing."""
    rating: Optional[float] = None
    reviews_count: Optional[int] = None
    native_id: Optional[str] = None  # place id / listing id on the source


@dataclass(frozen=True)
class PageInfo:
    """Social page details."""
    page_url: Optional[str] = None
    page_id: Optional[str] = None
    verified: Optional[bool] = None


@dataclass(frozen=True)
class SocialProfiles:
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None


@dataclass(frozen=True)
class BusinessRecord:
    """Business description emitted by a producer, or by the record merger."""
    id: str
    name: str
    source: Source
    category: str = ""
    address: str = ""
    phone: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    opening_hours: Optional[OpeningHours] = None
    maps_info: Optional[RatingInfo] = None
    review_info: Optional[RatingInfo] = None
    page_info: Optional[PageInfo] = None
    social_profiles: Optional[SocialProfiles] = None
    business_status: Optional[BusinessStatus] = None
    last_updated: str = ""
    confidence: float = 0.0  # data quality score in [0, 1]
    merged_from: Tuple[str, ...] = ()  # ids of the two inputs, merged records only


@dataclass(frozen=True)
class MatchCandidate:
    """Scored hypothesis that two records from different sources are one business."""
    record_a: BusinessRecord
    record_b: BusinessRecord
    confidence: float
    match_type: MatchType
    order: int = 0  # enumeration index, tie-break for equal confidence

    @property
    def display_confidence(self) -> float:
        """Confidence clamped to 1.0 for user-facing output."""
        return min(self.confidence, 1.0)


@dataclass
class DeduplicationSummary:
    """Counts describing one deduplication run."""
    input_total: int
    input_by_source: Dict[str, int] = field(default_factory=dict)
    candidates: int = 0
    merged: int = 0
    unique: int = 0
    output_total: int = 0
    timestamp: str = ""
