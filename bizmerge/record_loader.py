"""
Conversion between producer JSON rows and BusinessRecord objects.
"""
import json
from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd
from loguru import logger

from bizmerge.models import (
    BusinessRecord,
    BusinessStatus,
    DeduplicationSummary,
    OpeningHours,
    PageInfo,
    RatingInfo,
    SocialProfiles,
    Source,
)

# Producers tag records with the site they scraped
SOURCE_ALIASES = {
    "google": Source.MAPS_SERVICE,
    "googlemaps": Source.MAPS_SERVICE,
    "mapsservice": Source.MAPS_SERVICE,
    "maps_service": Source.MAPS_SERVICE,
    "yelp": Source.REVIEW_SITE,
    "reviewsite": Source.REVIEW_SITE,
    "review_site": Source.REVIEW_SITE,
    "facebook": Source.SOCIAL_PAGE,
    "socialpage": Source.SOCIAL_PAGE,
    "social_page": Source.SOCIAL_PAGE,
    "merged": Source.MERGED,
}

DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class RecordFormatError(ValueError):
    """Raised when a producer row violates the record contract."""


def _clean(value: Any) -> Any:
    """Convert pandas/NaN style missing values to None."""
    if value is None or isinstance(value, (dict, list)):
        return value
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _str_or_none(value: Any) -> Optional[str]:
    value = _clean(value)
    return None if value is None else str(value)


def _float_or_none(value: Any) -> Optional[float]:
    value = _clean(value)
    if value is None:
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def _int_or_none(value: Any) -> Optional[int]:
    value = _float_or_none(value)
    return None if value is None else int(value)


def _bool_or_none(value: Any) -> Optional[bool]:
    value = _clean(value)
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _first(row: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = _clean(row.get(key))
        if value is not None:
            return value
    return None


def _id_tuple(value: Any) -> Tuple[str, ...]:
    """Source ids of a merged record; anything but a list or tuple is ignored."""
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(v) for v in value)


def parse_source(value: Any) -> Source:
    key = str(_clean(value) or "").strip().lower()
    if key not in SOURCE_ALIASES:
        raise RecordFormatError(f"Unknown source: {value!r}")
    return SOURCE_ALIASES[key]


def parse_status(value: Any) -> Optional[BusinessStatus]:
    value = _str_or_none(value)
    if not value:
        return None
    try:
        return BusinessStatus(value.strip().lower())
    except ValueError:
        logger.debug(f"Ignoring unknown business status {value!r}")
        return None


def _rating_info(block: Optional[dict], id_keys: Iterable[str]) -> Optional[RatingInfo]:
    if not isinstance(block, dict):
        return None
    return RatingInfo(
        rating=_float_or_none(block.get("rating")),
        reviews_count=_int_or_none(_first(block, "reviewsCount", "reviews_count")),
        native_id=_str_or_none(_first(block, "nativeId", "native_id", *id_keys)),
    )


def _page_info(block: Optional[dict]) -> Optional[PageInfo]:
    if not isinstance(block, dict):
        return None
    return PageInfo(
        page_url=_str_or_none(_first(block, "pageUrl", "page_url")),
        page_id=_str_or_none(_first(block, "pageId", "page_id")),
        verified=_bool_or_none(block.get("verified")),
    )


def _opening_hours(block: Optional[dict]) -> Optional[OpeningHours]:
    if not isinstance(block, dict):
        return None
    return OpeningHours(**{day: _str_or_none(block.get(day)) for day in DAYS})


def _social_profiles(block: Optional[dict]) -> Optional[SocialProfiles]:
    if not isinstance(block, dict):
        return None
    return SocialProfiles(
        instagram=_str_or_none(block.get("instagram")),
        twitter=_str_or_none(block.get("twitter")),
        linkedin=_str_or_none(block.get("linkedin")),
    )


def record_from_dict(row: Dict[str, Any]) -> BusinessRecord:
    """
    Build a BusinessRecord from one producer row (camelCase keys).

    Raises:
        RecordFormatError: If the row has no id, no name, or an unknown source.
    """
    record_id = _str_or_none(row.get("id"))
    name = _str_or_none(row.get("name"))
    if not record_id:
        raise RecordFormatError("Record without id")
    if not name or not name.strip():
        raise RecordFormatError(f"Record {record_id} has no name")

    return BusinessRecord(
        id=record_id,
        name=name,
        source=parse_source(row.get("source")),
        category=_str_or_none(row.get("category")) or "",
        address=_str_or_none(row.get("address")) or "",
        phone=_str_or_none(row.get("phone")),
        website=_str_or_none(row.get("website")),
        email=_str_or_none(row.get("email")),
        opening_hours=_opening_hours(_first(row, "openingHours", "opening_hours")),
        maps_info=_rating_info(_first(row, "mapsInfo", "googleMaps"), ("placeId",)),
        review_info=_rating_info(_first(row, "reviewInfo", "yelp"), ("yelpId",)),
        page_info=_page_info(_first(row, "pageInfo", "facebook")),
        social_profiles=_social_profiles(_first(row, "socialProfiles", "social_profiles")),
        business_status=parse_status(_first(row, "businessStatus", "business_status")),
        last_updated=_str_or_none(_first(row, "lastUpdated", "last_updated")) or "",
        confidence=_float_or_none(row.get("confidence")) or 0.0,
        merged_from=_id_tuple(_first(row, "mergedFrom", "merged_from")),
    )


def records_from_dicts(rows: Iterable[Dict[str, Any]]) -> List[BusinessRecord]:
    """Convert rows, logging and skipping the ones that violate the record contract."""
    records = []
    for position, row in enumerate(rows):
        try:
            records.append(record_from_dict(row))
        except RecordFormatError as e:
            logger.warning(f"Skipping row {position}: {e}")
    return records


def load_records_from_json(file_path: str, nrows: Optional[int] = None) -> List[BusinessRecord]:
    """Load producer output (a JSON array of record objects) into BusinessRecords."""
    df = pd.read_json(file_path, orient="records", dtype=False, convert_dates=False)
    if nrows is not None:
        df = df.head(nrows)
    return records_from_dicts(df.to_dict(orient="records"))


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _camel_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {_camel(k): _camel_keys(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_camel_keys(v) for v in value]
    if isinstance(value, (Source, BusinessStatus)):
        return value.value
    return value


def record_to_dict(record: BusinessRecord) -> Dict[str, Any]:
    """Serialize a record with camelCase keys, dropping missing optional fields."""
    return _camel_keys(asdict(record))


def write_records_json(records: Iterable[BusinessRecord], file_path: str) -> None:
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump([record_to_dict(r) for r in records], f, indent=2, ensure_ascii=False)


def write_summary_json(summary: DeduplicationSummary, file_path: str) -> None:
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(_camel_keys(asdict(summary)), f, indent=2)
