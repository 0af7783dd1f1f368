import json

import pytest

from bizmerge.models import BusinessStatus, DeduplicationSummary, OpeningHours, RatingInfo, Source
from bizmerge.record_loader import (
    RecordFormatError,
    load_records_from_json,
    record_from_dict,
    record_to_dict,
    records_from_dicts,
    write_records_json,
    write_summary_json,
)

GOOGLE_ROW = {
    "id": "google_1",
    "name": "ABC Plumbing Services",
    "category": "Plumber",
    "address": "123 Main St, New York, NY 10001",
    "phone": "+1-555-123-4567",
    "website": "https://abcplumbing.com",
    "openingHours": {"monday": "8:00-18:00"},
    "googleMaps": {"rating": 4.5, "reviewsCount": 127, "placeId": "ChIJ123"},
    "businessStatus": "open",
    "source": "google",
    "lastUpdated": "2024-05-01T10:00:00.000Z",
    "confidence": 0.9,
}

FACEBOOK_ROW = {
    "id": "facebook_1",
    "name": "ABC Plumbing Services",
    "category": "Plumber",
    "address": "",
    "facebook": {"pageUrl": "https://facebook.com/abcplumbingny", "pageId": "abcplumbingny", "verified": True},
    "businessStatus": "open",
    "source": "facebook",
    "lastUpdated": "2024-05-01T10:00:00.000Z",
    "confidence": 0.8,
}


def test_record_from_producer_row():
    record = record_from_dict(GOOGLE_ROW)

    assert record.source == Source.MAPS_SERVICE
    assert record.business_status == BusinessStatus.OPEN
    assert record.maps_info == RatingInfo(rating=4.5, reviews_count=127, native_id="ChIJ123")
    assert record.opening_hours == OpeningHours(monday="8:00-18:00")
    assert record.review_info is None
    assert record.email is None


def test_social_page_row():
    record = record_from_dict(FACEBOOK_ROW)
    assert record.source == Source.SOCIAL_PAGE
    assert record.page_info.verified is True
    assert record.page_info.page_id == "abcplumbingny"


@pytest.mark.parametrize("row", [
    {"id": "x", "name": "", "source": "google"},
    {"id": "x", "name": "Shop", "source": "myspace"},
    {"name": "Shop", "source": "yelp"},
])
def test_invalid_rows_raise(row):
    with pytest.raises(RecordFormatError):
        record_from_dict(row)


def test_invalid_rows_are_skipped():
    records = records_from_dicts([GOOGLE_ROW, {"id": "bad", "name": None, "source": "yelp"}, FACEBOOK_ROW])
    assert [r.id for r in records] == ["google_1", "facebook_1"]


def test_record_to_dict_uses_camel_case():
    data = record_to_dict(record_from_dict(GOOGLE_ROW))

    assert data["source"] == "maps_service"
    assert data["businessStatus"] == "open"
    assert data["mapsInfo"] == {"rating": 4.5, "reviewsCount": 127, "nativeId": "ChIJ123"}
    assert data["openingHours"] == {"monday": "8:00-18:00"}
    assert "email" not in data
    assert record_from_dict(data) == record_from_dict(GOOGLE_ROW)


def test_load_and_write_json(tmp_path):
    input_path = tmp_path / "businesses.json"
    input_path.write_text(json.dumps([GOOGLE_ROW, FACEBOOK_ROW]))

    records = load_records_from_json(str(input_path))
    assert [r.id for r in records] == ["google_1", "facebook_1"]
    assert records[0].maps_info.reviews_count == 127
    assert records[1].maps_info is None
    assert records[1].phone is None

    output_path = tmp_path / "out.json"
    write_records_json(records, str(output_path))
    written = json.loads(output_path.read_text())
    assert [row["id"] for row in written] == ["google_1", "facebook_1"]
    assert written[1]["pageInfo"]["pageUrl"] == "https://facebook.com/abcplumbingny"


def test_write_summary_json(tmp_path):
    summary = DeduplicationSummary(input_total=4, input_by_source={"maps_service": 2}, merged=1, unique=2,
                                   output_total=3, timestamp="2024-05-01T10:00:00+00:00")
    path = tmp_path / "summary.json"
    write_summary_json(summary, str(path))

    data = json.loads(path.read_text())
    assert data["inputTotal"] == 4
    assert data["outputTotal"] == 3
    assert data["inputBySource"] == {"mapsService": 2}


def test_merged_from_only_accepts_id_lists():
    row = dict(GOOGLE_ROW, source="merged", mergedFrom=["google_1", "yelp_1"])
    assert record_from_dict(row).merged_from == ("google_1", "yelp_1")

    row = dict(GOOGLE_ROW, mergedFrom="google_1")
    assert record_from_dict(row).merged_from == ()


def test_write_records_json_keeps_unicode(tmp_path):
    record = record_from_dict(dict(GOOGLE_ROW, name="Café Ñandú"))
    path = tmp_path / "out.json"
    write_records_json([record], str(path))

    text = path.read_text(encoding="utf-8")
    assert "Café Ñandú" in text
    assert json.loads(text)[0]["name"] == "Café Ñandú"
