import pytest

from bizmerge.matchers.merge_orchestrator import (
    bucket_pairs,
    group_by_source,
    merge_records,
    merge_records_async,
    run_deduplication,
)
from bizmerge.models import PageInfo, RatingInfo, Source

ADDRESS = "123 Main St, New York, NY 10001"


@pytest.fixture
def sample_businesses(make_record):
    """Three listings of one plumber across all sources, plus an unrelated electrician."""
    return [
        make_record("google_1", "ABC Plumbing Services", Source.MAPS_SERVICE, category="Plumber",
                    address=ADDRESS, phone="+1-555-123-4567", website="https://abcplumbing.com",
                    confidence=0.9, maps_info=RatingInfo(rating=4.5, reviews_count=127)),
        make_record("yelp_1", "ABC Plumbing Services", Source.REVIEW_SITE, category="Plumbing Contractor",
                    address=ADDRESS, phone="+1-555-123-4567", website="https://abcplumbing.com",
                    confidence=0.85, review_info=RatingInfo(rating=4.3, reviews_count=89)),
        make_record("facebook_1", "ABC Plumbing Services", Source.SOCIAL_PAGE, category="Plumber",
                    address=ADDRESS, phone="+1-555-123-4567", confidence=0.8,
                    page_info=PageInfo(page_url="https://facebook.com/abcplumbingny",
                                       page_id="abcplumbingny", verified=True)),
        make_record("google_2", "XYZ Electric Co", Source.MAPS_SERVICE, category="Electrician",
                    address="456 Oak Ave, Los Angeles, CA 90210", phone="+1-555-987-6543",
                    website="https://xyzelectric.com", confidence=0.95),
    ]


def test_group_by_source_keeps_first_seen_order(sample_businesses):
    groups = group_by_source(sample_businesses)
    assert list(groups) == [Source.MAPS_SERVICE, Source.REVIEW_SITE, Source.SOCIAL_PAGE]
    assert [r.id for r in groups[Source.MAPS_SERVICE]] == ["google_1", "google_2"]


def test_bucket_pairs_enumeration(sample_businesses):
    pairs = bucket_pairs(group_by_source(sample_businesses))
    assert [(len(a), len(b), start) for a, b, start in pairs] == [(2, 1, 0), (2, 1, 2), (1, 1, 4)]


def test_merge_sample_businesses(sample_businesses):
    results = merge_records(sample_businesses)

    # google_1 + yelp_1 share name, address, phone and website: strongest pair
    assert len(results) == len(sample_businesses) - 1
    merged, *rest = results
    assert merged.source == Source.MERGED
    assert merged.merged_from == ("google_1", "yelp_1")
    assert merged.category == "Plumber"
    assert merged.confidence == 0.9
    assert merged.maps_info == RatingInfo(rating=4.5, reviews_count=127)
    assert merged.review_info == RatingInfo(rating=4.3, reviews_count=89)

    # facebook_1 lost both of its candidates to the stronger pair
    assert [r.id for r in rest] == ["facebook_1", "google_2"]
    assert rest[0] is sample_businesses[2]


def test_same_source_records_are_never_compared(make_record):
    records = [
        make_record("g1", "ABC Plumbing", Source.MAPS_SERVICE, address=ADDRESS, phone="5551234567"),
        make_record("g2", "ABC Plumbing", Source.MAPS_SERVICE, address=ADDRESS, phone="5551234567"),
    ]
    assert merge_records(records) == records


def test_output_count_and_summary(sample_businesses, make_record):
    extra = make_record("facebook_2", "XYZ Electric Co", Source.SOCIAL_PAGE,
                        website="http://www.xyzelectric.com", address="456 Oak Ave, Los Angeles, CA 90210",
                        phone="555-987-6543", confidence=0.7)
    records = sample_businesses + [extra]

    results, summary = run_deduplication(records)

    assert len(results) == len(records) - 2
    assert summary.input_total == 5
    assert summary.input_by_source == {"maps_service": 2, "review_site": 1, "social_page": 2}
    assert summary.merged == 2
    assert summary.unique == 1
    assert summary.output_total == 3
    assert summary.candidates >= 2
    assert {r.id for r in results if r.source != Source.MERGED} == {"facebook_1"}


def test_empty_input():
    assert merge_records([]) == []


@pytest.mark.asyncio
async def test_async_variant_matches_sync(sample_businesses):
    sync_results = merge_records(sample_businesses)
    async_results = await merge_records_async(sample_businesses)

    def comparable(records):
        return [(r.source, r.name, r.merged_from, r.confidence) for r in records]

    assert comparable(async_results) == comparable(sync_results)
