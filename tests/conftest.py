import pytest

from bizmerge.models import BusinessRecord, BusinessStatus, Source


@pytest.fixture
def make_record():
    """Factory for BusinessRecord with sensible defaults; override any field by keyword."""
    def _make(record_id: str, name: str, source: Source = Source.MAPS_SERVICE, **kwargs) -> BusinessRecord:
        kwargs.setdefault("business_status", BusinessStatus.OPEN)
        kwargs.setdefault("last_updated", "2024-01-01T00:00:00+00:00")
        kwargs.setdefault("confidence", 0.8)
        return BusinessRecord(id=record_id, name=name, source=source, **kwargs)

    return _make
