from __future__ import annotations

import pytest

from app.models import MetadataRecord
from app.services.metadata_cache import MetadataCache
from conftest import FakeClock


def test_get_returns_stored_record():
    cache = MetadataCache()
    record = MetadataRecord(series_id=42)
    cache.put("Cool Show - S01E01", record)

    assert cache.get("Cool Show - S01E01") is record
    assert "Cool Show - S01E01" in cache
    assert cache.get("Other Show - S01E01") is None
    assert len(cache) == 1


def test_empty_records_are_cached_like_hits():
    cache = MetadataCache()
    cache.put("Unmatched (1901)", MetadataRecord())

    cached = cache.get("Unmatched (1901)")
    assert cached == MetadataRecord()
    assert cached.tmdb_id is None and cached.overview == ""


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = MetadataCache(ttl_seconds=3600, clock=clock)
    cache.put("The Matrix (1999)", MetadataRecord(tmdb_id=603))

    clock.advance(3599)
    assert cache.get("The Matrix (1999)") is not None

    clock.advance(1)
    assert cache.get("The Matrix (1999)") is None
    assert len(cache) == 0


def test_put_refreshes_expiry():
    clock = FakeClock()
    cache = MetadataCache(ttl_seconds=10, clock=clock)
    cache.put("a", MetadataRecord())
    clock.advance(8)
    cache.put("a", MetadataRecord(series_id=1))
    clock.advance(8)

    assert cache.get("a") == MetadataRecord(series_id=1)


def test_least_recently_used_entry_is_evicted():
    cache = MetadataCache(max_entries=2)
    cache.put("a", MetadataRecord(series_id=1))
    cache.put("b", MetadataRecord(series_id=2))
    cache.get("a")
    cache.put("c", MetadataRecord(series_id=3))

    assert cache.get("b") is None
    assert cache.get("a") is not None
    assert cache.get("c") is not None
    assert len(cache) == 2


def test_clear():
    cache = MetadataCache()
    cache.put("a", MetadataRecord())
    cache.clear()
    assert len(cache) == 0


@pytest.mark.parametrize("kwargs", [{"max_entries": 0}, {"ttl_seconds": 0}])
def test_invalid_bounds_rejected(kwargs):
    with pytest.raises(ValueError):
        MetadataCache(**kwargs)


def test_membership_check_does_not_touch_recency():
    cache = MetadataCache(max_entries=2)
    cache.put("a", MetadataRecord(series_id=1))
    cache.put("b", MetadataRecord(series_id=2))

    assert "a" in cache
    cache.put("c", MetadataRecord(series_id=3))

    assert "a" not in cache
    assert "b" in cache


def test_membership_check_keeps_expired_entry_stored():
    clock = FakeClock()
    cache = MetadataCache(ttl_seconds=10, clock=clock)
    cache.put("a", MetadataRecord())
    clock.advance(10)

    assert "a" not in cache
    assert len(cache) == 1
    assert cache.get("a") is None
    assert len(cache) == 0
