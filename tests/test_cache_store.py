"""Tests for contact_suggest.cache_store — snapshot, staleness and upserts."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from contact_suggest.cache_store import CacheStore
from contact_suggest.models import ContactSource, ContactSuggestion

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def _make(email, name=None, frequency=1, last_used=T0, source=ContactSource.RECEIVED):
    return ContactSuggestion(
        email=email, name=name, frequency=frequency, last_used=last_used, source=source,
    )


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(clock):
    return CacheStore(ttl_seconds=300, clock=clock)


# ---------------------------------------------------------------------------
# Staleness
# ---------------------------------------------------------------------------

class TestStaleness:

    def test_new_store_is_stale(self, store):
        assert store.is_stale()
        assert store.last_rebuild is None

    def test_fresh_after_replace(self, store):
        store.replace([_make("a@x.com")])
        assert not store.is_stale()

    def test_stale_after_ttl(self, store, clock):
        store.replace([_make("a@x.com")])
        clock.advance(300)
        assert not store.is_stale()
        clock.advance(1)
        assert store.is_stale()

    def test_explicit_now(self, store):
        store.replace([_make("a@x.com")])
        assert store.is_stale(T0 + timedelta(seconds=301))
        assert not store.is_stale(T0 + timedelta(seconds=10))

    def test_empty_replace_is_still_stale(self, store):
        store.replace([])
        assert store.is_stale()
        assert store.generation == 1

    def test_upsert_does_not_reset_clock(self, store, clock):
        store.replace([_make("a@x.com")])
        clock.advance(301)
        store.upsert("a@x.com", None, clock())
        assert store.is_stale()

    def test_upsert_into_empty_store_stays_stale(self, store, clock):
        store.upsert("a@x.com", None, clock())
        assert store.is_stale()

    def test_default_ttl_from_config(self, monkeypatch):
        monkeypatch.setattr("contact_suggest.config.CACHE_TTL_SECONDS", 42.0)
        assert CacheStore().ttl_seconds == 42.0


# ---------------------------------------------------------------------------
# Snapshot / replace
# ---------------------------------------------------------------------------

class TestSnapshot:

    def test_snapshot_preserves_order(self, store):
        store.replace([_make("b@x.com"), _make("a@x.com")])
        assert [s.email for s in store.snapshot()] == ["b@x.com", "a@x.com"]

    def test_snapshot_is_detached(self, store):
        store.replace([_make("a@x.com")])
        snap = store.snapshot()
        snap[0].frequency = 99
        assert store.get("a@x.com").frequency == 1

    def test_snapshot_unaffected_by_later_upsert(self, store):
        store.replace([_make("a@x.com")])
        snap = store.snapshot()
        store.upsert("a@x.com", None, T0)
        assert snap[0].frequency == 1

    def test_replace_is_wholesale(self, store):
        store.replace([_make("a@x.com"), _make("b@x.com")])
        store.upsert("m@x.com", "Manual", T0)
        store.replace([_make("c@x.com")])
        assert [s.email for s in store.snapshot()] == ["c@x.com"]
        assert store.generation == 2

    def test_replace_dedups_first_wins(self, store):
        store.replace([_make("a@x.com", name="First"), _make("a@x.com", name="Second")])
        assert len(store) == 1
        assert store.get("a@x.com").name == "First"

    def test_preserve_manual_carries_missing_entries(self, store):
        store.replace([_make("a@x.com")])
        store.upsert("m@x.com", "Manual", T0)
        store.upsert("a@x.com", None, T0)
        store.replace([_make("a@x.com", frequency=7)], preserve_manual=True)
        snap = {s.email: s for s in store.snapshot()}
        assert set(snap) == {"a@x.com", "m@x.com"}
        assert snap["a@x.com"].frequency == 7
        assert snap["m@x.com"].source is ContactSource.MANUAL

    def test_preserve_manual_yields_to_rederived(self, store):
        store.upsert("m@x.com", "Manual", T0)
        store.replace([_make("m@x.com", frequency=4)], preserve_manual=True)
        entry = store.get("m@x.com")
        assert entry.frequency == 4
        assert entry.source is ContactSource.RECEIVED


# ---------------------------------------------------------------------------
# Upsert
# ---------------------------------------------------------------------------

class TestUpsert:

    def test_insert_new(self, store):
        entry = store.upsert("m@x.com", "Mia", T0)
        assert entry.frequency == 1
        assert entry.source is ContactSource.MANUAL
        assert entry.name == "Mia"

    def test_repeated_upserts_increase_frequency(self, store):
        freqs = [store.upsert("m@x.com", None, T0 + timedelta(minutes=i)).frequency
                 for i in range(5)]
        assert freqs == [1, 2, 3, 4, 5]

    def test_last_used_never_decreases(self, store):
        store.upsert("m@x.com", None, T0 + timedelta(hours=2))
        entry = store.upsert("m@x.com", None, T0)
        assert entry.last_used == T0 + timedelta(hours=2)
        assert entry.frequency == 2

    def test_existing_name_and_source_kept(self, store):
        store.replace([_make("a@x.com", name="Ann", source=ContactSource.SENT)])
        entry = store.upsert("a@x.com", "Other", T0)
        assert entry.name == "Ann"
        assert entry.source is ContactSource.SENT

    def test_missing_name_filled(self, store):
        store.replace([_make("a@x.com")])
        assert store.upsert("a@x.com", "Ann", T0).name == "Ann"


def test_stats(store):
    store.replace([
        _make("a@x.com"),
        _make("b@x.com", source=ContactSource.SENT),
        _make("c@x.com"),
    ])
    store.upsert("m@x.com", None, T0)
    stats = store.stats()
    assert stats.entries == 4
    assert stats.generation == 1
    assert stats.last_rebuild == T0
    assert stats.by_source == {"received": 2, "sent": 1, "manual": 1}


# ---------------------------------------------------------------------------
# Naive timestamps are taken as UTC
# ---------------------------------------------------------------------------

class TestNaiveTimestamps:

    def test_upsert_naive_over_aware(self, store):
        store.replace([_make("a@x.com", last_used=T0)])
        entry = store.upsert("a@x.com", None, datetime(2024, 5, 1, 13, 0))
        assert entry.last_used == T0 + timedelta(hours=1)
        assert entry.last_used.tzinfo is not None

    def test_upsert_aware_over_naive_entry(self, store):
        store.replace([_make("a@x.com", last_used=datetime(2024, 5, 1, 12, 0))])
        entry = store.upsert("a@x.com", None, T0 + timedelta(minutes=5))
        assert entry.frequency == 2
        assert entry.last_used == T0 + timedelta(minutes=5)

    def test_is_stale_with_naive_now(self, store):
        store.replace([_make("a@x.com")])
        assert not store.is_stale(datetime(2024, 5, 1, 12, 1))
        assert store.is_stale(datetime(2024, 5, 1, 12, 6))

    def test_naive_clock(self):
        naive_clock = FakeClock(datetime(2024, 5, 1, 12, 0))
        store = CacheStore(ttl_seconds=300, clock=naive_clock)
        store.replace([_make("a@x.com")])
        assert store.last_rebuild == T0
        assert not store.is_stale()
