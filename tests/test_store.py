"""Tests for the balance history store and snapshot parsing."""
import pytest
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from conftest import snap, ts
from core.types import BalanceSnapshot
from series.store import (
    MalformedSnapshot, SnapshotStore, parse_balance, parse_snapshot, parse_timestamp,
)


class TestParsing:
    def test_naive_iso_uses_store_tz(self, clock):
        assert parse_timestamp("2024-05-10T09:00:00", clock.tz) == ts(10, 9)

    def test_zulu_suffix(self, clock):
        assert parse_timestamp("2024-05-10T09:00:00Z", clock.tz) == ts(10, 9)

    def test_nanosecond_fraction_truncated(self, clock):
        parsed = parse_timestamp("2024-05-10T09:00:00.123456789", clock.tz)
        assert parsed.microsecond == 123456

    def test_epoch_millis(self, clock):
        ms = int(ts(10, 9).timestamp() * 1000)
        assert parse_timestamp(ms, clock.tz) == ts(10, 9)

    def test_datetime_passthrough(self, clock):
        assert parse_timestamp(datetime(2024, 5, 10, 9), clock.tz) == ts(10, 9)

    @pytest.mark.parametrize("bad", ["", "yesterday", None, True, [1, 2]])
    def test_bad_timestamps(self, clock, bad):
        with pytest.raises(MalformedSnapshot):
            parse_timestamp(bad, clock.tz)

    def test_balance_from_string(self):
        assert parse_balance("1050.5") == 1050.5

    @pytest.mark.parametrize("bad", [None, "abc", float("inf"), False])
    def test_bad_balances(self, bad):
        with pytest.raises(MalformedSnapshot):
            parse_balance(bad)

    def test_parse_snapshot_dict(self, clock):
        s = parse_snapshot(snap(10, 9, 1000.0), clock.tz)
        assert s == BalanceSnapshot(ts(10, 9), 1000.0)

    def test_parse_snapshot_rejects_other_types(self, clock):
        with pytest.raises(MalformedSnapshot):
            parse_snapshot("2024-05-10,1000", clock.tz)


class TestIngest:
    def test_sorts_ascending(self, store):
        assert store.ingest([snap(10, 15, 1050.0), snap(10, 9, 1000.0), snap(9, 12, 990.0)])
        assert [s.balance for s in store.snapshots] == [990.0, 1000.0, 1050.0]
        assert store.earliest().balance == 990.0
        assert store.latest().balance == 1050.0

    def test_stable_for_equal_timestamps(self, store):
        store.ingest([snap(10, 9, 1.0), snap(10, 9, 2.0), snap(10, 8, 0.5), snap(10, 9, 3.0)])
        assert [s.balance for s in store.snapshots] == [0.5, 1.0, 2.0, 3.0]

    def test_replaces_previous_series(self, store):
        store.ingest([snap(10, 9, 1000.0), snap(10, 10, 1001.0)])
        store.ingest([snap(10, 11, 1002.0)])
        assert len(store) == 1
        assert store.latest().balance == 1002.0

    @pytest.mark.parametrize("empty", [None, []])
    def test_empty_feed_keeps_prior_state(self, store, empty):
        store.ingest([snap(10, 9, 1000.0)])
        assert not store.ingest(empty)
        assert len(store) == 1
        assert store.latest().balance == 1000.0

    def test_malformed_entries_dropped_individually(self, store):
        ok = store.ingest([
            snap(10, 9, 1000.0),
            {"timestamp": "garbage", "balance": 1.0},
            {"timestamp": "2024-05-10T10:00:00", "balance": None},
            snap(10, 11, 1010.0),
        ])
        assert ok
        assert [s.balance for s in store.snapshots] == [1000.0, 1010.0]

    def test_all_malformed_keeps_prior_state(self, store):
        store.ingest([snap(10, 9, 1000.0)])
        assert not store.ingest([{"timestamp": None, "balance": 1.0}])
        assert store.latest().balance == 1000.0

    def test_accepts_snapshot_objects(self, store):
        store.ingest([BalanceSnapshot(ts(10, 9), 1000.0)])
        assert store.latest().timestamp == ts(10, 9)


class TestQueries:
    def test_last_before_is_strict(self, store):
        store.ingest([snap(9, 23, 990.0), snap(10, 0, 995.0), snap(10, 9, 1000.0)])
        assert store.last_before(ts(10)).balance == 990.0
        assert store.last_before(ts(9)) is None

    def test_between_inclusive(self, store):
        store.ingest([snap(9, 23, 990.0), snap(10, 0, 995.0), snap(10, 9, 1000.0),
                      snap(11, 0, 1005.0)])
        inside = store.between(ts(10), ts(10, 9))
        assert [s.balance for s in inside] == [995.0, 1000.0]

    def test_current_balance_fallbacks(self, store):
        store.initial_balance = 500.0
        assert store.current_balance() == 500.0
        store.ingest([snap(10, 9, 1000.0)])
        assert store.current_balance() == 1000.0
        store.set_live_balance(1040.0)
        assert store.current_balance() == 1040.0

    def test_live_balance_ignores_garbage(self, store):
        store.set_live_balance(1040.0)
        store.set_live_balance("n/a")
        store.set_live_balance(None)
        assert store.live_balance == 1040.0

    def test_set_initial_balance(self, store):
        store.set_initial_balance("1000")
        assert store.initial_balance == 1000.0
        store.set_initial_balance(None)
        assert store.initial_balance == 1000.0


class TestDstFallBack:
    """Europe/Berlin repeats 02:00-03:00 local on 2024-10-27."""

    @pytest.fixture
    def berlin(self):
        try:
            return ZoneInfo("Europe/Berlin")
        except ZoneInfoNotFoundError:
            pytest.skip("tz database not available")

    def test_sorted_by_instant(self, berlin):
        store = SnapshotStore(berlin)
        store.ingest([
            {"timestamp": "2024-10-27T00:30:00Z", "balance": 1.0},  # 02:30 CEST
            {"timestamp": "2024-10-27T01:10:00Z", "balance": 2.0},  # 02:10 CET
        ])
        assert [s.balance for s in store.snapshots] == [1.0, 2.0]

    def test_queries_across_repeated_hour(self, berlin):
        store = SnapshotStore(berlin)
        store.ingest([
            {"timestamp": "2024-10-27T01:10:00Z", "balance": 2.0},
            {"timestamp": "2024-10-27T00:30:00Z", "balance": 1.0},
        ])
        cutoff = datetime(2024, 10, 27, 1, 0, tzinfo=timezone.utc)
        assert store.last_before(cutoff).balance == 1.0
        later = store.between(cutoff, datetime(2024, 10, 27, 2, 0, tzinfo=timezone.utc))
        assert [s.balance for s in later] == [2.0]
