"""Tests for the shared zone-state manager."""

from datetime import datetime, timezone
from unittest.mock import MagicMock
import threading
import time
import pytest

from zonecache.base.exceptions import (
    AlreadyBusyForOwnerError,
    ProviderError,
    ZoneNotCachedError,
)
from zonecache.base.types import ChangeRequest, HostedZone, RecordSet, ZoneID, ZoneRecordState
from zonecache.caches.states import ZoneStates


Z1 = HostedZone(ZoneID("aws-route53", "Z1"), "example.com", key="Z1")
Z2 = HostedZone(ZoneID("aws-route53", "Z2"), "example.org", key="Z2")
Z3 = HostedZone(ZoneID("aws-route53", "Z3"), "example.net", key="Z3")


def _state(*names: str) -> ZoneRecordState:
    state = ZoneRecordState()
    for name in names:
        state.add_record_set(name, RecordSet("A", 300, ["10.0.0.1"]))
    return state


@pytest.fixture
def states(clock):
    return ZoneStates(lambda zone_id: 60.0, clock=clock)


# ══════════════════════════════════════════════════════════════════════
# get_zone_state
# ══════════════════════════════════════════════════════════════════════

class TestGetZoneState:
    def test_first_call_fetches(self, states):
        updater = MagicMock(return_value=_state("www.example.com"))
        state, cached = states.get_zone_state(Z1, updater)
        assert cached is False
        assert state.get_record_set("www.example.com", "A") is not None
        updater.assert_called_once_with(Z1)

    def test_end_to_end_ttl(self, states, clock):
        s1 = _state("a.example.com")
        s2 = _state("b.example.com")
        updater = MagicMock(side_effect=[s1, s2])

        first, cached = states.get_zone_state(Z1, updater)
        assert first is s1 and cached is False

        clock.advance(30)
        second, cached = states.get_zone_state(Z1, updater)
        assert cached is True
        assert second == s1
        assert second is not s1
        assert updater.call_count == 1

        clock.advance(31)
        third, cached = states.get_zone_state(Z1, updater)
        assert cached is False
        assert third is s2
        assert updater.call_count == 2

    def test_clone_isolation(self, states):
        states.get_zone_state(Z1, MagicMock(return_value=_state("a.example.com")))
        hit, _ = states.get_zone_state(Z1, MagicMock())
        hit.add_record_set("evil.example.com", RecordSet("TXT", 60, ["x"]))
        hit.dns_sets["a.example.com"].sets["A"].records.append("10.9.9.9")

        again, cached = states.get_zone_state(Z1, MagicMock())
        assert cached is True
        assert again.get_record_set("evil.example.com", "TXT") is None
        assert again.get_record_set("a.example.com", "A").records == ["10.0.0.1"]

    def test_fresh_result_is_not_the_stored_copy(self, states):
        fresh, _ = states.get_zone_state(Z1, MagicMock(return_value=_state("a.example.com")))
        fresh.add_record_set("late.example.com", RecordSet("A", 60, ["10.1.1.1"]))
        hit, _ = states.get_zone_state(Z1, MagicMock())
        assert hit.get_record_set("late.example.com", "A") is None

    def test_failed_refresh_cleans_zone(self, states, clock):
        states.get_zone_state(Z1, MagicMock(return_value=_state("a.example.com")))
        states.forwarded_domains_cache().set(Z1.id, ["sub.example.com"])
        clock.advance(61)

        err = ProviderError("boom")
        with pytest.raises(ProviderError) as exc_info:
            states.get_zone_state(Z1, MagicMock(side_effect=err))
        assert exc_info.value is err
        assert not states.record_store.has_zone(Z1.id)
        assert states.forwarded_domains_cache().get(Z1.id) is None

        updater = MagicMock(return_value=_state("b.example.com"))
        _, cached = states.get_zone_state(Z1, updater)
        assert cached is False
        updater.assert_called_once()

    def test_per_zone_ttl(self, clock):
        ttls = {"Z1": 10.0, "Z2": 100.0}
        states = ZoneStates(lambda zone_id: ttls[zone_id.id], clock=clock)
        states.get_zone_state(Z1, MagicMock(return_value=_state()))
        states.get_zone_state(Z2, MagicMock(return_value=_state()))
        clock.advance(50)
        _, cached1 = states.get_zone_state(Z1, MagicMock(return_value=_state()))
        _, cached2 = states.get_zone_state(Z2, MagicMock(return_value=_state()))
        assert cached1 is False
        assert cached2 is True

    def test_missing_snapshot_surfaces_error(self, states):
        states.get_zone_state(Z1, MagicMock(return_value=_state()))
        states.record_store.delete_zone(Z1.id)
        with pytest.raises(ZoneNotCachedError):
            states.get_zone_state(Z1, MagicMock())

    def test_single_flight_per_zone(self):
        states = ZoneStates(lambda zone_id: 60.0)
        calls = 0
        calls_lock = threading.Lock()
        started = threading.Event()

        def slow_updater(zone):
            nonlocal calls
            with calls_lock:
                calls += 1
            started.set()
            time.sleep(0.1)
            return _state("a.example.com")

        results = []

        def worker():
            results.append(states.get_zone_state(Z1, slow_updater))

        threads = [threading.Thread(target=worker) for _ in range(5)]
        threads[0].start()
        started.wait(1)
        for t in threads[1:]:
            t.start()
        for t in threads:
            t.join(5)

        assert calls == 1
        assert len(results) == 5
        assert sum(1 for _, cached in results if not cached) == 1
        first = results[0][0]
        assert all(state == first for state, _ in results)

    def test_different_zones_do_not_block_each_other(self):
        states = ZoneStates(lambda zone_id: 60.0)
        release = threading.Event()

        def blocking_updater(zone):
            release.wait(5)
            return _state()

        t = threading.Thread(target=states.get_zone_state, args=(Z1, blocking_updater))
        t.start()
        try:
            _, cached = states.get_zone_state(Z2, MagicMock(return_value=_state()))
            assert cached is False
        finally:
            release.set()
            t.join(5)


# ══════════════════════════════════════════════════════════════════════
# execute_requests (write-through)
# ══════════════════════════════════════════════════════════════════════

class TestExecuteRequests:
    def test_applies_all_in_order(self, states):
        states.get_zone_state(Z1, MagicMock(return_value=_state("a.example.com")))
        requests = [
            ChangeRequest("create", "b.example.com", addition=RecordSet("A", 60, ["10.0.0.2"])),
            ChangeRequest("update", "b.example.com", addition=RecordSet("A", 60, ["10.0.0.3"])),
            ChangeRequest("delete", "a.example.com", deletion=RecordSet("A", 300, ["10.0.0.1"])),
        ]
        states.execute_requests(Z1.id, requests)

        state, cached = states.get_zone_state(Z1, MagicMock())
        assert cached is True
        assert state.get_record_set("b.example.com", "A").records == ["10.0.0.3"]
        assert "a.example.com" not in state.dns_sets

    def test_failure_invalidates_zone(self, states):
        states.get_zone_state(Z1, MagicMock(return_value=_state("a.example.com")))
        requests = [
            ChangeRequest("create", "b.example.com", addition=RecordSet("A", 60, ["10.0.0.2"])),
            ChangeRequest("update", "missing.example.com", addition=RecordSet("A", 60, ["1.1.1.1"])),
            ChangeRequest("create", "c.example.com", addition=RecordSet("A", 60, ["10.0.0.4"])),
        ]
        states.execute_requests(Z1.id, requests)

        assert not states.record_store.has_zone(Z1.id)
        updater = MagicMock(return_value=_state("a.example.com"))
        state, cached = states.get_zone_state(Z1, updater)
        assert cached is False
        updater.assert_called_once()
        assert state.get_record_set("b.example.com", "A") is None

    def test_caller_record_set_not_shared(self, states):
        states.get_zone_state(Z1, MagicMock(return_value=_state("a.example.com")))
        addition = RecordSet("A", 60, ["10.0.0.2"])
        states.execute_requests(Z1.id, [ChangeRequest("create", "b.example.com", addition=addition)])
        addition.records.append("6.6.6.6")

        state, cached = states.get_zone_state(Z1, MagicMock())
        assert cached is True
        assert state.get_record_set("b.example.com", "A").records == ["10.0.0.2"]

    def test_uncached_zone_is_left_uncached(self, states):
        states.execute_requests(
            Z1.id,
            [ChangeRequest("create", "b.example.com", addition=RecordSet("A", 60, ["10.0.0.2"]))],
        )
        assert not states.record_store.has_zone(Z1.id)


# ══════════════════════════════════════════════════════════════════════
# report_zone_state_conflict
# ══════════════════════════════════════════════════════════════════════

class TestReportZoneStateConflict:
    def _conflict(self, ts: float) -> AlreadyBusyForOwnerError:
        return AlreadyBusyForOwnerError(
            "a.example.com", datetime.fromtimestamp(ts, tz=timezone.utc), owner="other"
        )

    def test_newer_claim_invalidates(self, states, clock):
        t0 = clock.now
        states.get_zone_state(Z1, MagicMock(return_value=_state()))
        assert states.report_zone_state_conflict(Z1.id, self._conflict(t0 + 1)) is True
        assert not states.record_store.has_zone(Z1.id)

    def test_older_claim_keeps_cache(self, states, clock):
        t0 = clock.now
        states.get_zone_state(Z1, MagicMock(return_value=_state()))
        assert states.report_zone_state_conflict(Z1.id, self._conflict(t0)) is False
        assert states.report_zone_state_conflict(Z1.id, self._conflict(t0 - 10)) is False
        assert states.record_store.has_zone(Z1.id)

    def test_naive_claim_time_is_utc(self, states, clock):
        t0 = clock.now
        states.get_zone_state(Z1, MagicMock(return_value=_state()))
        naive = datetime.fromtimestamp(t0 + 1, tz=timezone.utc).replace(tzinfo=None)
        conflict = AlreadyBusyForOwnerError("a.example.com", naive)
        assert states.report_zone_state_conflict(Z1.id, conflict) is True

    def test_other_errors_ignored(self, states):
        states.get_zone_state(Z1, MagicMock(return_value=_state()))
        assert states.report_zone_state_conflict(Z1.id, ProviderError("x")) is False
        assert states.record_store.has_zone(Z1.id)

    def test_never_refreshed_zone(self, states, clock):
        assert states.report_zone_state_conflict(Z1.id, self._conflict(clock.now + 100)) is False


# ══════════════════════════════════════════════════════════════════════
# update_used_zones (garbage collection)
# ══════════════════════════════════════════════════════════════════════

class TestUpdateUsedZones:
    def _fill(self, states, *zones):
        for zone in zones:
            states.get_zone_state(zone, MagicMock(return_value=_state()))
            states.forwarded_domains_cache().set(zone.id, [])

    def test_union_and_release(self, states):
        c1, c2 = object(), object()
        states.update_used_zones(c1, [Z1.id, Z2.id])
        states.update_used_zones(c2, [Z2.id, Z3.id])
        self._fill(states, Z1, Z2, Z3)
        assert states.used_zones() == {Z1.id, Z2.id, Z3.id}
        assert set(states.record_store.zones()) == {Z1.id, Z2.id, Z3.id}

        states.update_used_zones(c1, [])
        assert states.used_zones() == {Z2.id, Z3.id}
        assert set(states.record_store.zones()) == {Z2.id, Z3.id}
        assert states.forwarded_domains_cache().get(Z1.id) is None
        assert not states.has_proxy(Z1.id)
        assert states.has_proxy(Z2.id)
        assert states.forwarded_domains_cache().get(Z2.id) == []

    def test_unchanged_set_is_noop(self, states):
        consumer = object()
        self._fill(states, Z1)
        states.update_used_zones(consumer, [Z1.id])
        states.record_store.zones = MagicMock(wraps=states.record_store.zones)
        states.update_used_zones(consumer, [Z1.id])
        states.record_store.zones.assert_not_called()

    def test_unknown_consumer_release_is_noop(self, states):
        self._fill(states, Z1)
        states.update_used_zones(object(), [])
        assert states.record_store.has_zone(Z1.id)

    def test_dropped_zone_refetches(self, states):
        consumer = object()
        self._fill(states, Z1)
        states.update_used_zones(consumer, [Z1.id])
        states.update_used_zones(consumer, [Z2.id])
        updater = MagicMock(return_value=_state())
        _, cached = states.get_zone_state(Z1, updater)
        assert cached is False
        updater.assert_called_once()

    def test_forwarded_entries_of_unfetched_zones_collected(self, states):
        consumer = object()
        states.update_used_zones(consumer, [Z1.id, Z2.id])
        states.forwarded_domains_cache().set(Z1.id, ["sub.example.com"])
        states.forwarded_domains_cache().set(Z2.id, [])
        assert states.record_store.zones() == []

        states.update_used_zones(consumer, [Z2.id])
        assert states.forwarded_domains_cache().zones() == [Z2.id]

        states.update_used_zones(consumer, [])
        assert len(states.forwarded_domains_cache()) == 0
