"""
Shared zone-state manager.

One :class:`ZoneStates` instance is shared by every full-strategy zone cache
of the process. It owns the record store, the forwarded domains cache and a
registry of per-zone proxies. A proxy's lock is held for the whole duration
of a refresh or write-through apply of its zone, so at most one provider
refresh per zone is in flight, whichever consumer triggered it. Zones are
independent: refreshing one zone never waits on another.

Two bookkeeping maps exist with disjoint locks: the proxy registry and the
per-consumer usage sets. Garbage collection takes the usage lock and then
the registry lock, always in that order.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Hashable

from zonecache.base.config import StateTTLGetter
from zonecache.base.exceptions import AlreadyBusyForOwnerError
from zonecache.base.forwarded_domains import ForwardedDomainsCache
from zonecache.base.logger import zc_logger
from zonecache.base.record_store import InMemoryRecordStore
from zonecache.base.types import ChangeRequest, HostedZone, ZoneID, ZoneRecordState

Clock = Callable[[], float]
StateFetcher = Callable[[HostedZone], ZoneRecordState]


class ZoneStateProxy:
    """Refresh lock and refresh window of a single zone.

    Timestamps are seconds since the epoch; None means the zone has no
    valid cached state.
    """

    __slots__ = ("lock", "last_update_start", "last_update_end")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.last_update_start: float | None = None
        self.last_update_end: float | None = None

    def reset(self) -> None:
        self.last_update_start = None
        self.last_update_end = None

    def is_fresh(self, now: float, ttl: float) -> bool:
        return self.last_update_end is not None and now <= self.last_update_end + ttl


class ZoneStates:
    """Zone record snapshots shared by all full-strategy consumers.

    Args:
        state_ttl_getter: Returns the state TTL in seconds for a zone.
        record_store: Snapshot storage, a fresh in-memory store by default.
        clock: Source of the current time in seconds since the epoch.
    """

    def __init__(
        self,
        state_ttl_getter: StateTTLGetter,
        record_store: InMemoryRecordStore | None = None,
        clock: Clock = time.time,
    ) -> None:
        self.state_ttl_getter = state_ttl_getter
        self.record_store = record_store if record_store is not None else InMemoryRecordStore()
        self.clock = clock
        self._forwarded_domains_cache = ForwardedDomainsCache()
        self._proxies_lock = threading.Lock()
        self._proxies: dict[ZoneID, ZoneStateProxy] = {}
        self._usage_lock = threading.Lock()
        self._used_zones: dict[Hashable, tuple[ZoneID, ...]] = {}

    def _get_proxy(self, zone_id: ZoneID) -> ZoneStateProxy:
        with self._proxies_lock:
            proxy = self._proxies.get(zone_id)
            if proxy is None:
                proxy = ZoneStateProxy()
                self._proxies[zone_id] = proxy
            return proxy

    def get_zone_state(
        self, zone: HostedZone, state_updater: StateFetcher
    ) -> tuple[ZoneRecordState, bool]:
        """Return the state of *zone* and whether it was served from the cache.

        The state updater is called if the cached snapshot is older than the
        zone's TTL. A fresh snapshot is returned as fetched and a copy of it
        is kept; a cached snapshot is returned as a clone.

        Raises:
            Exception: Whatever the state updater raised. The zone's cached
                state is dropped before the error propagates.
            ZoneNotCachedError: If the snapshot vanished from the record store.
        """
        zone_id = zone.id
        proxy = self._get_proxy(zone_id)
        with proxy.lock:
            start = self.clock()
            if not proxy.is_fresh(start, self.state_ttl_getter(zone_id)):
                try:
                    state = state_updater(zone)
                except Exception:
                    zc_logger.warning(
                        "zone state refresh failed, cached state dropped",
                        zone=zone_id,
                        operation="get_zone_state",
                    )
                    self._clean_zone_state(zone_id, proxy)
                    raise
                self.record_store.set_zone(zone, state.clone())
                proxy.last_update_start = start
                proxy.last_update_end = self.clock()
                return state, False

            return self.record_store.clone_zone_state(zone_id), True

    def report_zone_state_conflict(self, zone_id: ZoneID, err: BaseException) -> bool:
        """Drop the zone's state if *err* is an ownership claim newer than the last refresh.

        Returns:
            True if the state was dropped and the caller may retry at once.
        """
        proxy = self._get_proxy(zone_id)
        with proxy.lock:
            if proxy.last_update_start is None:
                return False
            if not isinstance(err, AlreadyBusyForOwnerError):
                return False
            # Ownership may have moved to another controller instance after the
            # last refresh, so the cached owner information is stale.
            if err.entry_created_at.timestamp() > proxy.last_update_start:
                zc_logger.info(
                    f"zone state dropped after ownership conflict for {err.dns_name}",
                    zone=zone_id,
                    operation="report_zone_state_conflict",
                )
                self._clean_zone_state(zone_id, proxy)
                return True
            return False

    def execute_requests(self, zone_id: ZoneID, requests: list[ChangeRequest]) -> None:
        """Write successfully executed change requests through to the cached snapshot.

        Requests are applied in order, stopping at the first failure; a
        failure drops the zone's cached state instead of keeping a partially
        updated snapshot.
        """
        proxy = self._get_proxy(zone_id)
        with proxy.lock:
            for request in requests:
                try:
                    self.record_store.apply(zone_id, request)
                except Exception as exc:
                    zc_logger.info(
                        f"write-through of {request.action} '{request.name}' failed ({exc}), "
                        "cached state dropped",
                        zone=zone_id,
                        operation="execute_requests",
                    )
                    self._clean_zone_state(zone_id, proxy)
                    return

    def forwarded_domains_cache(self) -> ForwardedDomainsCache:
        return self._forwarded_domains_cache

    def clean_zone_state(self, zone_id: ZoneID) -> None:
        """Drop all cached state of a zone, forcing the next read to refresh."""
        proxy = self._get_proxy(zone_id)
        with proxy.lock:
            self._clean_zone_state(zone_id, proxy)

    def _clean_zone_state(self, zone_id: ZoneID, proxy: ZoneStateProxy | None) -> None:
        self.record_store.delete_zone(zone_id)
        self._forwarded_domains_cache.delete_zone(zone_id)
        if proxy is not None:
            proxy.reset()

    def update_used_zones(self, consumer: Hashable, zone_ids: list[ZoneID] | tuple[ZoneID, ...]) -> None:
        """Record the sorted zone ids *consumer* needs and collect unused zones.

        An empty list removes the consumer. Zones no longer needed by any
        consumer lose their snapshot, forwarded domains entry and proxy.
        """
        new_ids = tuple(zone_ids)
        with self._usage_lock:
            old_ids = self._used_zones.get(consumer, ())
            if new_ids == old_ids:
                return
            if new_ids:
                self._used_zones[consumer] = new_ids
            else:
                del self._used_zones[consumer]

            all_used: set[ZoneID] = set()
            for ids in self._used_zones.values():
                all_used.update(ids)

            with self._proxies_lock:
                for zone_id in self.record_store.zones():
                    if zone_id not in all_used:
                        zc_logger.debug(
                            "dropping state of unused zone",
                            zone=zone_id,
                            operation="update_used_zones",
                        )
                        self._clean_zone_state(zone_id, None)
                # listed zones get forwarded domains even if their state was never fetched
                for zone_id in self._forwarded_domains_cache.zones():
                    if zone_id not in all_used:
                        self._forwarded_domains_cache.delete_zone(zone_id)
                for zone_id in [zid for zid in self._proxies if zid not in all_used]:
                    del self._proxies[zone_id]

    def used_zones(self) -> set[ZoneID]:
        """Return the union of the zone ids of all registered consumers."""
        with self._usage_lock:
            result: set[ZoneID] = set()
            for ids in self._used_zones.values():
                result.update(ids)
            return result

    def has_proxy(self, zone_id: ZoneID) -> bool:
        with self._proxies_lock:
            return zone_id in self._proxies
