"""
Full zone cache.

Caches the zones list of an account with a TTL (and an error backoff for
failed refreshes) and delegates zone states to the shared
:class:`~zonecache.caches.states.ZoneStates` manager.
"""

from __future__ import annotations

import threading

from zonecache.base.backoff import ErrorBackoff
from zonecache.base.exceptions import is_throttling_error
from zonecache.base.forwarded_domains import ForwardedDomainsCache
from zonecache.base.logger import zc_logger
from zonecache.base.metrics import (
    M_CACHED_GETZONES,
    M_CACHED_GETZONESTATE,
    MetricsBlueprint,
)
from zonecache.base.types import ChangeRequest, HostedZone, ZoneRecordState
from zonecache.base.zone_cache import StateUpdater, ZonesUpdater, ZoneCacheBlueprint
from zonecache.caches.helpers import to_sorted_zone_ids
from zonecache.caches.states import ZoneStates


class DefaultZoneCache(ZoneCacheBlueprint):
    """Zone cache with TTL-gated zones list and shared zone state caching.

    Each instance is one consumer of the shared zone states; the zones it
    last listed keep their cached state alive.

    Attributes:
        zone_states: Shared zone-state manager.
        metrics: Receiver of cache hit and discard counters.
        account: Account name used in log records.
    """

    def __init__(
        self,
        zone_states: ZoneStates,
        zones_ttl: float,
        zones_updater: ZonesUpdater,
        state_updater: StateUpdater,
        metrics: MetricsBlueprint,
        account: str | None = None,
    ) -> None:
        super().__init__(zones_ttl, zones_updater, state_updater)
        self.zone_states = zone_states
        self.metrics = metrics
        self.account = account
        self._lock = threading.Lock()
        self._zones: list[HostedZone] = []
        self._zones_err: Exception | None = None
        self._zones_next: float | None = None
        self._backoff = ErrorBackoff(zones_ttl)

    def get_zones(self) -> list[HostedZone]:
        with self._lock:
            now = self.zone_states.clock()
            if self._zones_next is None or now > self._zones_next:
                self._refresh_zones()
            else:
                self.metrics.add_generic_requests(M_CACHED_GETZONES, 1)
            if self._zones_err is not None:
                raise self._zones_err
            return list(self._zones)

    def _refresh_zones(self) -> None:
        try:
            self._zones, self._zones_err = self.zones_updater(self), None
        except Exception as exc:
            self._zones, self._zones_err = [], exc
        update_time = self.zone_states.clock()
        if self._zones_err is not None:
            # retry soon instead of waiting out the TTL
            backoff = self._backoff.next()
            self._zones_next = update_time + backoff
            zc_logger.warning(
                f"listing zones failed ({self._zones_err}), retrying in {backoff:.1f}s",
                account=self.account,
                operation="get_zones",
            )
        else:
            self._backoff.clear()
            self._zones_next = update_time + self.zones_ttl
        self.zone_states.update_used_zones(self, to_sorted_zone_ids(self._zones))

    @property
    def backoff(self) -> float:
        """Current zones list error backoff in seconds (0 after a success)."""
        with self._lock:
            return self._backoff.current

    def get_zone_state(self, zone: HostedZone) -> ZoneRecordState:
        state, cached = self.zone_states.get_zone_state(
            zone, lambda z: self.state_updater(z, self)
        )
        if cached:
            self.metrics.add_zone_requests(zone.id.id, M_CACHED_GETZONESTATE, 1)
        return state

    def report_zone_state_conflict(self, zone: HostedZone, err: BaseException) -> bool:
        return self.zone_states.report_zone_state_conflict(zone.id, err)

    def apply_requests(
        self,
        err: BaseException | None,
        zone: HostedZone,
        requests: list[ChangeRequest],
    ) -> None:
        if err is None:
            self.zone_states.execute_requests(zone.id, requests)
        elif not is_throttling_error(err):
            zc_logger.info(
                "zone cache discarded because of error during execute_requests",
                account=self.account,
                zone=zone.id,
                operation="apply_requests",
            )
            self.zone_states.clean_zone_state(zone.id)
            self.metrics.add_zone_cache_discarding(zone.id)
        else:
            zc_logger.info(
                "zone cache untouched (only throttling during execute_requests)",
                account=self.account,
                zone=zone.id,
                operation="apply_requests",
            )

    def forwarded_domains_cache(self) -> ForwardedDomainsCache:
        return self.zone_states.forwarded_domains_cache()

    def release(self) -> None:
        self.zone_states.update_used_zones(self, ())
