"""Pass-through zone cache: every call goes to the provider."""

from __future__ import annotations

import threading

from zonecache.base.forwarded_domains import ForwardedDomainsCache
from zonecache.base.types import ChangeRequest, HostedZone, ZoneRecordState
from zonecache.base.zone_cache import StateUpdater, ZonesUpdater, ZoneCacheBlueprint


class OnlyZonesCache(ZoneCacheBlueprint):
    """Zone cache that caches nothing but a private forwarded domains cache.

    Used for accounts configured without state caching and, for diagnostics,
    when state caching is disabled globally.
    """

    def __init__(
        self,
        zones_ttl: float,
        zones_updater: ZonesUpdater,
        state_updater: StateUpdater,
    ) -> None:
        super().__init__(zones_ttl, zones_updater, state_updater)
        self._lock = threading.Lock()
        self._forwarded_domains_cache: ForwardedDomainsCache | None = None

    def get_zones(self) -> list[HostedZone]:
        return self.zones_updater(self)

    def get_zone_state(self, zone: HostedZone) -> ZoneRecordState:
        return self.state_updater(zone, self)

    def apply_requests(
        self,
        err: BaseException | None,
        zone: HostedZone,
        requests: list[ChangeRequest],
    ) -> None:
        pass

    def report_zone_state_conflict(self, zone: HostedZone, err: BaseException) -> bool:
        return False

    def forwarded_domains_cache(self) -> ForwardedDomainsCache:
        with self._lock:
            if self._forwarded_domains_cache is None:
                self._forwarded_domains_cache = ForwardedDomainsCache()
            return self._forwarded_domains_cache

    def release(self) -> None:
        pass
