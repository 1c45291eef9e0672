"""Zone cache blueprint."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

from zonecache.base.types import ChangeRequest, HostedZone, ZoneRecordState

if TYPE_CHECKING:
    from zonecache.base.forwarded_domains import ForwardedDomainsCache


ZonesUpdater = Callable[["ZoneCacheBlueprint"], list[HostedZone]]
StateUpdater = Callable[[HostedZone, "ZoneCacheBlueprint"], ZoneRecordState]


class ZoneCacheBlueprint(ABC):
    """Consumer-facing cache of one provider account's zones and zone states.

    Both strategies hold the account's callbacks:

    * ``zones_updater(cache)`` lists the hosted zones of the account.
    * ``state_updater(zone, cache)`` fetches the full record snapshot of a zone.

    The cache passes itself to the callbacks so they can reach the
    forwarded domains cache.
    """

    def __init__(
        self,
        zones_ttl: float,
        zones_updater: ZonesUpdater,
        state_updater: StateUpdater,
    ) -> None:
        self.zones_ttl = zones_ttl
        self.zones_updater = zones_updater
        self.state_updater = state_updater

    @abstractmethod
    def get_zones(self) -> list[HostedZone]:
        """Return the hosted zones of the account.

        Raises:
            Exception: Whatever the zones updater raised (possibly a cached failure).
        """

    @abstractmethod
    def get_zone_state(self, zone: HostedZone) -> ZoneRecordState:
        """Return the record snapshot of *zone*.

        The returned object belongs to the caller and may be mutated.
        """

    @abstractmethod
    def apply_requests(
        self,
        err: BaseException | None,
        zone: HostedZone,
        requests: list[ChangeRequest],
    ) -> None:
        """Bring cached state in line with a provider write that already happened.

        Args:
            err: Error of the provider write, None if it succeeded.
            zone: Zone the requests were executed on.
            requests: The executed change requests, in execution order.
        """

    @abstractmethod
    def report_zone_state_conflict(self, zone: HostedZone, err: BaseException) -> bool:
        """Return True if *err* shows the cached state of *zone* was stale.

        In that case the cached state has been dropped and the caller may
        retry immediately.
        """

    @abstractmethod
    def forwarded_domains_cache(self) -> ForwardedDomainsCache:
        """Return the forwarded domains cache used by this consumer."""

    @abstractmethod
    def release(self) -> None:
        """Tear down the consumer and give up its claim on cached zones."""
