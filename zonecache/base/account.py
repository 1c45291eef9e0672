"""Provider account blueprint."""

from __future__ import annotations

from abc import ABC, abstractmethod

from zonecache.base.types import ChangeRequest, HostedZone, ZoneRecordState
from zonecache.base.zone_cache import ZoneCacheBlueprint


class ProviderAccountBlueprint(ABC):
    """Abstract interface of a DNS provider account.

    Concrete accounts talk to the provider API; their :meth:`get_zones` and
    :meth:`get_zone_state` methods are used as the zones / state updater
    callbacks of a zone cache.
    """

    provider_type: str

    @abstractmethod
    def get_zones(self, cache: ZoneCacheBlueprint) -> list[HostedZone]:
        """List the hosted zones of the account.

        Forwarded domains are looked up in ``cache.forwarded_domains_cache()``
        first and only computed from the provider on a miss.
        """

    @abstractmethod
    def get_zone_state(self, zone: HostedZone, cache: ZoneCacheBlueprint) -> ZoneRecordState:
        """Fetch the full record snapshot of a zone."""

    @abstractmethod
    def _execute_requests(self, zone: HostedZone, requests: list[ChangeRequest]) -> None:
        """Send the change requests to the provider as one batch."""

    def execute_requests(
        self,
        zone: HostedZone,
        requests: list[ChangeRequest],
        cache: ZoneCacheBlueprint,
    ) -> None:
        """Execute change requests at the provider and write them through to *cache*.

        The cache is informed of the outcome in both cases; a provider
        error is re-raised unchanged afterwards.
        """
        if not requests:
            return
        try:
            self._execute_requests(zone, requests)
        except Exception as err:
            cache.apply_requests(err, zone, requests)
            raise
        cache.apply_requests(None, zone, requests)
