"""Zone cache factory.

:class:`ZoneCacheFactory` builds one zone cache per provider account,
sharing a single :class:`~zonecache.caches.states.ZoneStates` manager
between all full-strategy caches it creates. :func:`account_factory`
builds the provider accounts whose methods serve as the cache callbacks.
"""

from __future__ import annotations

import time
from typing import Any, Literal, overload

from zonecache.base import (
    MetricsBlueprint,
    NullMetrics,
    ProviderAccountBlueprint,
    ZoneCacheBlueprint,
    existing_cache_types,
    existing_providers,
)
from zonecache.base.config import ZoneCacheConfig, validate_config
from zonecache.base.zone_cache import StateUpdater, ZonesUpdater
from zonecache.aws.route53 import Route53Account
from zonecache.gcp.clouddns import CloudDNSAccount
from zonecache.caches import DefaultZoneCache, OnlyZonesCache, ZoneStates
from zonecache.caches.states import Clock


# Provider name -> account implementation
_ACCOUNT_REGISTRY: dict[str, type[ProviderAccountBlueprint]] = {
    "aws": Route53Account,
    "gcp": CloudDNSAccount,
}


class ZoneCacheFactory:
    """Creates zone caches for provider accounts.

    Args:
        config: Cache settings; defaults are used if omitted.
        zone_states: Shared manager to use; created from *config* if omitted.
        clock: Time source passed to a newly created manager.
    """

    def __init__(
        self,
        config: ZoneCacheConfig | None = None,
        zone_states: ZoneStates | None = None,
        clock: Clock = time.time,
    ) -> None:
        self.config = config if config is not None else ZoneCacheConfig()
        if zone_states is None:
            zone_states = ZoneStates(self.config.state_ttl_getter(), clock=clock)
        self.zone_states = zone_states

    @classmethod
    def for_testing(
        cls, zones_ttl: float, state_ttl: float, clock: Clock = time.time
    ) -> ZoneCacheFactory:
        """Return a factory with fixed TTLs that ignores the environment."""
        config = ZoneCacheConfig(
            zones_ttl=zones_ttl,
            state_ttl=state_ttl,
            disable_zone_state_cache=False,
        )
        return cls(config, clock=clock)

    @overload
    def create_zone_cache(
        self,
        cache_type: Literal["zones_only"],
        metrics: MetricsBlueprint | None,
        zones_updater: ZonesUpdater,
        state_updater: StateUpdater,
        account: str | None = None,
    ) -> OnlyZonesCache: ...

    @overload
    def create_zone_cache(
        self,
        cache_type: Literal["zone_state"],
        metrics: MetricsBlueprint | None,
        zones_updater: ZonesUpdater,
        state_updater: StateUpdater,
        account: str | None = None,
    ) -> ZoneCacheBlueprint: ...

    def create_zone_cache(
        self,
        cache_type: existing_cache_types,
        metrics: MetricsBlueprint | None,
        zones_updater: ZonesUpdater,
        state_updater: StateUpdater,
        account: str | None = None,
    ) -> Any:
        """
        Create a zone cache of the given type.
        Args:
            cache_type: ``zones_only`` or ``zone_state``.
            metrics: Receiver of cache counters; counters are dropped if None.
            zones_updater: Callable(cache) listing the account's zones.
            state_updater: Callable(zone, cache) fetching a zone's records.
            account: Account name used in log records.
        Returns:
            A new zone cache. ``zone_state`` yields the pass-through cache if
            state caching is disabled in the config.
        Raises:
            ValueError: If the cache type is unknown.
        """
        zones_ttl = self.config.zones_ttl
        if cache_type == "zones_only":
            return OnlyZonesCache(zones_ttl, zones_updater, state_updater)
        if cache_type == "zone_state":
            if self.config.disable_zone_state_cache:
                return OnlyZonesCache(zones_ttl, zones_updater, state_updater)
            return DefaultZoneCache(
                self.zone_states,
                zones_ttl,
                zones_updater,
                state_updater,
                metrics if metrics is not None else NullMetrics(),
                account=account,
            )
        raise ValueError(f"Unknown zone cache type: {cache_type}")

    def create_account_cache(
        self,
        account: ProviderAccountBlueprint,
        cache_type: existing_cache_types = "zone_state",
        metrics: MetricsBlueprint | None = None,
        name: str | None = None,
    ) -> ZoneCacheBlueprint:
        """Create a zone cache whose callbacks are the methods of *account*."""
        return self.create_zone_cache(
            cache_type,
            metrics,
            account.get_zones,
            account.get_zone_state,
            account=name or account.provider_type,
        )


def account_factory(provider: existing_providers, config: dict) -> ProviderAccountBlueprint:
    """
    Create a provider account from a raw config dict.
    Args:
        provider: The provider (``aws`` or ``gcp``).
        config: Account configuration, validated with the provider's config model.
    Returns:
        The provider account.
    Raises:
        ValueError: If the provider is not supported.
    """
    if provider not in _ACCOUNT_REGISTRY:
        raise ValueError(f"Unsupported provider: {provider}")
    account_class = _ACCOUNT_REGISTRY[provider]
    config_obj = validate_config(provider, config)
    return account_class(config_obj)  # type: ignore[call-arg]
