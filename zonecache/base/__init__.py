"""Shared types, blueprints and infrastructure of the zone caches."""

from .account import ProviderAccountBlueprint
from .cache_types import existing_cache_types, existing_providers
from .forwarded_domains import ForwardedDomainsCache
from .metrics import CountingMetrics, MetricsBlueprint, NullMetrics
from .record_store import InMemoryRecordStore
from .types import ChangeRequest, DNSSet, HostedZone, RecordSet, ZoneID, ZoneRecordState
from .zone_cache import ZoneCacheBlueprint


__all__ = [
    "ProviderAccountBlueprint",
    "ZoneCacheBlueprint",
    "ForwardedDomainsCache",
    "InMemoryRecordStore",
    "MetricsBlueprint",
    "NullMetrics",
    "CountingMetrics",
    "ChangeRequest",
    "DNSSet",
    "HostedZone",
    "RecordSet",
    "ZoneID",
    "ZoneRecordState",
    "existing_cache_types",
    "existing_providers",
]
