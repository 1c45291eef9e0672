"""zonecache — shared zone list and zone state caching for DNS provider accounts.

Create one :class:`ZoneCacheFactory` per process and one zone cache per
provider account::

    from zonecache import ZoneCacheFactory, account_factory

    factory = ZoneCacheFactory()
    account = account_factory("aws", {"region_name": "us-east-1"})
    cache = factory.create_account_cache(account)
    zones = cache.get_zones()
    state = cache.get_zone_state(zones[0])
"""

from .base import (
    ChangeRequest,
    HostedZone,
    ProviderAccountBlueprint,
    RecordSet,
    ZoneCacheBlueprint,
    ZoneID,
    ZoneRecordState,
)
from .base.config import ZoneCacheConfig
from .factory import ZoneCacheFactory, account_factory

__all__ = [
    "ChangeRequest",
    "HostedZone",
    "ProviderAccountBlueprint",
    "RecordSet",
    "ZoneCacheBlueprint",
    "ZoneID",
    "ZoneRecordState",
    "ZoneCacheConfig",
    "ZoneCacheFactory",
    "account_factory",
]
