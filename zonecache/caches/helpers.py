from __future__ import annotations

from zonecache.base.types import HostedZone, ZoneID


def to_sorted_zone_ids(zones: list[HostedZone] | None) -> tuple[ZoneID, ...]:
    """Return the ids of *zones* ordered by provider type, then id."""
    if not zones:
        return ()
    return tuple(sorted(zone.id for zone in zones))
