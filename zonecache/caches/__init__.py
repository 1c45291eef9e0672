"""Zone cache strategies and the shared zone-state manager."""

from .default import DefaultZoneCache
from .states import ZoneStateProxy, ZoneStates
from .zones_only import OnlyZonesCache

__all__ = [
    "DefaultZoneCache",
    "OnlyZonesCache",
    "ZoneStateProxy",
    "ZoneStates",
]
