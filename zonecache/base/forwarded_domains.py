"""
Forwarded domains cache.

Remembers, per zone, the subdomains delegated to other name servers, so
provider adapters only scan a zone for NS delegations once per zone
lifecycle. Entries are dropped whenever the zone's cached state is
invalidated or garbage-collected.
"""

from __future__ import annotations

import threading

from zonecache.base.types import ZoneID


class ForwardedDomainsCache:
    """Thread-safe zone -> forwarded subdomains map."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._forwarded: dict[ZoneID, list[str]] = {}

    def get(self, zone_id: ZoneID) -> list[str] | None:
        """Return the forwarded domains of a zone, or None if unknown."""
        with self._lock:
            value = self._forwarded.get(zone_id)
            return list(value) if value is not None else None

    def set(self, zone_id: ZoneID, value: list[str] | None) -> None:
        """Store the forwarded domains of a zone.

        ``None`` removes the entry; an empty list is stored as a known
        "no forwarded domains" result.
        """
        with self._lock:
            if value is not None:
                self._forwarded[zone_id] = list(value)
            else:
                self._forwarded.pop(zone_id, None)

    def delete_zone(self, zone_id: ZoneID) -> None:
        with self._lock:
            self._forwarded.pop(zone_id, None)

    def __contains__(self, zone_id: ZoneID) -> bool:
        with self._lock:
            return zone_id in self._forwarded

    def __len__(self) -> int:
        with self._lock:
            return len(self._forwarded)

    def zones(self) -> list[ZoneID]:
        """Return the ids of all zones with a stored entry."""
        with self._lock:
            return list(self._forwarded)
