"""Observability hooks for cache hits and cache discards."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import Counter

from zonecache.base.types import ZoneID

M_CACHED_GETZONES = "cached_getzones"
M_CACHED_GETZONESTATE = "cached_getzonestate"


class MetricsBlueprint(ABC):
    """Fire-and-forget counters fed by the zone caches."""

    @abstractmethod
    def add_generic_requests(self, request_type: str, n: int) -> None:
        """Count account level requests (e.g. cached zones lookups)."""

    @abstractmethod
    def add_zone_requests(self, zone_id: str, request_type: str, n: int) -> None:
        """Count zone level requests (e.g. cached zone state lookups)."""

    @abstractmethod
    def add_zone_cache_discarding(self, zone_id: ZoneID) -> None:
        """Count a zone state invalidated because of a failed provider write."""


class NullMetrics(MetricsBlueprint):
    def add_generic_requests(self, request_type: str, n: int) -> None:
        pass

    def add_zone_requests(self, zone_id: str, request_type: str, n: int) -> None:
        pass

    def add_zone_cache_discarding(self, zone_id: ZoneID) -> None:
        pass


class CountingMetrics(MetricsBlueprint):
    """Thread-safe in-memory counters."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.generic: Counter[str] = Counter()
        self.zone: Counter[tuple[str, str]] = Counter()
        self.discarded: Counter[ZoneID] = Counter()

    def add_generic_requests(self, request_type: str, n: int) -> None:
        with self._lock:
            self.generic[request_type] += n

    def add_zone_requests(self, zone_id: str, request_type: str, n: int) -> None:
        with self._lock:
            self.zone[(zone_id, request_type)] += n

    def add_zone_cache_discarding(self, zone_id: ZoneID) -> None:
        with self._lock:
            self.discarded[zone_id] += 1
