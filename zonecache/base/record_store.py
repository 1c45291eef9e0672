"""
In-memory record store.

Holds one :class:`ZoneRecordState` snapshot per zone. The store has its own
lock for map consistency only; serializing refreshes and write-through
applies of a zone is the job of the zone-state manager's per-zone proxies.
"""

from __future__ import annotations

import copy
import threading

from zonecache.base.exceptions import (
    RecordSetAlreadyExistsError,
    RecordSetNotFoundError,
    ZoneNotCachedError,
)
from zonecache.base.types import ChangeRequest, HostedZone, ZoneID, ZoneRecordState, normalize_name


class InMemoryRecordStore:
    """Thread-safe keyed storage of zone snapshots."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._zones: dict[ZoneID, HostedZone] = {}
        self._states: dict[ZoneID, ZoneRecordState] = {}

    def set_zone(self, zone: HostedZone, state: ZoneRecordState) -> None:
        """Store or replace the snapshot of *zone*."""
        with self._lock:
            self._zones[zone.id] = zone
            self._states[zone.id] = state

    def clone_zone_state(self, zone_id: ZoneID) -> ZoneRecordState:
        """Return a deep copy of the stored snapshot.

        Raises:
            ZoneNotCachedError: If no snapshot is stored for the zone.
        """
        with self._lock:
            state = self._states.get(zone_id)
            if state is None:
                raise ZoneNotCachedError(f"Zone '{zone_id}' not in record store")
            return state.clone()

    def apply(self, zone_id: ZoneID, request: ChangeRequest) -> None:
        """Apply a single change to the stored snapshot of a zone.

        Raises:
            ZoneNotCachedError: If no snapshot is stored for the zone.
            RecordSetAlreadyExistsError: On create of an existing record set.
            RecordSetNotFoundError: On update or delete of a missing record set.
        """
        name = normalize_name(request.name)
        rtype = request.record_type
        with self._lock:
            state = self._states.get(zone_id)
            if state is None:
                raise ZoneNotCachedError(f"Zone '{zone_id}' not in record store")
            existing = state.get_record_set(name, rtype)
            if request.action == "create":
                if existing is not None:
                    raise RecordSetAlreadyExistsError(
                        f"Record set {rtype} '{name}' already exists in zone '{zone_id}'"
                    )
                state.add_record_set(name, copy.deepcopy(request.addition))  # type: ignore[arg-type]
            elif request.action == "update":
                if existing is None:
                    raise RecordSetNotFoundError(
                        f"Record set {rtype} '{name}' not found in zone '{zone_id}'"
                    )
                state.add_record_set(name, copy.deepcopy(request.addition))  # type: ignore[arg-type]
            else:
                if existing is None:
                    raise RecordSetNotFoundError(
                        f"Record set {rtype} '{name}' not found in zone '{zone_id}'"
                    )
                dns_set = state.dns_sets[name]
                del dns_set.sets[rtype]
                if not dns_set.sets:
                    del state.dns_sets[name]

    def delete_zone(self, zone_id: ZoneID) -> None:
        with self._lock:
            self._zones.pop(zone_id, None)
            self._states.pop(zone_id, None)

    def has_zone(self, zone_id: ZoneID) -> bool:
        with self._lock:
            return zone_id in self._states

    def zones(self) -> list[ZoneID]:
        """Return the ids of all zones with a stored snapshot."""
        with self._lock:
            return list(self._states)
