"""Core value types shared by the zone caches and the provider adapters."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Literal


def normalize_name(name: str) -> str:
    """Lower-case a DNS name and strip the trailing dot."""
    return name.lower().rstrip(".")


@dataclass(frozen=True, order=True)
class ZoneID:
    """Composite zone key, ordered by provider type then id."""

    provider_type: str
    id: str

    def __str__(self) -> str:
        return f"{self.provider_type}:{self.id}"


@dataclass(frozen=True)
class HostedZone:
    """A zone as listed by a provider account.

    Attributes:
        zone_id: Composite key of the zone.
        domain: Base domain of the zone (normalized).
        key: Provider handle used to address the zone in API calls.
        forwarded_domains: Subdomains delegated to other name servers.
        is_private: Whether the zone is private to a network.
    """

    zone_id: ZoneID
    domain: str
    key: str = ""
    forwarded_domains: tuple[str, ...] = ()
    is_private: bool = False

    @property
    def id(self) -> ZoneID:
        return self.zone_id


@dataclass
class RecordSet:
    record_type: str
    ttl: int
    records: list[str] = field(default_factory=list)


@dataclass
class DNSSet:
    """All record sets of one DNS name, keyed by record type."""

    name: str
    sets: dict[str, RecordSet] = field(default_factory=dict)


@dataclass
class ZoneRecordState:
    """Snapshot of the record sets of a zone.

    The cache only ever hands out clones of its stored snapshot, so callers
    are free to mutate what they receive.
    """

    dns_sets: dict[str, DNSSet] = field(default_factory=dict)

    def clone(self) -> ZoneRecordState:
        return copy.deepcopy(self)

    def get_record_set(self, name: str, record_type: str) -> RecordSet | None:
        dns_set = self.dns_sets.get(normalize_name(name))
        if dns_set is None:
            return None
        return dns_set.sets.get(record_type)

    def add_record_set(self, name: str, record_set: RecordSet) -> None:
        key = normalize_name(name)
        dns_set = self.dns_sets.setdefault(key, DNSSet(name=key))
        dns_set.sets[record_set.record_type] = record_set


ChangeAction = Literal["create", "update", "delete"]


@dataclass(frozen=True)
class ChangeRequest:
    """A single record set mutation.

    ``create`` and ``update`` carry the new record set in *addition*;
    ``update`` may also carry the previous one in *deletion*, which some
    providers need for an exact replace. ``delete`` carries the record set
    to remove in *deletion*.
    """

    action: ChangeAction
    name: str
    addition: RecordSet | None = None
    deletion: RecordSet | None = None

    def __post_init__(self) -> None:
        if self.action not in ("create", "update", "delete"):
            raise ValueError(f"Unknown change action: {self.action}")
        if self.action in ("create", "update") and self.addition is None:
            raise ValueError(f"Change action '{self.action}' requires an addition")
        if self.action == "delete" and self.deletion is None:
            raise ValueError("Change action 'delete' requires a deletion")

    @property
    def record_type(self) -> str:
        rs = self.addition if self.addition is not None else self.deletion
        assert rs is not None  # guaranteed by __post_init__
        return rs.record_type
