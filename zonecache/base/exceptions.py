"""
Zone cache exception hierarchy.

Provider adapters translate SDK failures into :class:`ProviderError`
subclasses so the caches can classify them (throttling vs. generic)
without knowing which SDK raised them.
"""

from __future__ import annotations

from datetime import datetime, timezone


# ── Base ──────────────────────────────────────────────────────────────
class ZoneCacheError(Exception):
    """Root exception for all zone cache errors."""


# ── Provider ──────────────────────────────────────────────────────────
class ProviderError(ZoneCacheError):
    """Base exception for failed provider API calls."""


class ThrottlingError(ProviderError):
    """The provider rejected the call because of rate limiting."""


class ZoneNotFoundError(ProviderError):
    """Hosted zone not found at the provider."""


# ── Ownership ─────────────────────────────────────────────────────────
class AlreadyBusyForOwnerError(ZoneCacheError):
    """A DNS name is already claimed by an entry of another owner.

    Attributes:
        dns_name: The contested DNS name.
        entry_created_at: Creation time of the claiming entry; naive values are taken as UTC.
        owner: Identifier of the owner holding the claim.
    """

    def __init__(self, dns_name: str, entry_created_at: datetime, owner: str = "") -> None:
        if entry_created_at.tzinfo is None:
            entry_created_at = entry_created_at.replace(tzinfo=timezone.utc)
        super().__init__(
            f"DNS name '{dns_name}' already busy for owner '{owner}' "
            f"(entry created at {entry_created_at.isoformat()})"
        )
        self.dns_name = dns_name
        self.entry_created_at = entry_created_at
        self.owner = owner


# ── Record store ──────────────────────────────────────────────────────
class RecordStoreError(ZoneCacheError):
    """Base exception for record store operations."""


class ZoneNotCachedError(RecordStoreError):
    """No snapshot is stored for the zone."""


class RecordSetNotFoundError(RecordStoreError):
    """Record set to update or delete does not exist."""


class RecordSetAlreadyExistsError(RecordStoreError):
    """Record set to create already exists."""


def is_throttling_error(err: BaseException | None) -> bool:
    """Return True if *err* or an exception it explicitly wraps (``raise ... from``) is a throttling error."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, ThrottlingError):
            return True
        seen.add(id(err))
        err = err.__cause__
    return False
