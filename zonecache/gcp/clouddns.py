"""GCP Cloud DNS provider account."""

from __future__ import annotations

from google.api_core import exceptions as gcp_exceptions
from google.cloud import dns as cloud_dns  # type: ignore[attr-defined]

from zonecache.base.account import ProviderAccountBlueprint
from zonecache.base.config import GCPConfig
from zonecache.base.exceptions import (
    ProviderError,
    ThrottlingError,
    ZoneNotFoundError,
)
from zonecache.base.types import (
    ChangeRequest,
    HostedZone,
    RecordSet,
    ZoneID,
    ZoneRecordState,
    normalize_name,
)
from zonecache.base.zone_cache import ZoneCacheBlueprint

PROVIDER_TYPE = "google-clouddns"


def _translate(e: Exception, msg: str) -> ProviderError:
    if isinstance(e, (gcp_exceptions.TooManyRequests, gcp_exceptions.ResourceExhausted)):
        return ThrottlingError(msg)
    if isinstance(e, gcp_exceptions.NotFound):
        return ZoneNotFoundError(msg)
    return ProviderError(msg)


class CloudDNSAccount(ProviderAccountBlueprint):
    """Cloud DNS managed zones of one GCP project.

    Attributes:
        client: Cloud DNS client.
        project_id: GCP project ID.
    """

    provider_type = PROVIDER_TYPE

    def __init__(self, config: GCPConfig) -> None:
        assert config.project_id is not None  # guaranteed by GCPConfig validator
        self.project_id: str = config.project_id
        self.client = cloud_dns.Client(project=self.project_id, credentials=config.credentials)

    def get_zones(self, cache: ZoneCacheBlueprint) -> list[HostedZone]:
        """List all managed zones of the project.

        Zone keys are the managed zone names; ids are prefixed with the
        project so zones of different projects never collide.
        """
        forwarded_cache = cache.forwarded_domains_cache()
        try:
            zones: list[HostedZone] = []
            for z in self.client.list_zones():
                zone_id = ZoneID(PROVIDER_TYPE, f"{self.project_id}/{z.name}")
                domain = normalize_name(z.dns_name)
                forwarded = forwarded_cache.get(zone_id)
                if forwarded is None:
                    forwarded = sorted(
                        normalize_name(r.name)
                        for r in z.list_resource_record_sets()
                        if r.record_type == "NS" and normalize_name(r.name) != domain
                    )
                    forwarded_cache.set(zone_id, forwarded)
                zones.append(
                    HostedZone(
                        zone_id=zone_id,
                        domain=domain,
                        key=z.name,
                        forwarded_domains=tuple(forwarded),
                    )
                )
            return zones
        except Exception as e:
            raise _translate(e, "Failed to list managed zones") from e

    def get_zone_state(self, zone: HostedZone, cache: ZoneCacheBlueprint) -> ZoneRecordState:
        """Fetch all record sets of a managed zone.

        Raises:
            ZoneNotFoundError: If the zone does not exist.
            ThrottlingError: If the quota was exceeded.
            ProviderError: On any other Cloud DNS failure.
        """
        try:
            state = ZoneRecordState()
            for r in self.client.zone(zone.key).list_resource_record_sets():
                state.add_record_set(r.name, RecordSet(r.record_type, r.ttl, list(r.rrdatas)))
            return state
        except Exception as e:
            raise _translate(e, f"Failed to list record sets of zone '{zone.id}'") from e

    def _execute_requests(self, zone: HostedZone, requests: list[ChangeRequest]) -> None:
        try:
            gzone = self.client.zone(zone.key)
            changes = gzone.changes()
            for req in requests:
                if req.deletion is not None:
                    d = req.deletion
                    changes.delete_record_set(
                        gzone.resource_record_set(req.name, d.record_type, d.ttl, d.records)
                    )
                if req.addition is not None:
                    a = req.addition
                    changes.add_record_set(
                        gzone.resource_record_set(req.name, a.record_type, a.ttl, a.records)
                    )
            changes.create()
        except Exception as e:
            raise _translate(e, f"Failed to change record sets in zone '{zone.id}'") from e
