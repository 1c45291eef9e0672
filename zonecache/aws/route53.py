"""AWS Route 53 provider account."""

from __future__ import annotations

from typing import Any, NoReturn

import boto3
from botocore.exceptions import ClientError

from zonecache.base.account import ProviderAccountBlueprint
from zonecache.base.config import AWSConfig
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

PROVIDER_TYPE = "aws-route53"

_ERROR_MAP: dict[str, type[ProviderError]] = {
    "NoSuchHostedZone": ZoneNotFoundError,
    "Throttling": ThrottlingError,
    "ThrottlingException": ThrottlingError,
    "PriorRequestNotComplete": ThrottlingError,
    "RequestLimitExceeded": ThrottlingError,
}

_ACTIONS = {"create": "CREATE", "update": "UPSERT", "delete": "DELETE"}


def _handle(e: ClientError, msg: str) -> NoReturn:
    exc = _ERROR_MAP.get(e.response["Error"]["Code"])
    raise (exc or ProviderError)(msg) from e


def _record_set(r: dict[str, Any]) -> RecordSet:
    return RecordSet(
        r["Type"],
        r.get("TTL", 0),
        [rr["Value"] for rr in r.get("ResourceRecords", [])],
    )


class Route53Account(ProviderAccountBlueprint):
    """Route 53 hosted zones of one AWS account.

    Attributes:
        client: boto3 Route 53 client.
    """

    provider_type = PROVIDER_TYPE

    def __init__(self, config: AWSConfig) -> None:
        self.client = boto3.client(
            "route53",
            aws_access_key_id=config.aws_access_key_id,
            aws_secret_access_key=config.aws_secret_access_key,
            region_name=config.region_name,
        )

    def _list_record_sets(self, zone_key: str) -> list[dict[str, Any]]:
        paginator = self.client.get_paginator("list_resource_record_sets")
        result: list[dict[str, Any]] = []
        for page in paginator.paginate(HostedZoneId=zone_key):
            result.extend(page.get("ResourceRecordSets", []))
        return result

    def _forwarded_domains(self, zone_key: str, domain: str) -> list[str]:
        """Names below the apex that carry NS records, i.e. delegated subdomains."""
        return sorted(
            normalize_name(r["Name"])
            for r in self._list_record_sets(zone_key)
            if r["Type"] == "NS" and normalize_name(r["Name"]) != domain
        )

    def get_zones(self, cache: ZoneCacheBlueprint) -> list[HostedZone]:
        """List all hosted zones of the account.

        Raises:
            ThrottlingError: If Route 53 throttled the call.
            ProviderError: On any other Route 53 API failure.
        """
        forwarded_cache = cache.forwarded_domains_cache()
        try:
            paginator = self.client.get_paginator("list_hosted_zones")
            zones: list[HostedZone] = []
            for page in paginator.paginate():
                for z in page.get("HostedZones", []):
                    key = z["Id"].split("/")[-1]
                    zone_id = ZoneID(PROVIDER_TYPE, key)
                    domain = normalize_name(z["Name"])
                    forwarded = forwarded_cache.get(zone_id)
                    if forwarded is None:
                        forwarded = self._forwarded_domains(key, domain)
                        forwarded_cache.set(zone_id, forwarded)
                    zones.append(
                        HostedZone(
                            zone_id=zone_id,
                            domain=domain,
                            key=key,
                            forwarded_domains=tuple(forwarded),
                            is_private=z.get("Config", {}).get("PrivateZone", False),
                        )
                    )
            return zones
        except ClientError as e:
            _handle(e, "Failed to list hosted zones")

    def get_zone_state(self, zone: HostedZone, cache: ZoneCacheBlueprint) -> ZoneRecordState:
        """Fetch all record sets of a hosted zone.

        Alias record sets are left out: change batches are built from TTL and
        values only, so they could not be written back.

        Raises:
            ZoneNotFoundError: If the hosted zone does not exist.
            ThrottlingError: If Route 53 throttled the call.
            ProviderError: On any other Route 53 API failure.
        """
        try:
            state = ZoneRecordState()
            for r in self._list_record_sets(zone.key):
                if "AliasTarget" in r:
                    continue
                state.add_record_set(r["Name"], _record_set(r))
            return state
        except ClientError as e:
            _handle(e, f"Failed to list record sets of zone '{zone.id}'")

    def _execute_requests(self, zone: HostedZone, requests: list[ChangeRequest]) -> None:
        changes = []
        for req in requests:
            rs = req.deletion if req.action == "delete" else req.addition
            assert rs is not None  # guaranteed by ChangeRequest
            changes.append(
                {
                    "Action": _ACTIONS[req.action],
                    "ResourceRecordSet": {
                        "Name": req.name,
                        "Type": rs.record_type,
                        "TTL": rs.ttl,
                        "ResourceRecords": [{"Value": v} for v in rs.records],
                    },
                }
            )
        try:
            self.client.change_resource_record_sets(
                HostedZoneId=zone.key,
                ChangeBatch={"Changes": changes},
            )
        except ClientError as e:
            _handle(e, f"Failed to change record sets in zone '{zone.id}'")
