"""
Pydantic configuration models for the zone caches and provider accounts.

Validates settings at initialization time instead of silently passing bad
values (negative TTLs, unknown keys) down into the caches or SDK clients.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable
from pydantic import BaseModel, ConfigDict, Field, model_validator

from zonecache.base.types import ZoneID


StateTTLGetter = Callable[[ZoneID], float]


class ZoneCacheConfig(BaseModel):
    """Configuration consumed by :class:`~zonecache.factory.ZoneCacheFactory`.

    Values are resolved in order:
    1. Explicit values passed in the config dict.
    2. Environment variables (ZONECACHE_ZONES_TTL, ZONECACHE_STATE_TTL,
       ZONECACHE_DISABLE_STATE_CACHE).
    3. Field defaults.
    """

    model_config = ConfigDict(extra="forbid")

    zones_ttl: float = Field(default=300.0, gt=0, description="Zones list TTL in seconds")
    state_ttl: float = Field(default=120.0, gt=0, description="Default zone state TTL in seconds")
    provider_state_ttls: dict[str, float] = Field(
        default_factory=dict,
        description="Zone state TTL overrides keyed by provider type",
    )
    disable_zone_state_cache: bool = Field(
        default=False,
        description="Force the pass-through strategy (diagnostics only)",
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fall back to environment variables for missing settings."""
        return _fill_from_env(values, {
            "zones_ttl": "ZONECACHE_ZONES_TTL",
            "state_ttl": "ZONECACHE_STATE_TTL",
            "disable_zone_state_cache": "ZONECACHE_DISABLE_STATE_CACHE",
        })

    @model_validator(mode="after")
    def validate_provider_ttls(self) -> ZoneCacheConfig:
        """Reject non-positive per-provider TTL overrides."""
        for provider_type, ttl in self.provider_state_ttls.items():
            if ttl <= 0:
                raise ValueError(
                    f"State TTL for provider type '{provider_type}' must be positive, got {ttl}"
                )
        return self

    def state_ttl_getter(self) -> StateTTLGetter:
        """Return the per-zone TTL provider used by the shared zone-state manager."""
        overrides = dict(self.provider_state_ttls)
        default = self.state_ttl

        def getter(zone_id: ZoneID) -> float:
            return overrides.get(zone_id.provider_type, default)

        return getter


class AWSConfig(BaseModel):
    """Credentials of a Route 53 account.

    Unset fields are taken from the standard AWS variables; whatever is
    still missing is left to boto3's own lookup.
    """

    model_config = ConfigDict(extra="forbid")

    aws_access_key_id: str | None = Field(default=None, description="Access key of the account")
    aws_secret_access_key: str | None = Field(default=None, description="Secret key of the account")
    region_name: str | None = Field(default=None, description="Region for the Route 53 endpoint")

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        return _fill_from_env(values, {
            "aws_access_key_id": "AWS_ACCESS_KEY_ID",
            "aws_secret_access_key": "AWS_SECRET_ACCESS_KEY",
            "region_name": "AWS_DEFAULT_REGION",
        })


class GCPConfig(BaseModel):
    """Project and credentials of a Cloud DNS account.

    Zone ids are prefixed with ``project_id``, so it must resolve.
    """

    model_config = ConfigDict(extra="forbid")

    project_id: str | None = Field(default=None, description="Project owning the managed zones")
    credentials: Any | None = Field(default=None, description="Ready-made credentials object")
    credentials_path: str | None = Field(
        default=None, description="Service account key file, used if no credentials object is given"
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        values = _fill_from_env(values, {
            "project_id": "GOOGLE_CLOUD_PROJECT",
            "credentials_path": "GOOGLE_APPLICATION_CREDENTIALS",
        })
        return _fill_from_env(values, {"project_id": "GCLOUD_PROJECT"})

    @model_validator(mode="after")
    def load_credentials(self) -> GCPConfig:
        if self.project_id is None:
            raise ValueError("Cloud DNS account needs a project_id (or GOOGLE_CLOUD_PROJECT)")
        if self.credentials is None and self.credentials_path:
            path = Path(self.credentials_path)
            if not path.exists():
                raise ValueError(f"Service account key not found: {self.credentials_path}")
            from google.oauth2 import service_account  # lazy import

            self.credentials = service_account.Credentials.from_service_account_file(str(path))
        return self


def _fill_from_env(values: dict[str, Any], env_map: dict[str, str]) -> dict[str, Any]:
    """Set fields that are missing or empty from the mapped environment variables."""
    for field, env_var in env_map.items():
        if values.get(field) in (None, "") and os.environ.get(env_var):
            values[field] = os.environ[env_var]
    return values


# provider name -> account config model
CONFIG_REGISTRY: dict[str, type[BaseModel]] = {
    "aws": AWSConfig,
    "gcp": GCPConfig,
}


def validate_config(provider: str, config: dict) -> BaseModel:
    """Build the account config of *provider* from a raw dict.

    Raises:
        ValueError: If no account config exists for *provider*.
        pydantic.ValidationError: If *config* does not validate.
    """
    try:
        model = CONFIG_REGISTRY[provider]
    except KeyError:
        raise ValueError(f"No config model registered for provider: {provider}") from None
    return model(**config)


__all__ = [
    "ZoneCacheConfig",
    "StateTTLGetter",
    "AWSConfig",
    "GCPConfig",
    "CONFIG_REGISTRY",
    "validate_config",
]
