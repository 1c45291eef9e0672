"""GCP provider accounts."""

from .clouddns import CloudDNSAccount

__all__ = ["CloudDNSAccount"]
