"""AWS provider accounts."""

from .route53 import Route53Account

__all__ = ["Route53Account"]
