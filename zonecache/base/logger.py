"""
Structured logging for the zone caches.

Emits JSON log records carrying cache context (account, provider type,
zone, operation) so refreshes, invalidations and garbage collection of a
single zone can be followed in a log aggregator.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any


_CONTEXT_KEYS = ("request_id", "account", "provider_type", "zone", "operation")


class StructuredFormatter(logging.Formatter):
    """One JSON object per record; cache context keys are added when set."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _CONTEXT_KEYS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = str(record.exc_info[1])
        return json.dumps(log_entry)


class ZoneCacheLogger:
    """Logger of the zone caches; every record names the zone or account it concerns.

    A JSON handler is installed on first use of a logger name unless the
    application configured handlers already.
    """

    def __init__(self, name: str = "zonecache") -> None:
        self.logger = logging.getLogger(name)
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    def log_operation(
        self,
        level: int,
        message: str,
        *,
        account: str | None = None,
        provider_type: str | None = None,
        zone: Any = None,
        operation: str | None = None,
        request_id: str | None = None,
        exc_info: bool = False,
    ) -> None:
        """Log *message* with the cache context of the call.

        Args:
            level: Logging level.
            message: Human-readable message.
            account: Account whose zone cache logged the record.
            provider_type: Provider type, if no zone is given.
            zone: ZoneID the record is about; rendered as ``provider_type:id``.
            operation: Cache method that logged (e.g. ``apply_requests``).
            request_id: Correlation ID; a short random one if omitted.
            exc_info: Whether to attach the active exception.
        """
        if not self.logger.isEnabledFor(level):
            return
        extra = {
            "account": account,
            "provider_type": provider_type,
            "zone": str(zone) if zone is not None else None,
            "operation": operation,
            "request_id": request_id or uuid.uuid4().hex[:12],
        }
        self.logger.log(level, message, extra=extra, exc_info=exc_info)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.ERROR, message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.DEBUG, message, **kwargs)


zc_logger = ZoneCacheLogger()
