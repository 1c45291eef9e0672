"""
Error backoff for zones list refreshes.

When listing the zones of an account fails, the cache does not wait for the
full zones TTL before trying again. The delay grows by 5/4 plus a fixed
increment on every consecutive failure and is capped at a fraction of the
TTL, so transient throttling or network problems recover quickly without
hammering the provider.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("zonecache")

BACKOFF_FACTOR = 1.25
BACKOFF_INCREMENT = 2.0
# Fraction of the zones TTL the backoff may never exceed.
MAX_BACKOFF_FRACTION = 0.25


class ErrorBackoff:
    """Backoff state of a single consumer. Not thread-safe; callers hold their own lock.

    Args:
        ttl: Steady-state TTL in seconds used to derive the cap.
        factor: Multiplier applied to the previous delay.
        increment: Seconds added after applying the factor.
    """

    def __init__(
        self,
        ttl: float,
        factor: float = BACKOFF_FACTOR,
        increment: float = BACKOFF_INCREMENT,
    ) -> None:
        self.ttl = ttl
        self.factor = factor
        self.increment = increment
        self.current = 0.0

    @property
    def max_delay(self) -> float:
        return self.ttl * MAX_BACKOFF_FRACTION

    def next(self) -> float:
        """Advance to and return the next delay in seconds."""
        delay = min(self.current * self.factor + self.increment, self.max_delay)
        logger.debug("Backoff advanced from %.2fs to %.2fs", self.current, delay)
        self.current = delay
        return delay

    def clear(self) -> None:
        self.current = 0.0
