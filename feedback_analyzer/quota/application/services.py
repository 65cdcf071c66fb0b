"""
Quota Application Services
==========================

QuotaTracker: explicit, per-process quota state with an injectable clock.

The check-then-consume sequence is not atomic. Two concurrent callers can
both pass can_consume and then both consume; the reserved margin absorbs
that overshoot. Consumption is recorded after the metered call succeeds,
never reserved ahead of it.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Dict, Optional

from feedback_analyzer.core import QuotaExceededException
from feedback_analyzer.quota.domain import QuotaCounter, QuotaConfig, window_start_for
from feedback_analyzer.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


def local_now() -> datetime:
    """Timezone-aware local time; the default tracker clock."""
    return datetime.now().astimezone()


class IQuotaConfigProvider(ABC):
    """Interface for quota configuration access."""

    @abstractmethod
    def get_config(self) -> QuotaConfig:
        """Get current quota configuration."""


class QuotaTracker:
    """
    Tracks metered resource consumption against rolling windows.

    Counters are created lazily on first use per resource class. A
    rollover check runs before every read or write of a counter.
    """

    def __init__(
        self,
        config: Optional[QuotaConfig] = None,
        clock: Callable[[], datetime] = local_now
    ):
        self._config = config or QuotaConfig()
        self._clock = clock
        self._counters: Dict[str, QuotaCounter] = {}

    def _counter(self, resource_class: str) -> Optional[QuotaCounter]:
        """Get the rolled-over counter, or None for an unknown class."""
        if resource_class not in self._config.limits:
            return None

        now = self._clock()
        counter = self._counters.get(resource_class)
        if counter is None:
            limit = self._config.get_limit(resource_class)
            counter = QuotaCounter(
                resource_class=resource_class,
                window=limit.window,
                window_start=window_start_for(limit.window, now),
                hard_limit=limit.hard_limit,
                reserved_margin=limit.reserved_margin
            )
            self._counters[resource_class] = counter
        elif counter.roll_over(now):
            logger.info(
                "Quota window rolled over",
                extra={"resource_class": resource_class, "window_start": counter.window_start.isoformat()}
            )
        return counter

    def can_consume(self, resource_class: str, estimated_amount: int = 1) -> bool:
        """
        Check whether `estimated_amount` fits in the current window.

        True iff used + estimated_amount < hard_limit - reserved_margin.
        Unknown resource classes are always denied.
        """
        counter = self._counter(resource_class)
        if counter is None:
            logger.warning(
                "Quota check for unknown resource class denied",
                extra={"resource_class": resource_class}
            )
            return False

        allowed = counter.allows(estimated_amount)
        if not allowed:
            logger.info(
                "Quota check denied",
                extra={
                    "resource_class": resource_class,
                    "requested": estimated_amount,
                    "used": counter.used,
                    "effective_limit": counter.effective_limit
                }
            )
        return allowed

    def require(self, resource_class: str, estimated_amount: int = 1) -> None:
        """
        Like can_consume, but raises when the request does not fit.

        Raises:
            QuotaExceededException: If `estimated_amount` is not available
        """
        if not self.can_consume(resource_class, estimated_amount):
            counter = self._counters.get(resource_class)
            raise QuotaExceededException(
                resource_class,
                estimated_amount,
                counter.remaining if counter is not None else 0
            )

    def consume(self, resource_class: str, amount: int) -> None:
        """
        Record consumption in the current window.

        Never raises. Overshoot is only visible to the next can_consume.
        """
        counter = self._counter(resource_class)
        if counter is None:
            logger.warning(
                "Ignoring consumption for unknown resource class",
                extra={"resource_class": resource_class, "amount": amount}
            )
            return
        counter.add(amount)

    def usage_stats(self) -> Dict[str, dict]:
        """Usage per configured resource class."""
        stats = {}
        for resource_class in self._config.limits:
            counter = self._counter(resource_class)
            stats[resource_class] = {
                "used": counter.used,
                "limit": counter.hard_limit,
                "reserved": counter.reserved_margin,
                "remaining": counter.remaining,
                "window": counter.window,
                "window_start": counter.window_start.isoformat(),
            }
        return stats
