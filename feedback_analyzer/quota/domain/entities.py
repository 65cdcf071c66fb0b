"""
Quota Domain Entities
=====================

QuotaCounter plus the pure functions that place a timestamp in its window.

Window policy:
- daily: starts at local midnight of the clock's timezone
- monthly: fixed 30-day periods counted from the Unix epoch, not calendar
  months
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from feedback_analyzer.config import QuotaWindow

MONTHLY_WINDOW = timedelta(days=30)


def daily_window_start(now: datetime) -> datetime:
    """
    Midnight of the day containing `now`, carrying `now`'s UTC offset.

    Across a DST change the offset may not be the one in force at midnight;
    QuotaCounter compares daily windows by wall clock for that reason.
    """
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def monthly_window_start(now: datetime) -> datetime:
    """Start of the 30-day period containing `now`, counted from the epoch."""
    period = int(MONTHLY_WINDOW.total_seconds())
    timestamp = int(now.timestamp())
    return datetime.fromtimestamp(timestamp - timestamp % period, tz=timezone.utc)


def window_start_for(window: str, now: datetime) -> datetime:
    """
    Get the window start for a window type.

    Raises:
        ValueError: If the window type is unknown
    """
    if window == QuotaWindow.DAILY:
        return daily_window_start(now)
    if window == QuotaWindow.MONTHLY:
        return monthly_window_start(now)
    raise ValueError(f"Unknown quota window: {window}")


@dataclass
class QuotaCounter:
    """
    Consumption of one resource class within its current window.

    `used` resets to zero when the window start moves; nothing else
    ever lowers it.
    """

    resource_class: str
    window: str
    window_start: datetime
    hard_limit: int
    reserved_margin: int
    used: int = 0

    def __post_init__(self):
        """Validate counter on initialization."""
        if self.used < 0:
            raise ValueError("used cannot be negative")
        if self.reserved_margin < 0 or self.hard_limit < 0:
            raise ValueError("limits cannot be negative")

    @property
    def effective_limit(self) -> int:
        """Budget available before the reserved margin."""
        return self.hard_limit - self.reserved_margin

    @property
    def remaining(self) -> int:
        """Budget left in the current window (never negative)."""
        return max(0, self.effective_limit - self.used)

    def roll_over(self, now: datetime) -> bool:
        """
        Reset the counter if `now` falls in a later window.

        Returns:
            True if the counter was reset
        """
        current_start = window_start_for(self.window, now)
        # Wall-clock comparison: a DST shift changes the UTC offset, not the window.
        if current_start.replace(tzinfo=None) != self.window_start.replace(tzinfo=None):
            self.window_start = current_start
            self.used = 0
            return True
        return False

    def allows(self, amount: int) -> bool:
        """True iff `used + amount` stays strictly below the effective limit."""
        return self.used + amount < self.effective_limit

    def add(self, amount: int) -> None:
        """Record consumption; may push `used` past the limit."""
        self.used += max(0, amount)
