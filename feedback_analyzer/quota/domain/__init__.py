"""
Quota Domain Layer
==================

Contains:
- Entities: QuotaCounter
- Value Objects: QuotaLimitConfig, QuotaConfig
- Window helpers: daily_window_start, monthly_window_start
"""

from feedback_analyzer.quota.domain.entities import (
    QuotaCounter,
    daily_window_start,
    monthly_window_start,
    window_start_for,
)
from feedback_analyzer.quota.domain.value_objects import (
    QuotaLimitConfig,
    QuotaConfig,
    DEFAULT_QUOTA_LIMITS,
)

__all__ = [
    # Entities
    "QuotaCounter",
    "daily_window_start",
    "monthly_window_start",
    "window_start_for",
    # Value Objects
    "QuotaLimitConfig",
    "QuotaConfig",
    "DEFAULT_QUOTA_LIMITS",
]
