"""
Quota Application Layer
=======================

QuotaTracker and the configuration provider interface.
"""

from feedback_analyzer.quota.application.services import (
    QuotaTracker,
    IQuotaConfigProvider,
    local_now,
)

__all__ = [
    "QuotaTracker",
    "IQuotaConfigProvider",
    "local_now",
]
