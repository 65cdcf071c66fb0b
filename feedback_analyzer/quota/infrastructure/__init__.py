"""
Quota Infrastructure Layer
==========================

YAML-backed quota configuration provider.
"""

from feedback_analyzer.quota.infrastructure.repositories import YAMLQuotaConfigProvider

__all__ = ["YAMLQuotaConfigProvider"]
