"""
Quota Value Objects
===================

Quota limits, loaded from YAML and completed with the free-tier defaults.
"""

from typing import Dict

from pydantic import BaseModel, Field, field_validator

from feedback_analyzer.config import (
    ResourceClass, QuotaWindow,
    VALID_RESOURCE_CLASSES, VALID_QUOTA_WINDOWS
)


class QuotaLimitConfig(BaseModel):
    """Limit for a single resource class."""
    window: str = Field(default=QuotaWindow.DAILY, description="daily or monthly")
    hard_limit: int = Field(ge=0, description="Provider limit per window")
    reserved_margin: int = Field(default=0, ge=0, description="Budget kept in reserve")

    @field_validator("window")
    @classmethod
    def validate_window(cls, v: str) -> str:
        if v not in VALID_QUOTA_WINDOWS:
            raise ValueError(f"window must be one of {VALID_QUOTA_WINDOWS}")
        return v


DEFAULT_QUOTA_LIMITS: Dict[str, Dict] = {
    ResourceClass.AI_TOKENS: {
        "window": QuotaWindow.DAILY, "hard_limit": 100000, "reserved_margin": 10000
    },
    ResourceClass.STORE_READS: {
        "window": QuotaWindow.MONTHLY, "hard_limit": 500000, "reserved_margin": 50000
    },
    ResourceClass.STORE_WRITES: {
        "window": QuotaWindow.MONTHLY, "hard_limit": 100000, "reserved_margin": 10000
    },
    ResourceClass.CACHE_READS: {
        "window": QuotaWindow.DAILY, "hard_limit": 100000, "reserved_margin": 10000
    },
    ResourceClass.CACHE_WRITES: {
        "window": QuotaWindow.DAILY, "hard_limit": 1000, "reserved_margin": 100
    },
}


class QuotaConfig(BaseModel):
    """
    Quota configuration loaded from YAML.

    Effective budget = hard_limit - reserved_margin, per resource class.
    Classes missing from the file get the free-tier defaults.
    """
    limits: Dict[str, QuotaLimitConfig] = Field(
        default_factory=dict,
        validate_default=True,
        description="Limits by resource class"
    )

    @field_validator("limits")
    @classmethod
    def validate_limits(cls, v: Dict[str, QuotaLimitConfig]) -> Dict[str, QuotaLimitConfig]:
        """Reject unknown classes and fill in missing ones."""
        unknown = set(v) - set(VALID_RESOURCE_CLASSES)
        if unknown:
            raise ValueError(f"Unknown resource classes: {sorted(unknown)}")

        for resource_class in VALID_RESOURCE_CLASSES:
            if resource_class not in v:
                v[resource_class] = QuotaLimitConfig(**DEFAULT_QUOTA_LIMITS[resource_class])

        return v

    def get_limit(self, resource_class: str) -> QuotaLimitConfig:
        """
        Get the limit for a resource class.

        Raises:
            KeyError: If the class is not configured
        """
        return self.limits[resource_class]
