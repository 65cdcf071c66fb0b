"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="feedback-analyzer", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/feedback",
        description="Feedback store connection URL (async driver)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== Cache ==========
    cache_backend: str = Field(
        default="database",
        description="Cache gateway backend: 'database' (insights_cache table) or 'memory'"
    )
    summary_cache_ttl: int = Field(default=300, description="Summary TTL in seconds", ge=1)
    insights_cache_ttl: int = Field(default=600, description="Insights TTL in seconds", ge=1)
    visualization_cache_ttl: int = Field(
        default=600,
        description="Network visualization TTL in seconds",
        ge=1
    )

    # ========== Quota ==========
    quota_config_path: Path = Field(
        default=Path("quota_config.yaml"),
        description="Path to quota limits YAML file"
    )

    # ========== AI Gateway ==========
    ai_provider: str = Field(
        default="workers-ai",
        description="AI gateway provider: workers-ai, openai, mock or none"
    )
    ai_model: str = Field(
        default="@cf/meta/llama-3.1-8b-instruct",
        description="Text-generation model used for every enrichment"
    )
    ai_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for a single AI gateway call",
        ge=0.1,
        le=120
    )
    cloudflare_account_id: Optional[str] = Field(
        default=None,
        description="Cloudflare account ID for Workers AI"
    )
    cloudflare_api_token: Optional[str] = Field(
        default=None,
        description="Cloudflare API token with Workers AI access"
    )
    cloudflare_api_base: str = Field(
        default="https://api.cloudflare.com/client/v4",
        description="Cloudflare REST API base URL"
    )
    openai_api_key: Optional[str] = Field(
        default=None,
        description="API key for an OpenAI-compatible endpoint"
    )
    openai_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for an OpenAI-compatible endpoint (None = api.openai.com)"
    )

    # ========== Aggregation ==========
    seed_fallback_enabled: bool = Field(
        default=True,
        description="Serve the built-in seed dataset when the store is empty or unavailable"
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("cache_backend")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        allowed = {"database", "memory"}
        if v not in allowed:
            raise ValueError(f"cache_backend must be one of {allowed}")
        return v

    @field_validator("ai_provider")
    @classmethod
    def validate_ai_provider(cls, v: str) -> str:
        allowed = {"workers-ai", "openai", "mock", "none"}
        if v not in allowed:
            raise ValueError(f"ai_provider must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class SourceType:
    """Feedback source channels."""
    GITHUB = "github"
    SLACK = "slack"
    JIRA = "jira"
    EMAIL = "email"
    BUG_REPORT = "bug-report"
    TEAMS = "teams"
    DASHBOARD_FORM = "dashboard-form"


class LayerStatus:
    """Network layer health statuses."""
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class PriorityBucket:
    """Priority matrix buckets."""
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ResourceClass:
    """Metered resource classes tracked by the quota tracker."""
    AI_TOKENS = "ai-tokens"
    STORE_READS = "store-reads"
    STORE_WRITES = "store-writes"
    CACHE_READS = "cache-reads"
    CACHE_WRITES = "cache-writes"


class QuotaWindow:
    """Quota window lengths."""
    DAILY = "daily"
    MONTHLY = "monthly"


class CacheKeys:
    """Versioned cache keys; bump the suffix to invalidate after a schema change."""
    SUMMARY = "feedback:summary:v2"
    INSIGHTS = "feedback:insights:v3"
    VISUALIZATION = "network:visualization:v3"


# ========== Lists for validation ==========

VALID_SOURCE_TYPES = [
    SourceType.GITHUB, SourceType.SLACK, SourceType.JIRA,
    SourceType.EMAIL, SourceType.BUG_REPORT, SourceType.TEAMS,
    SourceType.DASHBOARD_FORM
]
VALID_LAYER_STATUSES = [LayerStatus.HEALTHY, LayerStatus.WARNING, LayerStatus.CRITICAL]
VALID_PRIORITY_BUCKETS = [
    PriorityBucket.URGENT, PriorityBucket.HIGH,
    PriorityBucket.MEDIUM, PriorityBucket.LOW
]
VALID_RESOURCE_CLASSES = [
    ResourceClass.AI_TOKENS, ResourceClass.STORE_READS,
    ResourceClass.STORE_WRITES, ResourceClass.CACHE_READS,
    ResourceClass.CACHE_WRITES
]
VALID_QUOTA_WINDOWS = [QuotaWindow.DAILY, QuotaWindow.MONTHLY]
ALL_CACHE_KEYS = [CacheKeys.SUMMARY, CacheKeys.INSIGHTS, CacheKeys.VISUALIZATION]
