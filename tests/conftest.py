"""
Pytest configuration for feedback analyzer tests.

Sets environment variables before any application import so settings
never point at a real database or AI provider.
"""

import os
import tempfile

_test_dir = tempfile.mkdtemp(prefix="feedback_analyzer_test_")
os.environ["ENVIRONMENT"] = "development"
os.environ["AI_PROVIDER"] = "none"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir}/test.db"
os.environ["QUOTA_CONFIG_PATH"] = os.path.join(_test_dir, "missing_quota_config.yaml")
os.environ["CLOUDFLARE_ACCOUNT_ID"] = ""
os.environ["CLOUDFLARE_API_TOKEN"] = ""
os.environ["OPENAI_API_KEY"] = ""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

import pytest

from feedback_analyzer.feedback.application import (
    AIEnrichmentAdapter,
    FeedbackAggregator,
    IFeedbackRepository,
    UpsertResult,
)
from feedback_analyzer.feedback.domain import FeedbackMetadata, FeedbackRecord
from feedback_analyzer.feedback.infrastructure import InMemoryCacheGateway
from feedback_analyzer.quota.application import QuotaTracker


class FakeClock:
    """Settable clock for deterministic window and expiry tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryFeedbackRepository(IFeedbackRepository):
    """Dict-backed feedback store keyed by record id."""

    def __init__(self, records: Optional[Sequence[FeedbackRecord]] = None):
        self.records: Dict[str, FeedbackRecord] = {r.id: r for r in records or []}

    async def upsert(self, records: Sequence[FeedbackRecord]) -> UpsertResult:
        for record in records:
            self.records[record.id] = record
        return UpsertResult(stored=len(records))

    async def query_all(self) -> List[FeedbackRecord]:
        return sorted(self.records.values(), key=lambda r: r.created_at, reverse=True)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 14, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def quota_tracker(clock):
    return QuotaTracker(clock=clock)


@pytest.fixture
def make_record():
    """Factory for feedback records with sensible defaults."""
    counter = {"n": 0}

    def _make(
        content: str = "",
        title: str = "Untitled",
        labels: Optional[List[str]] = None,
        source_type: str = "github",
        author: str = "tester",
        created_at: Optional[datetime] = None,
        record_id: Optional[str] = None,
        **metadata,
    ) -> FeedbackRecord:
        counter["n"] += 1
        raw_metadata = dict(metadata)
        if labels is not None:
            raw_metadata["labels"] = labels
        return FeedbackRecord(
            id=record_id or f"rec_{counter['n']:03d}",
            source_type=source_type,
            source_id=f"src-{counter['n']}",
            title=title,
            content=content,
            author=author,
            created_at=created_at or datetime(2024, 12, 1, tzinfo=timezone.utc) + timedelta(hours=counter["n"]),
            metadata=FeedbackMetadata.parse(raw_metadata),
        )

    return _make


@pytest.fixture
def repository():
    return InMemoryFeedbackRepository()


@pytest.fixture
def cache(clock):
    return InMemoryCacheGateway(clock=clock)


@pytest.fixture
def build_aggregator(repository, cache, quota_tracker, clock):
    """Aggregator over in-memory gateways; AI disabled unless a gateway is passed."""

    def _build(ai_gateway=None, seed_records=None, repo=None, cache_gateway=None):
        enrichment = AIEnrichmentAdapter(ai_gateway, quota_tracker, model_id="test-model", timeout_seconds=1)
        return FeedbackAggregator(
            repository=repo or repository,
            cache=cache_gateway or cache,
            enrichment=enrichment,
            quota_tracker=quota_tracker,
            seed_records=seed_records,
            clock=clock,
        )

    return _build
