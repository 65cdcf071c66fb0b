"""
Feedback Application Services
=============================

Application services orchestrate business logic and coordinate between
domain services and gateways.

FeedbackAggregator is the only entry point callers use. Each read
operation follows the same cache-or-compute template:

    cache get -> hit: return it
              -> miss: load records (seed fallback) -> classify
                       -> optional AI enrichment -> cache put -> return

Read operations never raise for a gateway failure. Concurrent misses are
not coalesced; both compute and the last cache write wins.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Awaitable, Callable, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from feedback_analyzer.config import (
    CacheKeys, LayerStatus, ResourceClass, ALL_CACHE_KEYS, settings
)
from feedback_analyzer.core import UpstreamUnavailableException
from feedback_analyzer.feedback.application.dto import (
    FeedbackSummary,
    FeedbackInsights,
    NetworkVisualization,
    NetworkLayerDTO,
    PriorityMatrix,
    PriorityCategoryDTO,
    UserJourneyInsights,
    JourneyStageDTO,
    FeatureAdoptionDTO,
    UpsertResult,
)
from feedback_analyzer.feedback.domain import (
    FeedbackRecord,
    RuleBasedClassifier,
    LayerHealthScorer,
    is_network_related,
    overall_status,
    load_seed_records,
)
from feedback_analyzer.quota.application import QuotaTracker
from feedback_analyzer.shared.infrastructure.logging import get_logger, log_latency

if TYPE_CHECKING:
    from feedback_analyzer.feedback.application.enrichment import AIEnrichmentAdapter

logger = get_logger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)

TOP_CATEGORY_COUNT = 5


# ========== Gateway Interfaces (Dependency Inversion) ==========

class IFeedbackRepository(ABC):
    """Interface for the durable feedback store."""

    @abstractmethod
    async def upsert(self, records: Sequence[FeedbackRecord]) -> UpsertResult:
        """
        Insert or replace records by id.

        Per-record failures are logged and counted, not raised.
        """

    @abstractmethod
    async def query_all(self) -> List[FeedbackRecord]:
        """All records, newest first."""


class ICacheGateway(ABC):
    """Interface for a key/value cache with per-entry expiry."""

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """Payload for key, or None if absent or expired."""

    @abstractmethod
    async def put(self, key: str, payload: bytes, ttl_seconds: int) -> None:
        """Store payload under key for ttl_seconds."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key if present."""


@dataclass(frozen=True)
class AIResponse:
    """Text returned by the AI gateway."""
    response: str


class IAIGateway(ABC):
    """Interface for metered text generation."""

    @abstractmethod
    async def run(self, model_id: str, messages: List[dict], max_tokens: int) -> AIResponse:
        """Generate text. May raise on failure or timeout."""


# ========== Aggregator ==========

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FeedbackAggregator:
    """
    Cache-or-compute orchestration over the feedback store.

    Gateway usage is recorded on the quota tracker: store-reads and
    store-writes per row, cache-reads and cache-writes per call.
    """

    def __init__(
        self,
        repository: IFeedbackRepository,
        cache: ICacheGateway,
        enrichment: "AIEnrichmentAdapter",
        quota_tracker: QuotaTracker,
        seed_records: Optional[Sequence[FeedbackRecord]] = None,
        summary_ttl: Optional[int] = None,
        insights_ttl: Optional[int] = None,
        visualization_ttl: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self._repository = repository
        self._cache = cache
        self._enrichment = enrichment
        self._quota = quota_tracker
        # None means the built-in dataset; an empty sequence disables the fallback
        self._seed_records = list(load_seed_records() if seed_records is None else seed_records)
        self._summary_ttl = summary_ttl or settings.summary_cache_ttl
        self._insights_ttl = insights_ttl or settings.insights_cache_ttl
        self._visualization_ttl = visualization_ttl or settings.visualization_cache_ttl
        self._clock = clock
        self._classifier = RuleBasedClassifier()
        self._scorer = LayerHealthScorer()

    # ========== Public operations ==========

    async def get_summary(self) -> FeedbackSummary:
        """Summary view, cached for the summary TTL."""
        return await self._cached(
            CacheKeys.SUMMARY, FeedbackSummary, self._summary_ttl, self._compute_summary
        )

    async def get_insights(self) -> FeedbackInsights:
        """Insights view, cached for the insights TTL."""
        return await self._cached(
            CacheKeys.INSIGHTS, FeedbackInsights, self._insights_ttl, self._compute_insights
        )

    async def generate_visualization(self) -> NetworkVisualization:
        """Network layer view, cached for the visualization TTL."""
        return await self._cached(
            CacheKeys.VISUALIZATION, NetworkVisualization, self._visualization_ttl,
            self._compute_visualization
        )

    async def upsert_batch(self, records: Sequence[FeedbackRecord]) -> UpsertResult:
        """
        Store records, then invalidate every cached aggregate.

        Raises:
            UpstreamUnavailableException: If the store failed as a whole
                and nothing was stored
        """
        if not records:
            return UpsertResult()

        try:
            with log_latency(logger, "feedback_upsert", records=len(records)):
                result = await self._repository.upsert(records)
        except UpstreamUnavailableException:
            raise
        except Exception as e:
            raise UpstreamUnavailableException("Data Gateway", f"Upsert failed: {e}")

        if result.stored:
            self._quota.consume(ResourceClass.STORE_WRITES, result.stored)

        if result.stored == 0 and result.failed > 0:
            raise UpstreamUnavailableException(
                "Data Gateway",
                "No records stored",
                details={"failed": result.failed, "errors": result.errors}
            )

        await self._invalidate()
        return result

    # ========== Cache-or-compute template ==========

    async def _cached(
        self,
        key: str,
        model_cls: Type[ResultT],
        ttl_seconds: int,
        compute: Callable[[List[FeedbackRecord]], Awaitable[ResultT]]
    ) -> ResultT:
        cached = await self._cache_get(key, model_cls)
        if cached is not None:
            return cached

        records = await self._load_records()
        with log_latency(logger, "aggregate_compute", cache_key=key, total_items=len(records)):
            result = await compute(records)

        await self._cache_put(key, result, ttl_seconds)
        return result

    async def _cache_get(self, key: str, model_cls: Type[ResultT]) -> Optional[ResultT]:
        try:
            payload = await self._cache.get(key)
        except Exception as e:
            logger.warning("Cache read failed, computing", extra={"cache_key": key, "error": str(e)})
            return None
        finally:
            self._quota.consume(ResourceClass.CACHE_READS, 1)

        if payload is None:
            return None

        try:
            return model_cls.model_validate_json(payload)
        except ValidationError as e:
            logger.warning(
                "Corrupt cache payload treated as miss",
                extra={"cache_key": key, "error": str(e)}
            )
            return None

    async def _cache_put(self, key: str, result: BaseModel, ttl_seconds: int) -> None:
        try:
            await self._cache.put(key, result.model_dump_json().encode("utf-8"), ttl_seconds)
            self._quota.consume(ResourceClass.CACHE_WRITES, 1)
        except Exception as e:
            logger.warning("Cache write failed", extra={"cache_key": key, "error": str(e)})

    async def _invalidate(self) -> None:
        for key in ALL_CACHE_KEYS:
            try:
                await self._cache.delete(key)
            except Exception as e:
                logger.warning("Cache invalidation failed", extra={"cache_key": key, "error": str(e)})

    async def _load_records(self) -> List[FeedbackRecord]:
        """All stored records, or the seed dataset if the store is empty or down."""
        records: List[FeedbackRecord] = []
        try:
            records = await self._repository.query_all()
            self._quota.consume(ResourceClass.STORE_READS, len(records))
        except Exception as e:
            logger.warning("Feedback store unavailable", extra={"error": str(e)})

        if records or not self._seed_records:
            return records

        logger.info("Using seed dataset", extra={"total_items": len(self._seed_records)})
        try:
            result = await self._repository.upsert(self._seed_records)
            if result.stored:
                self._quota.consume(ResourceClass.STORE_WRITES, result.stored)
        except Exception as e:
            logger.info("Seed write-back skipped", extra={"error": str(e)})

        return list(self._seed_records)

    # ========== Computations ==========

    async def _compute_summary(self, records: List[FeedbackRecord]) -> FeedbackSummary:
        sources = list(dict.fromkeys(r.source_type for r in records))

        dates = sorted(r.created_at.astimezone(timezone.utc).date() for r in records)
        date_range = f"{dates[0].isoformat()} to {dates[-1].isoformat()}" if dates else "No data"

        categories = self._classifier.categorize(records)[:TOP_CATEGORY_COUNT]

        return FeedbackSummary(
            total_items=len(records),
            sources=sources,
            date_range=date_range,
            top_categories=[f"{name} ({count})" for name, count in categories],
            average_sentiment=await self._enrichment.summary_sentiment(records),
            critical_issues=self._classifier.count_critical_issues(records),
            feature_requests=self._classifier.count_feature_requests(records),
            health_score=self._scorer.score(records),
        )

    async def _compute_insights(self, records: List[FeedbackRecord]) -> FeedbackInsights:
        matrix = self._classifier.build_priority_matrix(records)
        sentiment = await self._enrichment.sentiment_analysis(records)

        return FeedbackInsights(
            critical_issues=self._classifier.extract_critical_issues(records),
            trending_topics=await self._enrichment.trending_topics(records),
            recommendations=await self._enrichment.recommendations(records, sentiment),
            priority_actions=self._classifier.generate_priority_actions(records, matrix),
            sentiment_analysis=sentiment,
            priority_matrix=PriorityMatrix(**{
                bucket: [
                    PriorityCategoryDTO(
                        name=c.name,
                        priority=c.priority,
                        count=c.count,
                        items=c.items,
                        latest_update=c.latest_update
                    )
                    for c in categories
                ]
                for bucket, categories in matrix.items()
            }),
            user_journey_insights=UserJourneyInsights(
                journey_stages=[
                    JourneyStageDTO(stage=s.stage, feedback_count=s.feedback_count, satisfaction=s.satisfaction)
                    for s in self._classifier.bucket_journeys(records)
                ],
                pain_points=self._classifier.identify_pain_points(records),
                feature_adoption=[
                    FeatureAdoptionDTO(feature=f.feature, mentions=f.mentions, sentiment=f.sentiment)
                    for f in self._classifier.analyze_feature_adoption(records)
                ],
            ),
        )

    async def _compute_visualization(self, records: List[FeedbackRecord]) -> NetworkVisualization:
        layers = self._scorer.analyze([r for r in records if is_network_related(r)])
        score = self._scorer.health_score(layers)
        now = self._clock()

        critical = [
            f"{layer.name}: {layer.issue_count} issues"
            for layer in layers if layer.status == LayerStatus.CRITICAL
        ]
        warning = [
            f"{layer.name}: {layer.issue_count} issues"
            for layer in layers if layer.status == LayerStatus.WARNING
        ]

        return NetworkVisualization(
            layer_status=[
                NetworkLayerDTO(
                    name=layer.name,
                    description=layer.description,
                    issue_count=layer.issue_count,
                    status=layer.status
                )
                for layer in layers
            ],
            critical_layers=critical or ["No critical issues detected"],
            warning_layers=warning or ["No warnings detected"],
            issue_distribution=", ".join(f"{layer.name}: {layer.issue_count}" for layer in layers),
            visualization=self._scorer.render(layers, now.isoformat()),
            health_score=score,
            overall_status=overall_status(score),
            last_updated=now,
        )
