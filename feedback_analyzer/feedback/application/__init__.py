"""
Feedback Application Layer
==========================

Application layer for feedback aggregation.

Contains:
- Gateway interfaces (IFeedbackRepository, ICacheGateway, IAIGateway)
- FeedbackAggregator: cache-or-compute orchestration
- AIEnrichmentAdapter: quota-gated AI enrichment with fallbacks
- DTOs: results and API request/response models
"""

from feedback_analyzer.feedback.application.services import (
    IFeedbackRepository,
    ICacheGateway,
    IAIGateway,
    AIResponse,
    FeedbackAggregator,
)
from feedback_analyzer.feedback.application.enrichment import (
    AIEnrichmentAdapter,
    FALLBACK_TRENDING_TOPICS,
    FALLBACK_RECOMMENDATIONS,
    estimate_tokens,
)
from feedback_analyzer.feedback.application.dto import (
    FeedbackRecordDTO,
    FeedbackIngestRequest,
    FeedbackSummary,
    FeedbackInsights,
    SentimentAnalysis,
    PriorityMatrix,
    UserJourneyInsights,
    NetworkVisualization,
    UpsertResult,
    IngestResponse,
    UsageResponse,
)

__all__ = [
    # Interfaces
    "IFeedbackRepository",
    "ICacheGateway",
    "IAIGateway",
    "AIResponse",
    # Services
    "FeedbackAggregator",
    "AIEnrichmentAdapter",
    "FALLBACK_TRENDING_TOPICS",
    "FALLBACK_RECOMMENDATIONS",
    "estimate_tokens",
    # DTOs
    "FeedbackRecordDTO",
    "FeedbackIngestRequest",
    "FeedbackSummary",
    "FeedbackInsights",
    "SentimentAnalysis",
    "PriorityMatrix",
    "UserJourneyInsights",
    "NetworkVisualization",
    "UpsertResult",
    "IngestResponse",
    "UsageResponse",
]
