"""
Feedback Controllers (API Routes)
=================================

FastAPI routes for the feedback aggregation endpoints.

Controllers are thin - they delegate to the FeedbackAggregator and the
QuotaTracker held on app.state.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, status

from feedback_analyzer.config import ALL_CACHE_KEYS
from feedback_analyzer.core import UpstreamUnavailableException
from feedback_analyzer.feedback.application import (
    FeedbackAggregator,
    FeedbackIngestRequest,
    FeedbackSummary,
    FeedbackInsights,
    NetworkVisualization,
    IngestResponse,
    UsageResponse,
)
from feedback_analyzer.quota.application import QuotaTracker
from feedback_analyzer.shared.infrastructure.logging import get_context_logger

router = APIRouter(prefix="/api", tags=["Feedback"])


# ========== Example payloads for Swagger ==========

FEEDBACK_RECORD_EXAMPLE = {
    "id": "github_005",
    "source_type": "github",
    "source_id": "issues/459",
    "title": "Security vulnerability: SQL injection in device search API",
    "content": "Critical SQL injection vulnerability in /api/devices/search endpoint.",
    "author": "security-researcher",
    "created_at": "2024-11-29T08:00:00Z",
    "metadata": {"labels": ["security", "vulnerability", "critical"]}
}

SUMMARY_RESPONSE_EXAMPLE = {
    "total_items": 16,
    "sources": ["github", "slack", "jira", "email", "bug-report", "teams", "dashboard-form"],
    "date_range": "2024-11-25 to 2024-12-06",
    "top_categories": ["network (8)", "performance (5)", "enhancement (4)", "features (4)", "security (3)"],
    "average_sentiment": "Negative",
    "critical_issues": 4,
    "feature_requests": 1,
    "health_score": 0
}


# ========== Dependencies ==========

def get_aggregator(request: Request) -> FeedbackAggregator:
    """Get the aggregator built at startup."""
    return request.app.state.aggregator


def get_quota_tracker(request: Request) -> QuotaTracker:
    """Get the process-wide quota tracker."""
    return request.app.state.quota_tracker


# ========== Route Handlers ==========

@router.get(
    "/feedback/summary",
    response_model=FeedbackSummary,
    summary="Feedback summary",
    description="""
    Counts, sources, date range, top categories and sentiment over all
    feedback. Cached for 5 minutes; falls back to the seed dataset when the
    store is empty or unavailable.
    """,
    responses={200: {"content": {"application/json": {"example": SUMMARY_RESPONSE_EXAMPLE}}}}
)
async def get_feedback_summary(
    aggregator: FeedbackAggregator = Depends(get_aggregator)
):
    return await aggregator.get_summary()


@router.get(
    "/feedback/insights",
    response_model=FeedbackInsights,
    summary="Feedback insights",
    description="""
    Critical issues, trending topics, recommendations, priority actions,
    sentiment, priority matrix and user journey analysis. Cached for
    10 minutes. AI-derived fields use fixed fallbacks when the token quota
    is exhausted or the AI gateway fails.
    """
)
async def get_feedback_insights(
    aggregator: FeedbackAggregator = Depends(get_aggregator)
):
    return await aggregator.get_insights()


@router.get(
    "/network/visualization",
    response_model=NetworkVisualization,
    summary="Network stack health",
    description="Per-layer issue counts and health score for network-related feedback. Cached for 10 minutes."
)
async def get_network_visualization(
    aggregator: FeedbackAggregator = Depends(get_aggregator)
):
    return await aggregator.generate_visualization()


@router.post(
    "/feedback",
    response_model=IngestResponse,
    summary="Ingest feedback records",
    description="""
    Upsert a batch of feedback records by `id` and invalidate every cached
    aggregate. A record with an existing `id` replaces the stored one.

    Returns 503 if the feedback store stored nothing.
    """,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {"stored": 1, "failed": 0, "errors": [], "invalidated_keys": ALL_CACHE_KEYS}
                }
            }
        },
        503: {"description": "Feedback store unavailable"}
    }
)
async def ingest_feedback(
    body: FeedbackIngestRequest,
    request: Request,
    aggregator: FeedbackAggregator = Depends(get_aggregator)
):
    logger = get_context_logger(__name__, getattr(request.state, "correlation_id", None))
    records = [dto.to_domain() for dto in body.records]

    try:
        result = await aggregator.upsert_batch(records)
    except UpstreamUnavailableException as e:
        logger.error("Feedback ingestion failed", extra={"error": e.message, "records": len(records)})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message
        )

    logger.info(
        "Feedback ingestion complete",
        extra={"records_stored": result.stored, "records_failed": result.failed}
    )
    return IngestResponse(
        stored=result.stored,
        failed=result.failed,
        errors=result.errors,
        invalidated_keys=ALL_CACHE_KEYS if result.stored else []
    )


@router.get(
    "/usage",
    response_model=UsageResponse,
    summary="Quota usage",
    description="Used, limit, reserved and remaining budget per metered resource class."
)
async def get_usage(
    quota_tracker: QuotaTracker = Depends(get_quota_tracker)
):
    return UsageResponse(
        usage=quota_tracker.usage_stats(),
        generated_at=datetime.now(timezone.utc)
    )


feedback_router = router
