"""
Feedback Infrastructure Layer
=============================

Infrastructure layer for the feedback module.

Contains:
- ORM models (feedback, insights_cache)
- SQLAlchemy data and cache gateways, in-memory cache gateway
- AI gateway adapter
"""

from feedback_analyzer.feedback.infrastructure.models import FeedbackModel, InsightsCacheModel
from feedback_analyzer.feedback.infrastructure.repositories import (
    SQLAlchemyFeedbackRepository,
    SQLAlchemyCacheGateway,
    InMemoryCacheGateway,
)
from feedback_analyzer.feedback.infrastructure.external import AIGatewayAdapter, build_ai_gateway

__all__ = [
    # Models
    "FeedbackModel",
    "InsightsCacheModel",
    # Repositories
    "SQLAlchemyFeedbackRepository",
    "SQLAlchemyCacheGateway",
    "InMemoryCacheGateway",
    # External
    "AIGatewayAdapter",
    "build_ai_gateway",
]
