"""
Feedback Domain Layer
=====================

Domain layer for feedback aggregation.

Contains:
- Entities: FeedbackRecord, FeedbackMetadata, CacheEntry, NetworkLayer,
  PriorityCategory, JourneyStage, FeatureAdoption
- Domain Services: RuleBasedClassifier, LayerHealthScorer
- Seed dataset

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from feedback_analyzer.feedback.domain.entities import (
    FeedbackMetadata,
    FeedbackRecord,
    CacheEntry,
    NetworkLayer,
    PriorityCategory,
    JourneyStage,
    FeatureAdoption,
    ensure_utc,
)
from feedback_analyzer.feedback.domain.classifier import RuleBasedClassifier
from feedback_analyzer.feedback.domain.layer_health import (
    LayerHealthScorer,
    is_network_related,
    overall_status,
)
from feedback_analyzer.feedback.domain.seed import load_seed_records

__all__ = [
    # Entities
    "FeedbackMetadata",
    "FeedbackRecord",
    "CacheEntry",
    "NetworkLayer",
    "PriorityCategory",
    "JourneyStage",
    "FeatureAdoption",
    "ensure_utc",
    # Domain Services
    "RuleBasedClassifier",
    "LayerHealthScorer",
    "is_network_related",
    "overall_status",
    # Seed
    "load_seed_records",
]
