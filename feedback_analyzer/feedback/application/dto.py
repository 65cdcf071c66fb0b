"""
Feedback Application DTOs
=========================

Data Transfer Objects for the aggregation results and the ingestion API.

Aggregation results are what the cache stores: they are serialized with
model_dump_json() and read back with model_validate_json().
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from feedback_analyzer.feedback.domain import FeedbackMetadata, FeedbackRecord


# ========== Type Aliases for Literals ==========
SourceTypeStr = Literal[
    "github", "slack", "jira", "email", "bug-report", "teams", "dashboard-form"
]
LayerStatusStr = Literal["healthy", "warning", "critical"]
OverallStatusStr = Literal["excellent", "good", "fair", "poor"]
SatisfactionStr = Literal["high", "medium", "low"]
SentimentStr = Literal["positive", "negative", "neutral"]


# ========== Request DTOs ==========

class FeedbackRecordDTO(BaseModel):
    """DTO for a single feedback record."""
    id: str = Field(..., min_length=1, description="Unique record ID (dedupe key)")
    source_type: SourceTypeStr = Field(..., description="Source channel")
    source_id: str = Field(..., description="ID within the source system")
    title: str = Field(..., description="Short title")
    content: str = Field(default="", description="Body text")
    author: str = Field(default="", description="Author handle or address")
    created_at: datetime = Field(..., description="Creation timestamp")
    metadata: Any = Field(default=None, description="Open map or JSON object string")

    def to_domain(self) -> FeedbackRecord:
        return FeedbackRecord(
            id=self.id,
            source_type=self.source_type,
            source_id=self.source_id,
            title=self.title,
            content=self.content,
            author=self.author,
            created_at=self.created_at,
            metadata=FeedbackMetadata.parse_lenient(self.metadata),
        )


class FeedbackIngestRequest(BaseModel):
    """Request model for feedback ingestion."""
    records: List[FeedbackRecordDTO] = Field(
        ...,
        description="Feedback records to upsert"
    )


# ========== Summary ==========

class FeedbackSummary(BaseModel):
    """Aggregate counts and labels over all feedback."""
    total_items: int = Field(..., ge=0)
    sources: List[str] = Field(default_factory=list, description="Source types, first-seen order")
    date_range: str = Field(..., description="'YYYY-MM-DD to YYYY-MM-DD' or 'No data'")
    top_categories: List[str] = Field(default_factory=list, description="Top 5 as 'label (count)'")
    average_sentiment: str = Field(default="Neutral")
    critical_issues: int = Field(default=0, ge=0)
    feature_requests: int = Field(default=0, ge=0)
    health_score: int = Field(default=100, ge=0, le=100)


# ========== Insights ==========

class SentimentAnalysis(BaseModel):
    """Sentiment breakdown of recent feedback."""
    overall: SentimentStr = Field(
        default="neutral",
        validation_alias=AliasChoices("overall", "overall_sentiment")
    )
    key_concerns: List[str] = Field(default_factory=list)
    positive_signals: List[str] = Field(default_factory=list)
    urgency_level: Literal["high", "medium", "low"] = "medium"

    @field_validator("overall", "urgency_level", mode="before")
    @classmethod
    def normalize_label(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("key_concerns", "positive_signals", mode="before")
    @classmethod
    def stringify_items(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [str(item) for item in v]
        return v


class PriorityCategoryDTO(BaseModel):
    """A topic category in the priority matrix."""
    name: str
    priority: str
    count: int = Field(..., ge=0)
    items: List[str] = Field(default_factory=list)
    latest_update: Optional[datetime] = None


class PriorityMatrix(BaseModel):
    """Topic categories grouped by priority bucket."""
    urgent: List[PriorityCategoryDTO] = Field(default_factory=list)
    high: List[PriorityCategoryDTO] = Field(default_factory=list)
    medium: List[PriorityCategoryDTO] = Field(default_factory=list)
    low: List[PriorityCategoryDTO] = Field(default_factory=list)


class JourneyStageDTO(BaseModel):
    stage: str
    feedback_count: int = Field(..., ge=0)
    satisfaction: SatisfactionStr


class FeatureAdoptionDTO(BaseModel):
    feature: str
    mentions: int = Field(..., ge=0)
    sentiment: SentimentStr


class UserJourneyInsights(BaseModel):
    journey_stages: List[JourneyStageDTO] = Field(default_factory=list)
    pain_points: List[str] = Field(default_factory=list)
    feature_adoption: List[FeatureAdoptionDTO] = Field(default_factory=list)


class FeedbackInsights(BaseModel):
    """Classified and enriched view of all feedback."""
    critical_issues: List[str] = Field(default_factory=list, max_length=8)
    trending_topics: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    priority_actions: List[str] = Field(default_factory=list)
    sentiment_analysis: SentimentAnalysis = Field(default_factory=SentimentAnalysis)
    priority_matrix: PriorityMatrix = Field(default_factory=PriorityMatrix)
    user_journey_insights: UserJourneyInsights = Field(default_factory=UserJourneyInsights)


# ========== Network Visualization ==========

class NetworkLayerDTO(BaseModel):
    name: str
    description: str
    issue_count: int = Field(..., ge=0)
    status: LayerStatusStr


class NetworkVisualization(BaseModel):
    """Layer health of the network-related feedback."""
    layer_status: List[NetworkLayerDTO] = Field(default_factory=list)
    critical_layers: List[str] = Field(default_factory=list)
    warning_layers: List[str] = Field(default_factory=list)
    issue_distribution: str = ""
    visualization: str = ""
    health_score: int = Field(default=100, ge=0, le=100)
    overall_status: OverallStatusStr = "excellent"
    last_updated: datetime


# ========== Ingestion / Usage ==========

class UpsertResult(BaseModel):
    """Outcome of a batch upsert."""
    stored: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    errors: List[str] = Field(default_factory=list)


class IngestResponse(BaseModel):
    """Response model for feedback ingestion."""
    stored: int
    failed: int
    errors: List[str] = Field(default_factory=list)
    invalidated_keys: List[str] = Field(default_factory=list)


class UsageResponse(BaseModel):
    """Quota usage per resource class."""
    usage: Dict[str, Dict[str, Any]]
    generated_at: datetime
