"""
Feedback Domain Entities
========================

Pure Python domain entities for feedback aggregation.

These entities contain the business objects the classifier and the
layer health scorer work on, free of infrastructure concerns.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from feedback_analyzer.config import LayerStatus, VALID_SOURCE_TYPES
from feedback_analyzer.core import MalformedMetadataException
from feedback_analyzer.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FeedbackMetadata:
    """
    Source metadata attached to a feedback record.

    The common subset is typed; anything source-specific (comment counts,
    channels, assignees) lands in `extra`.
    """
    labels: Tuple[str, ...] = ()
    priority: Optional[str] = None
    state: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def has_label(self, label: str) -> bool:
        return label in self.labels

    def to_dict(self) -> Dict[str, Any]:
        """Flatten back to the open map stored alongside the record."""
        data = dict(self.extra)
        if self.labels:
            data["labels"] = list(self.labels)
        if self.priority is not None:
            data["priority"] = self.priority
        if self.state is not None:
            data["state"] = self.state
        return data

    @classmethod
    def parse(cls, raw: Any) -> "FeedbackMetadata":
        """
        Strict parser.

        Accepts a mapping, a JSON object string, or None.

        Raises:
            MalformedMetadataException: If raw is not (and does not decode
                to) a mapping
        """
        if raw is None or raw == "":
            return cls()

        data = raw
        if isinstance(raw, (str, bytes)):
            try:
                data = json.loads(raw)
            except (ValueError, TypeError):
                raise MalformedMetadataException(raw)

        if not isinstance(data, Mapping):
            raise MalformedMetadataException(raw)

        extra = {k: v for k, v in data.items() if k not in ("labels", "priority", "state")}

        labels: Tuple[str, ...] = ()
        raw_labels = data.get("labels")
        if isinstance(raw_labels, (list, tuple)):
            # de-duplicate, keep first-seen order
            labels = tuple(dict.fromkeys(str(label) for label in raw_labels))

        priority = data.get("priority")
        state = data.get("state")
        return cls(
            labels=labels,
            priority=str(priority) if priority is not None else None,
            state=str(state) if state is not None else None,
            extra=extra
        )

    @classmethod
    def parse_lenient(cls, raw: Any) -> "FeedbackMetadata":
        """Tolerant parser: malformed input becomes empty metadata."""
        try:
            return cls.parse(raw)
        except MalformedMetadataException as e:
            logger.warning(
                "Malformed feedback metadata treated as empty",
                extra={"error": e.message}
            )
            return cls()


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class FeedbackRecord:
    """
    One unit of ingested feedback.

    Immutable; an upsert with the same id replaces it wholesale.
    """
    id: str
    source_type: str
    source_id: str
    title: str
    content: str
    author: str
    created_at: datetime
    metadata: FeedbackMetadata = field(default_factory=FeedbackMetadata)

    def __post_init__(self):
        """Validate record on initialization."""
        if not self.id:
            raise ValueError("id is required")
        if self.source_type not in VALID_SOURCE_TYPES:
            raise ValueError(f"source_type must be one of {VALID_SOURCE_TYPES}")
        object.__setattr__(self, "created_at", ensure_utc(self.created_at))

    @property
    def labels(self) -> Tuple[str, ...]:
        return self.metadata.labels

    @property
    def content_lower(self) -> str:
        return self.content.lower()

    @property
    def text_lower(self) -> str:
        """Content and title, lowercased, used by severity rules."""
        return (self.content + self.title).lower()


@dataclass
class CacheEntry:
    """
    A cached payload with an absolute expiry.

    An entry is expired at and after `expires_at`; expired entries are
    absent, never stale.
    """
    key: str
    payload: bytes
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass
class NetworkLayer:
    """One of the seven fixed network stack layers."""
    name: str
    description: str
    issue_count: int = 0

    @property
    def status(self) -> str:
        """Status is derived from issue_count only."""
        if self.issue_count >= 5:
            return LayerStatus.CRITICAL
        if self.issue_count >= 2:
            return LayerStatus.WARNING
        return LayerStatus.HEALTHY


@dataclass
class PriorityCategory:
    """A topic category in the priority matrix."""
    name: str
    priority: str
    count: int = 0
    items: List[str] = field(default_factory=list)
    latest_update: Optional[datetime] = None

    def add(self, record: FeedbackRecord) -> None:
        self.count += 1
        self.items.append(record.title)
        if self.latest_update is None or record.created_at > self.latest_update:
            self.latest_update = record.created_at


@dataclass(frozen=True)
class JourneyStage:
    """Feedback volume and satisfaction for one user-journey stage."""
    stage: str
    feedback_count: int
    satisfaction: str


@dataclass(frozen=True)
class FeatureAdoption:
    """Mention count and sentiment for a product feature."""
    feature: str
    mentions: int
    sentiment: str
