"""
Feedback Infrastructure Models
==============================

SQLAlchemy ORM models for the feedback module.

Tables:
- feedback: one row per record, metadata kept as a JSON string
- insights_cache: serialized aggregates with an absolute expiry
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, Text, LargeBinary, Index
from sqlalchemy.orm import Mapped, mapped_column

from feedback_analyzer.infrastructure.database import Base


class FeedbackModel(Base):
    """
    Database model for FeedbackRecord.

    Maps to the 'feedback' table.
    """
    __tablename__ = "feedback"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    source_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    source_id: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # "metadata" is reserved on declarative classes
    metadata_json: Mapped[Optional[str]] = mapped_column("metadata", Text, nullable=True)

    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        Index("idx_feedback_created_at", "created_at"),
        Index("idx_feedback_processed_at", "processed_at"),
    )


class InsightsCacheModel(Base):
    """
    Database model for CacheEntry.

    Maps to the 'insights_cache' table.
    """
    __tablename__ = "insights_cache"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
