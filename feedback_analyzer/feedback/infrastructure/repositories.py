"""
Feedback Infrastructure Repositories
====================================

Concrete implementations of the data and cache gateway interfaces.

- SQLAlchemyFeedbackRepository: 'feedback' table
- SQLAlchemyCacheGateway: 'insights_cache' table
- InMemoryCacheGateway: process-local dict, for development and tests

Store and cache failures surface as UpstreamUnavailableException; the
aggregator decides how to degrade.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedback_analyzer.core import UpstreamUnavailableException
from feedback_analyzer.feedback.application import (
    IFeedbackRepository, ICacheGateway, UpsertResult
)
from feedback_analyzer.feedback.application.services import utc_now
from feedback_analyzer.feedback.domain import (
    CacheEntry, FeedbackMetadata, FeedbackRecord, ensure_utc
)
from feedback_analyzer.feedback.infrastructure.models import FeedbackModel, InsightsCacheModel
from feedback_analyzer.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)


class SQLAlchemyFeedbackRepository(IFeedbackRepository):
    """
    SQLAlchemy implementation of the feedback store.

    Each record is written in its own transaction so one bad record does
    not roll back the rest of the batch.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = utc_now
    ):
        self._session_maker = session_maker
        self._clock = clock

    def _to_model(self, record: FeedbackRecord, processed_at: datetime) -> FeedbackModel:
        return FeedbackModel(
            id=record.id,
            source_type=record.source_type,
            source_id=record.source_id,
            title=record.title,
            content=record.content,
            author=record.author,
            created_at=record.created_at.astimezone(timezone.utc),
            metadata_json=json.dumps(record.metadata.to_dict(), default=str),
            processed_at=processed_at,
        )

    @staticmethod
    def _to_domain(model: FeedbackModel) -> FeedbackRecord:
        return FeedbackRecord(
            id=model.id,
            source_type=model.source_type,
            source_id=model.source_id,
            title=model.title,
            content=model.content,
            author=model.author,
            created_at=ensure_utc(model.created_at),
            metadata=FeedbackMetadata.parse_lenient(model.metadata_json),
        )

    async def upsert(self, records: Sequence[FeedbackRecord]) -> UpsertResult:
        """Insert or replace each record by id, logging and counting failures."""
        result = UpsertResult()
        processed_at = self._clock()

        for record in records:
            try:
                async with self._session_maker() as session:
                    await session.merge(self._to_model(record, processed_at))
                    await session.commit()
                result.stored += 1
            except SQLAlchemyError as e:
                logger.error(
                    "Failed to store feedback record",
                    extra={"record_id": record.id, "error": str(e)}
                )
                result.failed += 1
                result.errors.append(f"{record.id}: {type(e).__name__}")

        return result

    async def query_all(self) -> List[FeedbackRecord]:
        """
        All records, newest first.

        Raises:
            UpstreamUnavailableException: If the store cannot be read
        """
        try:
            with log_latency(logger, "feedback_query_all"):
                async with self._session_maker() as session:
                    stmt = select(FeedbackModel).order_by(FeedbackModel.created_at.desc())
                    models = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise UpstreamUnavailableException("Data Gateway", f"Query failed: {e}")

        records = []
        for model in models:
            try:
                records.append(self._to_domain(model))
            except ValueError as e:
                logger.warning(
                    "Skipping invalid stored feedback row",
                    extra={"record_id": model.id, "error": str(e)}
                )
        return records


class SQLAlchemyCacheGateway(ICacheGateway):
    """
    Cache gateway backed by the insights_cache table.

    Expired rows are treated as absent and removed when read.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = utc_now
    ):
        self._session_maker = session_maker
        self._clock = clock

    async def get(self, key: str) -> Optional[bytes]:
        try:
            async with self._session_maker() as session:
                model = await session.get(InsightsCacheModel, key)
                if model is None:
                    return None

                entry = CacheEntry(
                    key=model.key,
                    payload=model.data,
                    created_at=ensure_utc(model.created_at),
                    expires_at=ensure_utc(model.expires_at),
                )
                if entry.is_expired(self._clock()):
                    await session.delete(model)
                    await session.commit()
                    return None
                return entry.payload
        except SQLAlchemyError as e:
            raise UpstreamUnavailableException("Cache Gateway", f"Get {key} failed: {e}")

    async def put(self, key: str, payload: bytes, ttl_seconds: int) -> None:
        now = self._clock()
        try:
            async with self._session_maker() as session:
                await session.merge(InsightsCacheModel(
                    key=key,
                    data=payload,
                    created_at=now.astimezone(timezone.utc),
                    expires_at=(now + timedelta(seconds=ttl_seconds)).astimezone(timezone.utc),
                ))
                await session.commit()
        except SQLAlchemyError as e:
            raise UpstreamUnavailableException("Cache Gateway", f"Put {key} failed: {e}")

    async def delete(self, key: str) -> None:
        try:
            async with self._session_maker() as session:
                await session.execute(delete(InsightsCacheModel).where(InsightsCacheModel.key == key))
                await session.commit()
        except SQLAlchemyError as e:
            raise UpstreamUnavailableException("Cache Gateway", f"Delete {key} failed: {e}")


class InMemoryCacheGateway(ICacheGateway):
    """Process-local cache with the same expiry rule as the table cache."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    async def get(self, key: str) -> Optional[bytes]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry.payload

    async def put(self, key: str, payload: bytes, ttl_seconds: int) -> None:
        now = self._clock()
        self._entries[key] = CacheEntry(
            key=key,
            payload=payload,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)
