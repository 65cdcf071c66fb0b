"""
AI Enrichment Adapter
=====================

Quota-gated wrapper around the AI gateway.

Each enrichment builds its prompt from a bounded slice of records,
estimates ceil(chars / 4) tokens and asks the quota tracker first. Denied
requests, gateway errors, timeouts and unparseable output all return the
fixed fallback for that enrichment. Nothing here raises.

Token usage is recorded with the estimate after a successful call; the
provider's actual usage is not read back.
"""

import asyncio
import math
from typing import List, Optional, Sequence

from pydantic import ValidationError

from feedback_analyzer.config import ResourceClass, settings
from feedback_analyzer.core import QuotaExceededException
from feedback_analyzer.feedback.application.dto import SentimentAnalysis
from feedback_analyzer.feedback.application.services import IAIGateway
from feedback_analyzer.feedback.domain import FeedbackRecord
from feedback_analyzer.quota.application import QuotaTracker
from feedback_analyzer.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

# sample size, character cap
SENTIMENT_SAMPLE = (5, 1000)
SENTIMENT_ANALYSIS_SAMPLE = (12, 1000)
TRENDING_SAMPLE = (15, 1200)
RECOMMENDATIONS_SAMPLE = (10, 800)

FALLBACK_SENTIMENT = "Neutral"

FALLBACK_TRENDING_TOPICS = [
    "Performance & Scalability Issues",
    "Security Vulnerabilities",
    "Multi-Platform Compatibility",
    "Integration Capabilities",
    "User Experience Improvements",
]

FALLBACK_RECOMMENDATIONS = [
    "Address critical security vulnerabilities immediately",
    "Implement performance optimizations for large-scale deployments",
    "Add comprehensive multi-platform support (ARM64, IPv6)",
    "Enhance user experience with improved dashboard usability",
    "Develop native integrations with popular monitoring platforms",
]

SENTIMENT_SYSTEM_PROMPT = (
    "Analyze the sentiment of these feedback titles. "
    "Return only: positive, negative, or neutral."
)
SENTIMENT_ANALYSIS_SYSTEM_PROMPT = (
    "Analyze sentiment trends in network infrastructure feedback. "
    "Return JSON with: overall (positive/negative/neutral), key_concerns (array), "
    "positive_signals (array), urgency_level (high/medium/low)."
)
TRENDING_SYSTEM_PROMPT = (
    "Extract 5 key trending topics from network infrastructure feedback. "
    "Focus on themes, patterns, and emerging issues. Return as concise bullet points."
)
RECOMMENDATIONS_SYSTEM_PROMPT = (
    "Generate 5 strategic recommendations for network infrastructure improvements "
    "based on user feedback, sentiment, and priority analysis. Focus on actionable, "
    "high-impact changes. Return as concise bullet points."
)

BULLET_MARKERS = ("•", "-")


def estimate_tokens(text: str) -> int:
    """Conservative token estimate: one token per four characters."""
    return math.ceil(len(text) / 4)


def truncate(text: str, max_length: int) -> str:
    return text[:max_length] + "..." if len(text) > max_length else text


def parse_bullets(response: str, limit: int = 5) -> List[str]:
    """Lines starting with a bullet marker, marker stripped."""
    bullets = []
    for line in response.splitlines():
        stripped = line.strip()
        if stripped.startswith(BULLET_MARKERS):
            text = stripped.lstrip("•-").strip()
            if text:
                bullets.append(text)
    return bullets[:limit]


def extract_json_object(response: str) -> Optional[str]:
    """The outermost {...} span of a response, if any."""
    start = response.find("{")
    end = response.rfind("}")
    if start == -1 or end <= start:
        return None
    return response[start:end + 1]


class AIEnrichmentAdapter:
    """
    Optional AI enrichment with deterministic fallbacks.

    With no gateway configured every method returns its fallback.
    """

    def __init__(
        self,
        ai_gateway: Optional[IAIGateway],
        quota_tracker: QuotaTracker,
        model_id: Optional[str] = None,
        timeout_seconds: Optional[float] = None
    ):
        self._gateway = ai_gateway
        self._quota = quota_tracker
        self._model_id = model_id or settings.ai_model
        self._timeout = timeout_seconds or settings.ai_timeout_seconds

    async def _generate(
        self,
        operation: str,
        system_prompt: str,
        user_prompt: str,
        prompt_content: str,
        max_tokens: int
    ) -> Optional[str]:
        """
        Run one gated AI call.

        Returns:
            Response text, or None when the caller should fall back
        """
        if self._gateway is None:
            return None

        estimated_tokens = estimate_tokens(prompt_content)
        try:
            self._quota.require(ResourceClass.AI_TOKENS, estimated_tokens)
        except QuotaExceededException as e:
            logger.info(
                "AI request skipped, token quota exhausted",
                extra={"operation": operation, "error": e.message}
            )
            return None

        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        try:
            response = await asyncio.wait_for(
                self._gateway.run(self._model_id, messages, max_tokens),
                timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "AI request timed out, using fallback",
                extra={"operation": operation, "timeout_seconds": self._timeout}
            )
            return None
        except Exception as e:
            logger.warning(
                "AI request failed, using fallback",
                extra={"operation": operation, "error": str(e)}
            )
            return None

        self._quota.consume(ResourceClass.AI_TOKENS, estimated_tokens)
        return response.response or ""

    async def summary_sentiment(self, records: Sequence[FeedbackRecord]) -> str:
        """Positive / Negative / Neutral from the titles of the first records."""
        if not records:
            return FALLBACK_SENTIMENT

        size, cap = SENTIMENT_SAMPLE
        titles = truncate(". ".join(r.title for r in records[:size]), cap)
        response = await self._generate(
            "summary_sentiment",
            SENTIMENT_SYSTEM_PROMPT,
            f"Analyze sentiment: {titles}",
            titles,
            max_tokens=10
        )
        if response is None:
            return FALLBACK_SENTIMENT

        lowered = response.lower()
        if "positive" in lowered:
            return "Positive"
        if "negative" in lowered:
            return "Negative"
        return FALLBACK_SENTIMENT

    async def sentiment_analysis(self, records: Sequence[FeedbackRecord]) -> SentimentAnalysis:
        """Structured sentiment breakdown, parsed from a JSON response."""
        if not records:
            return SentimentAnalysis()

        size, cap = SENTIMENT_ANALYSIS_SAMPLE
        sample = truncate("; ".join(f"{r.source_type}: {r.title}" for r in records[:size]), cap)
        response = await self._generate(
            "sentiment_analysis",
            SENTIMENT_ANALYSIS_SYSTEM_PROMPT,
            f"Analyze sentiment in: {sample}",
            sample,
            max_tokens=150
        )
        if response is None:
            return SentimentAnalysis()

        payload = extract_json_object(response)
        if payload is None:
            logger.info("Sentiment analysis response had no JSON object, using fallback")
            return SentimentAnalysis()

        try:
            return SentimentAnalysis.model_validate_json(payload)
        except ValidationError as e:
            logger.info("Malformed sentiment analysis response, using fallback", extra={"error": str(e)})
            return SentimentAnalysis()

    async def trending_topics(self, records: Sequence[FeedbackRecord]) -> List[str]:
        """Up to 5 topics from the most recent records."""
        if not records:
            return list(FALLBACK_TRENDING_TOPICS)

        size, cap = TRENDING_SAMPLE
        content = truncate(
            " | ".join(f"{r.source_type}: {r.title} - {r.content[:100]}" for r in records[:size]),
            cap
        )
        response = await self._generate(
            "trending_topics",
            TRENDING_SYSTEM_PROMPT,
            f"Extract trending topics from this feedback data: {content}",
            content,
            max_tokens=100
        )
        topics = parse_bullets(response or "")
        return topics or list(FALLBACK_TRENDING_TOPICS)

    async def recommendations(
        self,
        records: Sequence[FeedbackRecord],
        sentiment: SentimentAnalysis
    ) -> List[str]:
        """At least 3 recommendations, or the fixed list."""
        if not records:
            return list(FALLBACK_RECOMMENDATIONS)

        size, cap = RECOMMENDATIONS_SAMPLE
        feedback_summary = "; ".join(
            f"{r.source_type}: {r.title} ({r.metadata.priority or 'medium'})" for r in records[:size]
        )
        combined = truncate(
            f"Sentiment: {sentiment.overall}, Urgency: {sentiment.urgency_level}. "
            f"Feedback: {feedback_summary}",
            cap
        )
        response = await self._generate(
            "recommendations",
            RECOMMENDATIONS_SYSTEM_PROMPT,
            f"Generate strategic recommendations from: {combined}",
            combined,
            max_tokens=120
        )
        recommendations = parse_bullets(response or "")
        return recommendations if len(recommendations) >= 3 else list(FALLBACK_RECOMMENDATIONS)
