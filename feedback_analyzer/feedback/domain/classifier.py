"""
Rule-Based Classifier
=====================

Deterministic keyword and label rules over a batch of feedback records.

All matching is case-insensitive substring matching. Every function is
pure: same batch in, same result out.
"""

from collections import Counter
from typing import Dict, Iterable, List, Sequence, Tuple

from feedback_analyzer.config import PriorityBucket, VALID_PRIORITY_BUCKETS
from feedback_analyzer.feedback.domain.entities import (
    FeedbackRecord,
    PriorityCategory,
    JourneyStage,
    FeatureAdoption,
)

MAX_SEVERITY = 5
MAX_CRITICAL_ISSUES = 8
MAX_PAIN_POINTS = 6
MAX_PRIORITY_ACTIONS = 6

SECURITY_RESEARCHER = "security-researcher"

CATEGORY_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("docker", ("docker", "container")),
    ("performance", ("performance", "cpu", "memory")),
    ("security", ("security", "vulnerability")),
    ("features", ("feature", "enhancement")),
    ("network", ("network", "connectivity")),
]

CRITICAL_KEYWORDS = (
    "security", "vulnerability", "sql-injection", "crash", "data loss",
    "memory leak", "performance degradation", "blocking", "critical",
    "emergency", "breach", "exploit",
)

PAIN_POINT_KEYWORDS = (
    "slow", "crashing", "confusing", "broken", "missing", "inconsistent",
    "unreliable", "complex", "difficult", "frustrating", "blocking", "error",
)

JOURNEY_STAGES: List[Tuple[str, Tuple[str, ...]]] = [
    ("First Time Setup", ("setup", "install", "deploy")),
    ("Daily Usage", ("dashboard", "monitoring", "daily")),
    ("Troubleshooting", ("error", "issue", "problem")),
    ("Advanced Features", ("prometheus", "integration", "api")),
]

POSITIVE_WORDS = ("great", "excellent", "love", "amazing", "perfect", "smooth", "easy")
NEGATIVE_WORDS = ("frustrating", "slow", "confusing", "broken", "terrible", "difficult", "complex")

# name, bucket, content keywords, label
PRIORITY_CATEGORIES: List[Tuple[str, str, Tuple[str, ...], str]] = [
    ("security", PriorityBucket.URGENT, ("security", "vulnerability"), "security"),
    ("performance", PriorityBucket.HIGH, ("performance", "slow", "cpu"), "performance"),
    ("compatibility", PriorityBucket.MEDIUM, ("docker", "arm64", "ipv6"), "compatibility"),
    ("features", PriorityBucket.MEDIUM, ("feature", "enhancement"), "enhancement"),
    ("usability", PriorityBucket.LOW, ("usability", "ui", "dashboard"), "usability"),
]

ADOPTION_FEATURES = (
    "prometheus", "snmp", "dashboard", "api", "alerting", "reporting", "docker", "kubernetes",
)
FEATURE_POSITIVE_WORDS = ("love", "great", "excellent", "perfect")
FEATURE_NEGATIVE_WORDS = ("broken", "slow", "confusing", "missing")


def _mentions_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


class RuleBasedClassifier:
    """
    Stateless classification rules.

    Severity formula (each rule applies at most once):
        1
        + 3  critical label, or "security"/"vulnerability" in title+content
        + 2  "crash" or "data loss"
        + 2  blocking label or "blocking" in text
        + 1  high priority (metadata or label)
        + 1  bug-report source
        + 2  security researcher (author or source type)
        clamped to 5
    """

    @staticmethod
    def calculate_severity(record: FeedbackRecord) -> int:
        """Severity in [1, 5] for a single record."""
        text = record.text_lower
        metadata = record.metadata
        severity = 1

        if metadata.has_label("critical") or _mentions_any(text, ("security", "vulnerability")):
            severity += 3
        if _mentions_any(text, ("crash", "data loss")):
            severity += 2
        if metadata.has_label("blocking") or "blocking" in text:
            severity += 2
        if metadata.priority == "high" or metadata.has_label("high"):
            severity += 1

        if record.source_type == "bug-report":
            severity += 1
        if SECURITY_RESEARCHER in (record.author, record.source_type):
            severity += 2

        return min(severity, MAX_SEVERITY)

    @staticmethod
    def categorize(records: Sequence[FeedbackRecord]) -> List[Tuple[str, int]]:
        """
        Tally labels plus keyword categories.

        Returns (category, count) pairs by count descending; ties keep
        first-seen order.
        """
        tally: Dict[str, int] = {}
        for record in records:
            for label in record.labels:
                tally[label] = tally.get(label, 0) + 1

            content = record.content_lower
            for category, keywords in CATEGORY_KEYWORDS:
                if _mentions_any(content, keywords):
                    tally[category] = tally.get(category, 0) + 1

        return sorted(tally.items(), key=lambda item: -item[1])

    @staticmethod
    def is_critical(record: FeedbackRecord) -> bool:
        content = record.content_lower
        title = record.title.lower()
        labels = [label.lower() for label in record.labels]
        return any(
            keyword in content
            or keyword in title
            or any(keyword in label for label in labels)
            for keyword in CRITICAL_KEYWORDS
        )

    @classmethod
    def extract_critical_issues(cls, records: Sequence[FeedbackRecord]) -> List[str]:
        """Top 8 critical records by (severity, created_at), newest first on ties."""
        critical = [r for r in records if cls.is_critical(r)]
        critical.sort(key=lambda r: (cls.calculate_severity(r), r.created_at), reverse=True)
        return [f"{r.title} ({r.source_type})" for r in critical[:MAX_CRITICAL_ISSUES]]

    @staticmethod
    def identify_pain_points(records: Sequence[FeedbackRecord]) -> List[str]:
        """Pain keywords by number of records mentioning them, top 6."""
        counts = Counter()
        for record in records:
            content = record.content_lower
            for keyword in PAIN_POINT_KEYWORDS:
                if keyword in content:
                    counts[keyword] += 1

        ranked = sorted(
            (kw for kw in PAIN_POINT_KEYWORDS if counts[kw] > 0),
            key=lambda kw: -counts[kw]
        )
        return [f"{kw} ({counts[kw]} mentions)" for kw in ranked[:MAX_PAIN_POINTS]]

    @staticmethod
    def journey_satisfaction(records: Sequence[FeedbackRecord]) -> str:
        """high / medium / low from positive versus negative record counts."""
        positive = sum(1 for r in records if _mentions_any(r.content_lower, POSITIVE_WORDS))
        negative = sum(1 for r in records if _mentions_any(r.content_lower, NEGATIVE_WORDS))

        if positive > negative * 2:
            return "high"
        if negative > positive * 2:
            return "low"
        return "medium"

    @classmethod
    def bucket_journeys(cls, records: Sequence[FeedbackRecord]) -> List[JourneyStage]:
        """Assign records to journey stages; a record may land in several."""
        stages = []
        for stage, keywords in JOURNEY_STAGES:
            members = [r for r in records if _mentions_any(r.content_lower, keywords)]
            stages.append(JourneyStage(
                stage=stage,
                feedback_count=len(members),
                satisfaction=cls.journey_satisfaction(members)
            ))
        return stages

    @staticmethod
    def build_priority_matrix(
        records: Sequence[FeedbackRecord]
    ) -> Dict[str, List[PriorityCategory]]:
        """
        Group records into topic categories and bucket them.

        Only categories with at least one record appear; buckets keep
        category creation order.
        """
        categories: Dict[str, PriorityCategory] = {}
        for record in records:
            content = record.content_lower
            for name, bucket, keywords, label in PRIORITY_CATEGORIES:
                if _mentions_any(content, keywords) or label in record.labels:
                    if name not in categories:
                        categories[name] = PriorityCategory(name=name, priority=bucket)
                    categories[name].add(record)

        matrix: Dict[str, List[PriorityCategory]] = {b: [] for b in VALID_PRIORITY_BUCKETS}
        for category in categories.values():
            matrix[category.priority].append(category)
        return matrix

    @staticmethod
    def analyze_feature_adoption(records: Sequence[FeedbackRecord]) -> List[FeatureAdoption]:
        """Mentioned features by mention count, with a sentiment label each."""
        adoption = []
        for feature in ADOPTION_FEATURES:
            mentioning = [r for r in records if feature in r.content_lower]
            if not mentioning:
                continue

            positive = sum(1 for r in mentioning if _mentions_any(r.content_lower, FEATURE_POSITIVE_WORDS))
            negative = sum(1 for r in mentioning if _mentions_any(r.content_lower, FEATURE_NEGATIVE_WORDS))
            if positive > negative:
                sentiment = "positive"
            elif negative > positive:
                sentiment = "negative"
            else:
                sentiment = "neutral"

            adoption.append(FeatureAdoption(feature=feature, mentions=len(mentioning), sentiment=sentiment))

        return sorted(adoption, key=lambda f: -f.mentions)

    @staticmethod
    def generate_priority_actions(
        records: Sequence[FeedbackRecord],
        priority_matrix: Dict[str, List[PriorityCategory]]
    ) -> List[str]:
        """
        Action list derived from security, performance, compatibility and
        integration signals, padded with standing roadmap items, max 6.
        """
        actions = []

        if any(_mentions_any(r.content_lower, ("security", "vulnerability")) for r in records):
            actions.append("CRITICAL: Address SQL injection and security vulnerabilities immediately")
            actions.append("Implement OAuth 2.0 authentication and authorization")

        high_items = sum(c.count for c in priority_matrix.get(PriorityBucket.HIGH, []))
        if high_items > 2:
            actions.append("Optimize performance for large network monitoring (>1000 devices)")
            actions.append("Fix memory leaks in SNMP polling processes")

        compatibility = sum(1 for r in records if _mentions_any(r.content_lower, ("docker", "arm64", "ipv6")))
        if compatibility > 1:
            actions.append("Add ARM64 Docker container support")
            actions.append("Implement IPv6 support for network discovery")

        integrations = sum(1 for r in records if _mentions_any(r.content_lower, ("prometheus", "integration")))
        if integrations > 1:
            actions.append("Add native Prometheus metrics export")
            actions.append("Develop ServiceNow bidirectional integration")

        if len(actions) < 3:
            actions.append("Enhance dashboard usability and navigation")
            actions.append("Develop mobile application for network monitoring")
            actions.append("Implement NetFlow v9 export capabilities")

        return actions[:MAX_PRIORITY_ACTIONS]

    @staticmethod
    def count_critical_issues(records: Sequence[FeedbackRecord]) -> int:
        """Records labelled security/critical or mentioning vulnerability/crash."""
        return sum(
            1 for r in records
            if "security" in r.labels
            or "critical" in r.labels
            or _mentions_any(r.content_lower, ("vulnerability", "crash"))
        )

    @staticmethod
    def count_feature_requests(records: Sequence[FeedbackRecord]) -> int:
        """Open GitHub enhancements plus records asking for a feature in prose."""
        return sum(
            1 for r in records
            if (
                r.source_type == "github"
                and r.metadata.state == "open"
                and "enhancement" in r.labels
            )
            or _mentions_any(r.content_lower, ("feature request", "would be great"))
        )
