"""
Tests for feedback domain entities and the rule-based classifier.
"""

from datetime import datetime, timedelta, timezone

import pytest

from feedback_analyzer.config import PriorityBucket, VALID_PRIORITY_BUCKETS
from feedback_analyzer.core import MalformedMetadataException
from feedback_analyzer.feedback.domain import (
    FeedbackMetadata,
    FeedbackRecord,
    RuleBasedClassifier,
    load_seed_records,
)


# ============================================================================
# Entities
# ============================================================================

class TestFeedbackMetadata:
    """Strict and tolerant metadata parsing."""

    def test_parse_mapping(self):
        metadata = FeedbackMetadata.parse({"labels": ["bug", "docker"], "priority": "high", "replies": 2})

        assert metadata.labels == ("bug", "docker")
        assert metadata.priority == "high"
        assert metadata.extra == {"replies": 2}

    def test_parse_json_string(self):
        metadata = FeedbackMetadata.parse('{"labels": ["security"], "state": "open"}')

        assert metadata.has_label("security")
        assert metadata.state == "open"

    def test_duplicate_labels_collapse(self):
        metadata = FeedbackMetadata.parse({"labels": ["bug", "bug", "ui", "bug"]})
        assert metadata.labels == ("bug", "ui")

    def test_none_is_empty(self):
        assert FeedbackMetadata.parse(None) == FeedbackMetadata()

    def test_malformed_json_raises(self):
        with pytest.raises(MalformedMetadataException):
            FeedbackMetadata.parse("{not json")

    def test_non_mapping_raises(self):
        with pytest.raises(MalformedMetadataException):
            FeedbackMetadata.parse('["a", "b"]')

    def test_lenient_parse_returns_empty(self):
        metadata = FeedbackMetadata.parse_lenient("{not json")
        assert metadata.labels == ()
        assert metadata.extra == {}

    def test_to_dict_restores_open_map(self):
        raw = {"labels": ["bug"], "priority": "high", "state": "open", "channel": "support"}
        assert FeedbackMetadata.parse(raw).to_dict() == raw


class TestFeedbackRecord:
    """Record construction rules."""

    def test_unknown_source_type_rejected(self, make_record):
        with pytest.raises(ValueError):
            make_record(source_type="fax")

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError):
            FeedbackRecord(
                id="",
                source_type="github",
                source_id="1",
                title="t",
                content="c",
                author="a",
                created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            )

    def test_naive_timestamp_treated_as_utc(self, make_record):
        record = make_record(created_at=datetime(2024, 12, 1, 9, 30))
        assert record.created_at.tzinfo == timezone.utc

    def test_text_lower_includes_title(self, make_record):
        record = make_record(content="Body", title="Security Title")
        assert "security" in record.text_lower
        assert "security" not in record.content_lower


# ============================================================================
# Severity and categories
# ============================================================================

class TestSeverity:
    """Additive severity rules, clamped to 5."""

    def test_critical_label_and_security_text_count_once(self, make_record):
        record = make_record(content="Possible security hole in login", labels=["critical"])
        assert RuleBasedClassifier.calculate_severity(record) == 4

    def test_plain_record_is_minimum(self, make_record):
        record = make_record(content="Docs typo on the install page")
        assert RuleBasedClassifier.calculate_severity(record) == 1

    def test_all_rules_clamp_to_five(self, make_record):
        record = make_record(
            content="crash that is blocking",
            labels=["critical", "high"],
            source_type="bug-report",
        )
        assert RuleBasedClassifier.calculate_severity(record) == 5

    def test_security_researcher_author(self, make_record):
        record = make_record(content="Plain note", author="security-researcher")
        assert RuleBasedClassifier.calculate_severity(record) == 3

    def test_labels_alone_raise_severity(self, make_record):
        assert RuleBasedClassifier.calculate_severity(make_record(content="Plain note", labels=["blocking"])) == 3
        assert RuleBasedClassifier.calculate_severity(make_record(content="Plain note", labels=["high"])) == 2

    def test_high_priority_metadata(self, make_record):
        record = make_record(content="Plain note", priority="high")
        assert RuleBasedClassifier.calculate_severity(record) == 2

    def test_severity_bounds_over_seed(self):
        for record in load_seed_records():
            assert 1 <= RuleBasedClassifier.calculate_severity(record) <= 5


class TestCategorize:
    """Label and keyword tallies."""

    def test_sorted_by_count_with_first_seen_ties(self, make_record):
        records = [
            make_record(content="docker image", labels=["b"]),
            make_record(content="", labels=["a", "b"]),
        ]
        assert RuleBasedClassifier.categorize(records) == [("b", 2), ("docker", 1), ("a", 1)]

    def test_keyword_categories(self, make_record):
        records = [make_record(content="High memory and CPU use")]
        assert RuleBasedClassifier.categorize(records) == [("performance", 1)]

    def test_empty_batch(self):
        assert RuleBasedClassifier.categorize([]) == []


# ============================================================================
# Critical issues and pain points
# ============================================================================

class TestCriticalIssues:
    """Critical issue extraction and ordering."""

    def test_capped_at_eight_newest_first(self, make_record):
        base = datetime(2024, 12, 1, tzinfo=timezone.utc)
        records = [
            make_record(content="crash report", title=f"Crash {i}", created_at=base + timedelta(hours=i))
            for i in range(10)
        ]

        issues = RuleBasedClassifier.extract_critical_issues(records)

        assert len(issues) == 8
        assert issues == [f"Crash {i} (github)" for i in range(9, 1, -1)]

    def test_severity_beats_recency(self, make_record):
        old = make_record(
            content="security vulnerability",
            title="Old breach",
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        new = make_record(
            content="crash on save",
            title="New crash",
            created_at=datetime(2024, 6, 1, tzinfo=timezone.utc),
        )

        assert RuleBasedClassifier.extract_critical_issues([new, old]) == [
            "Old breach (github)", "New crash (github)"
        ]

    def test_label_substring_marks_critical(self, make_record):
        record = make_record(content="Needs a look", labels=["sql-injection"])
        assert RuleBasedClassifier.is_critical(record)

    def test_non_critical_excluded(self, make_record):
        record = make_record(content="Please add dark mode")
        assert RuleBasedClassifier.extract_critical_issues([record]) == []


class TestPainPoints:
    """Pain keyword ranking."""

    def test_counts_records_and_keeps_keyword_order_on_ties(self, make_record):
        records = [
            make_record(content="slow and broken"),
            make_record(content="slow"),
            make_record(content="slow with an error"),
        ]
        assert RuleBasedClassifier.identify_pain_points(records) == [
            "slow (3 mentions)", "broken (1 mentions)", "error (1 mentions)"
        ]

    def test_capped_at_six(self, make_record):
        record = make_record(
            content="slow crashing confusing broken missing inconsistent unreliable "
                    "complex difficult frustrating blocking error"
        )
        points = RuleBasedClassifier.identify_pain_points([record])

        assert len(points) == 6
        assert points[0] == "slow (1 mentions)"
        assert points[-1] == "inconsistent (1 mentions)"


# ============================================================================
# Journeys, priority matrix and feature adoption
# ============================================================================

class TestJourneys:
    """User journey bucketing and satisfaction."""

    def test_all_stages_present_in_order(self):
        stages = RuleBasedClassifier.bucket_journeys([])
        assert [s.stage for s in stages] == [
            "First Time Setup", "Daily Usage", "Troubleshooting", "Advanced Features"
        ]
        assert all(s.feedback_count == 0 and s.satisfaction == "medium" for s in stages)

    def test_positive_setup_is_high(self, make_record):
        records = [
            make_record(content="setup was easy"),
            make_record(content="the install is great"),
        ]
        setup = RuleBasedClassifier.bucket_journeys(records)[0]

        assert setup.feedback_count == 2
        assert setup.satisfaction == "high"

    def test_negative_dashboard_is_low(self, make_record):
        records = [
            make_record(content="slow dashboard"),
            make_record(content="broken dashboard"),
        ]
        daily = RuleBasedClassifier.bucket_journeys(records)[1]

        assert daily.feedback_count == 2
        assert daily.satisfaction == "low"

    def test_record_can_land_in_several_stages(self, make_record):
        record = make_record(content="deploy error with the api")
        counts = [s.feedback_count for s in RuleBasedClassifier.bucket_journeys([record])]
        assert counts == [1, 0, 1, 1]


class TestPriorityMatrix:
    """Topic categories grouped by bucket."""

    def test_every_bucket_present(self):
        matrix = RuleBasedClassifier.build_priority_matrix([])
        assert set(matrix) == set(VALID_PRIORITY_BUCKETS)
        assert all(categories == [] for categories in matrix.values())

    def test_security_record_is_urgent(self, make_record):
        record = make_record(content="security hole", title="Hole")
        matrix = RuleBasedClassifier.build_priority_matrix([record])

        urgent = matrix[PriorityBucket.URGENT]
        assert [c.name for c in urgent] == ["security"]
        assert urgent[0].count == 1
        assert urgent[0].items == ["Hole"]

    def test_label_match_and_latest_update(self, make_record):
        older = make_record(content="", labels=["usability"], created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        newer = make_record(content="dashboard layout", created_at=datetime(2024, 2, 1, tzinfo=timezone.utc))
        low = RuleBasedClassifier.build_priority_matrix([older, newer])[PriorityBucket.LOW]

        assert low[0].name == "usability"
        assert low[0].count == 2
        assert low[0].latest_update == datetime(2024, 2, 1, tzinfo=timezone.utc)


class TestFeatureAdoption:
    """Feature mention counts and sentiment."""

    def test_mentions_and_sentiment(self, make_record):
        records = [
            make_record(content="prometheus is great"),
            make_record(content="prometheus exporter broken"),
            make_record(content="snmp polling is slow"),
        ]
        adoption = RuleBasedClassifier.analyze_feature_adoption(records)

        assert [(f.feature, f.mentions, f.sentiment) for f in adoption] == [
            ("prometheus", 2, "neutral"),
            ("snmp", 1, "negative"),
        ]

    def test_unmentioned_features_omitted(self, make_record):
        assert RuleBasedClassifier.analyze_feature_adoption([make_record(content="nothing here")]) == []


# ============================================================================
# Priority actions and counters
# ============================================================================

class TestPriorityActions:
    """Deterministic action list."""

    def test_empty_batch_gets_roadmap_items(self):
        actions = RuleBasedClassifier.generate_priority_actions([], RuleBasedClassifier.build_priority_matrix([]))
        assert actions == [
            "Enhance dashboard usability and navigation",
            "Develop mobile application for network monitoring",
            "Implement NetFlow v9 export capabilities",
        ]

    def test_security_signal_first(self, make_record):
        records = [make_record(content="security vulnerability found")]
        matrix = RuleBasedClassifier.build_priority_matrix(records)
        actions = RuleBasedClassifier.generate_priority_actions(records, matrix)

        assert actions[0] == "CRITICAL: Address SQL injection and security vulnerabilities immediately"
        assert len(actions) == 5

    def test_seed_dataset_is_capped_at_six(self):
        records = load_seed_records()
        matrix = RuleBasedClassifier.build_priority_matrix(records)
        actions = RuleBasedClassifier.generate_priority_actions(records, matrix)

        assert len(actions) == 6
        assert "Optimize performance for large network monitoring (>1000 devices)" in actions
        assert "Add ARM64 Docker container support" in actions

    def test_actions_are_stable(self):
        records = load_seed_records()
        matrix = RuleBasedClassifier.build_priority_matrix(records)
        first = RuleBasedClassifier.generate_priority_actions(records, matrix)
        assert RuleBasedClassifier.generate_priority_actions(records, matrix) == first


class TestCounters:
    """Summary counters."""

    def test_count_critical_issues(self, make_record):
        records = [
            make_record(content="", labels=["security"]),
            make_record(content="it may crash"),
            make_record(content="just a question"),
        ]
        assert RuleBasedClassifier.count_critical_issues(records) == 2

    def test_count_feature_requests(self, make_record):
        records = [
            make_record(content="", labels=["enhancement"], state="open"),
            make_record(content="", labels=["enhancement"], state="closed"),
            make_record(content="It would be great to have SSO", source_type="slack"),
        ]
        assert RuleBasedClassifier.count_feature_requests(records) == 2
