"""
Tests for network layer analysis and health scoring.
"""

from feedback_analyzer.config import LayerStatus
from feedback_analyzer.feedback.domain import (
    LayerHealthScorer,
    NetworkLayer,
    is_network_related,
    load_seed_records,
    overall_status,
)


def _layer(layers, name):
    return next(layer for layer in layers if layer.name == name)


class TestLayerAnalysis:
    """Keyword mapping onto the seven layers."""

    def test_seven_layers_in_stack_order(self):
        layers = LayerHealthScorer.analyze([])
        assert [layer.name for layer in layers] == [
            "Physical Layer",
            "Data Link Layer",
            "Network Layer",
            "Transport Layer",
            "Session Layer",
            "Presentation Layer",
            "Application Layer",
        ]
        assert all(layer.issue_count == 0 for layer in layers)

    def test_six_tcp_records_make_transport_critical(self, make_record):
        records = [make_record(content=f"tcp resets seen on host {i}") for i in range(6)]
        layers = LayerHealthScorer.analyze(records)

        transport = _layer(layers, "Transport Layer")
        assert transport.issue_count == 6
        assert transport.status == LayerStatus.CRITICAL

    def test_security_counts_against_session_and_presentation(self, make_record):
        layers = LayerHealthScorer.analyze([make_record(content="injection attack")])

        assert _layer(layers, "Session Layer").issue_count == 1
        assert _layer(layers, "Presentation Layer").issue_count == 1
        assert sum(layer.issue_count for layer in layers) == 2

    def test_title_used_when_content_empty(self, make_record):
        layers = LayerHealthScorer.analyze([make_record(content="", title="DNS lookups fail")])
        assert _layer(layers, "Application Layer").issue_count == 1

    def test_record_counted_once_per_layer(self, make_record):
        layers = LayerHealthScorer.analyze([make_record(content="tcp and udp port exhaustion")])
        assert _layer(layers, "Transport Layer").issue_count == 1


class TestLayerStatus:
    """Status thresholds."""

    def test_thresholds(self):
        assert NetworkLayer("L", "d", 0).status == LayerStatus.HEALTHY
        assert NetworkLayer("L", "d", 1).status == LayerStatus.HEALTHY
        assert NetworkLayer("L", "d", 2).status == LayerStatus.WARNING
        assert NetworkLayer("L", "d", 4).status == LayerStatus.WARNING
        assert NetworkLayer("L", "d", 5).status == LayerStatus.CRITICAL


class TestHealthScore:
    """Score formula and overall status."""

    def test_no_issues_is_perfect(self):
        assert LayerHealthScorer.health_score(LayerHealthScorer.analyze([])) == 100
        assert LayerHealthScorer.score([]) == 100

    def test_formula(self):
        layers = [
            NetworkLayer("A", "a", 5),
            NetworkLayer("B", "b", 2),
            NetworkLayer("C", "c", 1),
        ]
        # 100 - 8*5 - 15 - 5
        assert LayerHealthScorer.health_score(layers) == 40

    def test_clamped_at_zero(self):
        layers = [NetworkLayer("A", "a", 50)]
        assert LayerHealthScorer.health_score(layers) == 0

    def test_seed_score_in_bounds(self):
        assert 0 <= LayerHealthScorer.score(load_seed_records()) <= 100

    def test_score_ignores_non_network_records(self, make_record):
        record = make_record(content="tcp port flapping")
        assert not is_network_related(record)
        assert LayerHealthScorer.score([record]) == 100

    def test_overall_status_bands(self):
        assert overall_status(100) == "excellent"
        assert overall_status(80) == "excellent"
        assert overall_status(79) == "good"
        assert overall_status(60) == "good"
        assert overall_status(59) == "fair"
        assert overall_status(40) == "fair"
        assert overall_status(39) == "poor"
        assert overall_status(0) == "poor"


class TestNetworkRelated:
    """Network subset selection."""

    def test_content_keyword(self, make_record):
        assert is_network_related(make_record(content="Connectivity drops nightly"))

    def test_label_substring(self, make_record):
        assert is_network_related(make_record(content="", labels=["network-discovery"]))

    def test_unrelated(self, make_record):
        assert not is_network_related(make_record(content="Billing page typo"))


class TestRender:
    """Plain-text rendering."""

    def test_render_lists_every_layer(self, make_record):
        layers = LayerHealthScorer.analyze([make_record(content="tcp resets") for _ in range(5)])
        text = LayerHealthScorer.render(layers, "2025-03-14T12:00:00+00:00")

        assert "🔴 Transport Layer (5 issues)" in text
        assert "🟢 Physical Layer (healthy)" in text
        assert "Critical: 1 layers" in text
        assert text.rstrip().endswith("Last updated: 2025-03-14T12:00:00+00:00")
