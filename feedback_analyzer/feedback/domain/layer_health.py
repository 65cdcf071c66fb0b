"""
Layer Health Scorer
===================

Maps feedback text onto seven fixed network stack layers.

Each record increments every layer whose keyword set it mentions.
Security keywords count against both Session and Presentation.

Health score = clamp(100 - 5*issues - 15*critical_layers - 5*warning_layers, 0, 100)
"""

from typing import List, Sequence, Tuple

from feedback_analyzer.config import LayerStatus
from feedback_analyzer.feedback.domain.entities import FeedbackRecord, NetworkLayer

# name, description, keywords
LAYER_DEFINITIONS: List[Tuple[str, str, Tuple[str, ...]]] = [
    ("Physical Layer", "Cabling, connectors, signal transmission",
     ("cable", "connector", "fiber", "physical", "hardware")),
    ("Data Link Layer", "MAC addresses, switches, VLANs",
     ("mac", "switch", "vlan", "bridge", "ethernet")),
    ("Network Layer", "IP addressing, routing, subnetting",
     ("ip", "routing", "subnet", "arp", "icmp", "ipv6")),
    ("Transport Layer", "TCP/UDP, port management, QoS",
     ("tcp", "udp", "port", "qos", "congestion")),
    ("Session Layer", "Session management, authentication", ()),
    ("Presentation Layer", "Data formatting, encryption", ()),
    ("Application Layer", "HTTP, DNS, monitoring protocols",
     ("http", "dns", "snmp", "monitoring", "prometheus")),
]

SECURITY_KEYWORDS = ("security", "vulnerability", "injection", "attack")
SECURITY_LAYERS = ("Session Layer", "Presentation Layer")

NETWORK_KEYWORDS = ("network", "connectivity", "interface")

STATUS_ICONS = {
    LayerStatus.HEALTHY: "🟢",
    LayerStatus.WARNING: "🟡",
    LayerStatus.CRITICAL: "🔴",
}


def is_network_related(record: FeedbackRecord) -> bool:
    """Content mentions network/connectivity/interface, or a label contains 'network'."""
    content = record.content_lower
    return (
        any(keyword in content for keyword in NETWORK_KEYWORDS)
        or any("network" in label for label in record.labels)
    )


def overall_status(health_score: int) -> str:
    if health_score >= 80:
        return "excellent"
    if health_score >= 60:
        return "good"
    if health_score >= 40:
        return "fair"
    return "poor"


class LayerHealthScorer:
    """Scores network stack health from feedback text."""

    @staticmethod
    def analyze(records: Sequence[FeedbackRecord]) -> List[NetworkLayer]:
        """Per-layer issue counts, in stack order (Physical first)."""
        layers = {name: NetworkLayer(name=name, description=desc) for name, desc, _ in LAYER_DEFINITIONS}

        for record in records:
            text = (record.content or record.title or "").lower()

            for name, _, keywords in LAYER_DEFINITIONS:
                if keywords and any(keyword in text for keyword in keywords):
                    layers[name].issue_count += 1

            if any(keyword in text for keyword in SECURITY_KEYWORDS):
                for name in SECURITY_LAYERS:
                    layers[name].issue_count += 1

        return list(layers.values())

    @staticmethod
    def health_score(layers: Sequence[NetworkLayer]) -> int:
        total = sum(layer.issue_count for layer in layers)
        critical = sum(1 for layer in layers if layer.status == LayerStatus.CRITICAL)
        warning = sum(1 for layer in layers if layer.status == LayerStatus.WARNING)
        return max(0, min(100, 100 - total * 5 - critical * 15 - warning * 5))

    @classmethod
    def score(cls, records: Sequence[FeedbackRecord]) -> int:
        """Health score of the network-related subset of `records`."""
        return cls.health_score(cls.analyze([r for r in records if is_network_related(r)]))

    @classmethod
    def render(cls, layers: Sequence[NetworkLayer], generated_at: str) -> str:
        """Plain-text stack diagram with a status summary and advice."""
        score = cls.health_score(layers)
        lines = [
            "Network Stack Health Visualization",
            "=" * 39,
            "",
            f"Overall Health: {overall_status(score).upper()} ({score}/100)",
            "",
            "Layer Analysis:",
        ]

        for index, layer in enumerate(layers):
            issues = f" ({layer.issue_count} issues)" if layer.issue_count > 0 else " (healthy)"
            lines.append(f"{STATUS_ICONS[layer.status]} {layer.name}{issues}")
            if index < len(layers) - 1:
                lines.append("   │")

        counts = {status: 0 for status in STATUS_ICONS}
        for layer in layers:
            counts[layer.status] += 1

        lines += [
            "",
            "Issue Summary:",
            f"🔴 Critical: {counts[LayerStatus.CRITICAL]} layers",
            f"🟡 Warning: {counts[LayerStatus.WARNING]} layers",
            f"🟢 Healthy: {counts[LayerStatus.HEALTHY]} layers",
            "",
            "Recommendations:",
        ]

        if score >= 80:
            lines += ["Network stack is in excellent condition", "Continue monitoring and maintenance"]
        elif score >= 60:
            lines += ["Address warning-level issues", "Consider performance optimizations"]
        else:
            lines += ["Immediate attention required", "Focus on critical infrastructure issues"]

        lines += ["", f"Last updated: {generated_at}"]
        return "\n".join(lines) + "\n"
