"""
Seed Dataset
============

Network-infrastructure feedback served when the store is empty or
unreachable, and written back to the store on a best-effort basis.
"""

from datetime import datetime
from typing import Any, Dict, List

from feedback_analyzer.feedback.domain.entities import FeedbackMetadata, FeedbackRecord

_SEED_ROWS: List[Dict[str, Any]] = [
    {
        "id": "github_001",
        "source_type": "github",
        "source_id": "issues/456",
        "title": "Docker container fails to start on ARM64 architecture",
        "content": (
            "When trying to run PlexNet in a Docker container on ARM64 systems, the container "
            "fails to start with exec format error. This is blocking deployment on modern Apple "
            "Silicon Macs and ARM-based servers."
        ),
        "author": "dev-arm64-user",
        "created_at": "2024-11-25T13:20:00+00:00",
        "metadata": {"labels": ["bug", "docker", "arm64", "critical"], "comments_count": 8},
    },
    {
        "id": "github_002",
        "source_type": "github",
        "source_id": "issues/457",
        "title": "Feature request: Prometheus metrics export",
        "content": (
            "Add native Prometheus metrics export capability for integration with existing "
            "monitoring stacks. Need /metrics endpoint with proper exposition format and "
            "configurable collection intervals."
        ),
        "author": "k8s-monitoring",
        "created_at": "2024-11-26T16:45:00+00:00",
        "metadata": {"labels": ["enhancement", "prometheus", "kubernetes"], "comments_count": 12},
    },
    {
        "id": "github_003",
        "source_type": "github",
        "source_id": "issues/458",
        "title": "High CPU usage when monitoring large networks (>1000 devices)",
        "content": (
            "Server process consumes excessive CPU resources when monitoring networks with more "
            "than 1000 devices. Performance degrades significantly with SNMP polling becoming "
            "slow and unreliable."
        ),
        "author": "enterprise-user",
        "created_at": "2024-11-27T11:10:00+00:00",
        "metadata": {"labels": ["performance", "scalability", "snmp"], "comments_count": 6},
    },
    {
        "id": "github_004",
        "source_type": "github",
        "source_id": "pull/234",
        "title": "Add IPv6 support for network discovery",
        "content": (
            "Implement comprehensive IPv6 support including ICMPv6 neighbor discovery, IPv6 "
            "subnet scanning, and dual-stack device detection. Closes IPv6 compatibility issues."
        ),
        "author": "ipv6-contributor",
        "created_at": "2024-11-28T15:30:00+00:00",
        "metadata": {"labels": ["enhancement", "ipv6", "network-discovery"]},
    },
    {
        "id": "github_005",
        "source_type": "github",
        "source_id": "issues/459",
        "title": "Security vulnerability: SQL injection in device search API",
        "content": (
            "Critical SQL injection vulnerability in /api/devices/search endpoint. Query "
            "parameters are not properly sanitized before SQL execution. Affects all versions "
            "prior to 2.3.2."
        ),
        "author": "security-researcher",
        "created_at": "2024-11-29T08:00:00+00:00",
        "metadata": {"labels": ["security", "vulnerability", "sql-injection", "critical"]},
    },
    {
        "id": "slack_001",
        "source_type": "slack",
        "source_id": "C1234567890_1643723400.001",
        "title": "Customer reporting dashboard login issues",
        "content": (
            "@support-team We just got a call from a customer at MegaCorp reporting 'Invalid "
            "token' errors when logging into the dashboard after the latest update. They're "
            "using SSO with Azure AD."
        ),
        "author": "customer-success",
        "created_at": "2024-12-01T09:30:00+00:00",
        "metadata": {"channel": "support", "replies": 2},
    },
    {
        "id": "slack_002",
        "source_type": "slack",
        "source_id": "C2345678901_1643724000.001",
        "title": "New feature idea: Network topology visualization",
        "content": (
            "@product-team What if we added an interactive network topology map showing "
            "devices, connections, and traffic flows in real-time? Could help with "
            "troubleshooting connectivity issues."
        ),
        "author": "network-engineer",
        "created_at": "2024-12-01T10:45:00+00:00",
        "metadata": {"channel": "product-feedback", "replies": 3},
    },
    {
        "id": "slack_003",
        "source_type": "slack",
        "source_id": "C3456789012_1643725000.001",
        "title": "Performance issue with large network scans",
        "content": (
            "@engineering-team Network scans are taking 15+ minutes for networks with 500+ "
            "devices. Customers are complaining about slow discovery times. Need optimization "
            "for large-scale deployments."
        ),
        "author": "field-engineer",
        "created_at": "2024-12-01T11:30:00+00:00",
        "metadata": {"channel": "engineering", "replies": 5},
    },
    {
        "id": "jira_001",
        "source_type": "jira",
        "source_id": "NET-123",
        "title": "Network monitoring performance degradation",
        "content": (
            "Users reporting slow response times when accessing network monitoring dashboard "
            "during peak hours. Memory usage spikes to 2-3GB during high load periods."
        ),
        "author": "network-team",
        "created_at": "2024-11-28T10:15:00+00:00",
        "metadata": {"priority": "high", "status": "open", "assignee": "backend-team"},
    },
    {
        "id": "jira_002",
        "source_type": "jira",
        "source_id": "SEC-456",
        "title": "Implement OAuth 2.0 authentication",
        "content": (
            "Replace basic authentication with OAuth 2.0 for improved security and integration "
            "capabilities with enterprise identity providers like Okta and Azure AD."
        ),
        "author": "security-team",
        "created_at": "2024-11-30T14:20:00+00:00",
        "metadata": {"priority": "medium", "status": "in-progress", "assignee": "auth-team"},
    },
    {
        "id": "email_001",
        "source_type": "email",
        "source_id": "ticket_789",
        "title": "Cannot access historical data after upgrade",
        "content": (
            "After upgrading to v2.3.0, users cannot access historical monitoring data from "
            "before the upgrade. Database migration issue suspected. Critical for compliance "
            "reporting."
        ),
        "author": "support@enterprise-customer.com",
        "created_at": "2024-12-02T08:45:00+00:00",
        "metadata": {"priority": "high", "category": "data-loss"},
    },
    {
        "id": "bug_001",
        "source_type": "bug-report",
        "source_id": "BR-101",
        "title": "Memory leak in SNMP polling process",
        "content": (
            "Memory usage continuously increases during SNMP polling operations. Process must "
            "be restarted every 24 hours to prevent system crashes. Affects reliability in "
            "production."
        ),
        "author": "qa-team",
        "created_at": "2024-12-03T13:15:00+00:00",
        "metadata": {"severity": "critical", "component": "snmp-poller"},
    },
    {
        "id": "teams_001",
        "source_type": "teams",
        "source_id": "thread_abc123",
        "title": "Integration with ServiceNow requested",
        "content": (
            "Customer is asking for bidirectional integration with ServiceNow for automated "
            "incident creation and resolution tracking. This would streamline IT operations "
            "workflows."
        ),
        "author": "sales-engineer",
        "created_at": "2024-12-04T09:00:00+00:00",
        "metadata": {"channel": "integrations", "urgent": False},
    },
    {
        "id": "form_001",
        "source_type": "dashboard-form",
        "source_id": "feedback_001",
        "title": "Dashboard usability feedback",
        "content": (
            "The new dashboard layout is confusing. Users can't find the device list easily. "
            "Navigation needs improvement. The search functionality is also slow with large "
            "device counts."
        ),
        "author": "power-user",
        "created_at": "2024-12-05T16:30:00+00:00",
        "metadata": {"rating": 2, "category": "usability"},
    },
    {
        "id": "github_006",
        "source_type": "github",
        "source_id": "issues/460",
        "title": "Add support for NetFlow v9 export",
        "content": (
            "Implement NetFlow v9 export capability for integration with network traffic "
            "analysis tools like SolarWinds and PRTG. This is a common enterprise requirement."
        ),
        "author": "netflow-user",
        "created_at": "2024-12-06T10:00:00+00:00",
        "metadata": {"labels": ["enhancement", "netflow", "export"]},
    },
    {
        "id": "slack_004",
        "source_type": "slack",
        "source_id": "C4567890123_1643726000.001",
        "title": "Mobile app feature request",
        "content": (
            "@product-team Can we get a mobile app for on-the-go network monitoring? Critical "
            "alerts and basic device status would be very useful for network admins."
        ),
        "author": "mobile-user",
        "created_at": "2024-12-06T14:15:00+00:00",
        "metadata": {"channel": "product-feedback", "replies": 7},
    },
]


def load_seed_records() -> List[FeedbackRecord]:
    """Build fresh FeedbackRecord instances for the seed dataset."""
    return [
        FeedbackRecord(
            id=row["id"],
            source_type=row["source_type"],
            source_id=row["source_id"],
            title=row["title"],
            content=row["content"],
            author=row["author"],
            created_at=datetime.fromisoformat(row["created_at"]),
            metadata=FeedbackMetadata.parse(row["metadata"]),
        )
        for row in _SEED_ROWS
    ]
