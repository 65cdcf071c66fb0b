"""
Feedback Analyzer
=================

Aggregates network-infrastructure feedback from several sources, scores it
with deterministic rules, optionally enriches it with a metered AI model and
serves the result through a TTL cache.

Bounded contexts:
- quota: Metered resource tracking (AI tokens, store and cache operations)
- feedback: Aggregation, classification and layer health scoring
"""

__version__ = "1.0.0"
