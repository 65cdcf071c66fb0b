"""
Feedback Module
===============

Bounded Context for feedback aggregation and classification.

Responsibilities:
- Store feedback records from many sources (upsert by id)
- Serve summary, insights and network visualization views through a cache
- Classify feedback with deterministic keyword and label rules
- Score network stack health per layer
- Enrich views with quota-gated AI calls, with deterministic fallbacks
"""

__version__ = "1.0.0"
