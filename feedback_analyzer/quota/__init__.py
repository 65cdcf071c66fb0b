"""
Quota Module
============

Bounded Context for metered resource budgets.

Responsibilities:
- Track consumption per resource class (AI tokens, store reads/writes,
  cache reads/writes) against daily or 30-day windows
- Answer "can I spend N more?" with a reserved safety margin
- Report usage statistics

Counters live in process memory only; they are advisory backpressure,
not a distributed rate limiter.
"""

__version__ = "1.0.0"
