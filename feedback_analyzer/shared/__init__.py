"""
Shared Kernel Module
====================

This module contains shared infrastructure used across all bounded contexts
(Quota Tracking and Feedback Aggregation).

Architecture Pattern: Modular Monolith
- Each module (quota, feedback) is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add business logic from Quota or Feedback to shared kernel.
"""

__version__ = "1.0.0"
