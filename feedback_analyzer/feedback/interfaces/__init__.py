"""
Feedback Interfaces Layer
=========================

Interface adapters (controllers) for the feedback module.

This is the outermost layer - handles HTTP requests/responses and
delegates to application services.
"""

from feedback_analyzer.feedback.interfaces.controllers import feedback_router

__all__ = ["feedback_router"]
