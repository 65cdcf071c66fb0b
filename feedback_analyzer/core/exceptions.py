"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

Read paths (summary, insights, visualization) catch these at the point of
use and degrade to a documented default; only ingestion lets
UpstreamUnavailableException reach its caller.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class MalformedMetadataException(ValidationException):
    """Feedback metadata could not be parsed into a mapping."""

    def __init__(self, raw: object, details: Optional[dict] = None):
        self.raw = raw
        super().__init__(
            f"Malformed feedback metadata of type {type(raw).__name__}",
            details
        )


class QuotaExceededException(DomainException):
    """A metered resource has no budget left in the current window."""

    def __init__(
        self,
        resource_class: str,
        requested: int,
        remaining: int,
        details: Optional[dict] = None
    ):
        self.resource_class = resource_class
        self.requested = requested
        self.remaining = remaining
        super().__init__(
            f"Quota exceeded for {resource_class}: requested {requested}, remaining {remaining}",
            details or {"resource_class": resource_class, "requested": requested}
        )


class ExternalServiceException(ApplicationException):
    """Base exception for external service failures."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)


class UpstreamUnavailableException(ExternalServiceException):
    """Data store, cache or AI gateway failed or is unreachable."""


class LLMException(UpstreamUnavailableException):
    """Exception for AI gateway failures."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("AI Gateway", message, details)
