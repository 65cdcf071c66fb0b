"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from feedback_analyzer.core.exceptions import (
    ApplicationException,
    DomainException,
    ValidationException,
    ConfigurationException,
    MalformedMetadataException,
    QuotaExceededException,
    ExternalServiceException,
    UpstreamUnavailableException,
    LLMException,
)

__all__ = [
    "ApplicationException",
    "DomainException",
    "ValidationException",
    "ConfigurationException",
    "MalformedMetadataException",
    "QuotaExceededException",
    "ExternalServiceException",
    "UpstreamUnavailableException",
    "LLMException",
]
