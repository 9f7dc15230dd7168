"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- PipelineError hierarchy for typed, stage-tagged exceptions
- HTTP status classification
"""

from core.errors.exceptions import (
    AuthenticationFailure,
    ConfigurationError,
    # Enums
    ErrorCategory,
    FetchFailure,
    HierarchyCycleError,
    HttpError,
    PermanentError,
    # Base classes
    PipelineError,
    ResolutionFailure,
    SubmissionFailure,
    UploadFailure,
    # Classification utilities
    classify_http_status,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "PipelineError",
    "PermanentError",
    "ConfigurationError",
    # Stage failures
    "HttpError",
    "AuthenticationFailure",
    "FetchFailure",
    "UploadFailure",
    "SubmissionFailure",
    "ResolutionFailure",
    "HierarchyCycleError",
    # Classification utilities
    "classify_http_status",
]
