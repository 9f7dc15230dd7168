"""
Core types shared across modules.

This module provides base enums used by the error hierarchy and the API
clients so that error classification stays consistent.
"""

from enum import Enum


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    The pipeline never retries, but the category is still recorded on every
    failure so operators can tell a flaky network from a rejected request.

    Categories:
        TRANSIENT: Temporary failures (network timeouts, 429/5xx responses)
        AUTH: Authentication failures (401, token endpoint rejections)
        PERMANENT: Failures that won't succeed when repeated
                   (404, validation errors, unresolved lookups, bad config)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


__all__ = [
    "ErrorCategory",
]
