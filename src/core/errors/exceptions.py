"""
Unified exception hierarchy for the task-request pipeline.

Provides typed exceptions with a category and a pipeline stage so a failed
run can report which step broke and why.
"""

from typing import Any

# Import ErrorCategory from canonical source to avoid duplicate enum issues
# (comparing enums from different classes always returns False)
from core.types import ErrorCategory


class PipelineError(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error description
        category: Error classification
        stage: Pipeline stage the error belongs to
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN
    stage: str = "pipeline"

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
        category: ErrorCategory | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        if category is not None:
            self.category = category
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Base Categories
# =============================================================================


class PermanentError(PipelineError):
    """Base class for errors that won't go away on their own."""

    category = ErrorCategory.PERMANENT


class ConfigurationError(PermanentError):
    """Missing or invalid configuration, raised before any network call."""

    stage = "configure"


# =============================================================================
# HTTP Errors
# =============================================================================


class HttpError(PipelineError):
    """
    Failure of a single HTTP call.

    Carries the request path, the HTTP status (None for transport failures)
    and the remote error payload when the server sent one.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        status_code: int | None = None,
        payload: Any = None,
        cause: Exception | None = None,
        context: dict | None = None,
        category: ErrorCategory | None = None,
    ):
        if category is None:
            category = (
                classify_http_status(status_code)
                if status_code is not None
                else ErrorCategory.TRANSIENT
            )
        super().__init__(message, cause=cause, context=context, category=category)
        self.path = path
        self.status_code = status_code
        self.payload = payload


class AuthenticationFailure(HttpError):
    """Token endpoint rejected the API key or returned an unusable payload."""

    stage = "authenticate"

    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("category", ErrorCategory.AUTH)
        super().__init__(message, **kwargs)


class FetchFailure(HttpError):
    """A GET against the platform failed. Tagged with the request path."""

    stage = "fetch"


class UploadFailure(HttpError):
    """Image upload failed: file missing locally, or blob authorization/PUT rejected."""

    stage = "upload"


class SubmissionFailure(HttpError):
    """The task request POST was rejected. ``payload`` holds the remote error body."""

    stage = "submit"


# =============================================================================
# Resolution Errors
# =============================================================================


class ResolutionFailure(PermanentError):
    """
    A required lookup found no match, or the data had an unexpected shape.

    The failed predicate's input is echoed back in ``context`` so a bad
    user name can be told apart from an empty collection.
    """

    stage = "resolve"

    def __init__(
        self,
        message: str,
        entity: str,
        field: str | None = None,
        value: Any = None,
        candidates: int | None = None,
        cause: Exception | None = None,
    ):
        context = {"entity": entity}
        if field is not None:
            context["field"] = field
            context["value"] = value
        if candidates is not None:
            context["candidates"] = candidates
        super().__init__(message, cause=cause, context=context)
        self.entity = entity
        self.field = field
        self.value = value
        self.candidates = candidates


class HierarchyCycleError(ResolutionFailure):
    """A code element id was reached twice while building the hierarchy."""

    def __init__(self, node_id: Any):
        super().__init__(
            f"Code element {node_id!r} reached more than once while building "
            "the hierarchy (cycle or duplicate id)",
            entity="code_element",
            field="id",
            value=node_id,
        )
        self.node_id = node_id


# =============================================================================
# Error Classification
# =============================================================================


def classify_http_status(status_code: int) -> ErrorCategory:
    """Classify HTTP status code into error category."""
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code == 401:
        return ErrorCategory.AUTH

    if status_code == 429:
        return ErrorCategory.TRANSIENT  # Rate limited

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT  # Client errors, won't fix themselves

    if status_code >= 500:
        return ErrorCategory.TRANSIENT  # Server errors, may recover

    return ErrorCategory.UNKNOWN
