"""
Core library: reusable, infrastructure-agnostic components.

Modules:
    logging     - Structured JSON/console logging with run and stage context
    errors      - Error classification and stage-tagged exception hierarchy
    utils       - JSON serialization helpers and run identifiers

Design Principles:
    - No dependencies on the facility-management API itself
    - All modules are independently testable
"""

from .types import ErrorCategory

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
]
