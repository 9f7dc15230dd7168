"""Core utility functions."""

from core.utils.json_serializers import json_serializer
from core.utils.run_id import generate_run_id

__all__ = ["json_serializer", "generate_run_id"]
