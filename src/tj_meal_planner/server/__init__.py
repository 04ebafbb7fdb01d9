"""
Server components for the Meal Planner API.

This package contains:
- sse: SSE event factory and serialization utilities
"""

from tj_meal_planner.server.sse import (
    sse_event,
    serialize_model,
    status_event,
    error_event,
    complete_event,
)


__all__ = [
    "sse_event",
    "serialize_model",
    "status_event",
    "error_event",
    "complete_event",
]
