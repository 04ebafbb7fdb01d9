"""
SSE (Server-Sent Events) utilities.

Provides factory functions for creating SSE events and serialization helpers.
"""

import json
from typing import Any

from tj_meal_planner.errors import PlannerError
from tj_meal_planner.models import GroceryPlan


def sse_event(event_type: str, data: dict) -> dict:
    """
    Format an SSE event for sse-starlette.

    Args:
        event_type: The event type name (e.g., "status", "complete")
        data: The event payload as a dictionary

    Returns:
        Dict formatted for sse-starlette EventSourceResponse
    """
    return {
        "event": event_type,
        "data": json.dumps(data)
    }


def serialize_model(obj: Any) -> Any:
    """
    Serialize a Pydantic model or list of models to JSON-safe values.

    Handles:
    - None values
    - Single Pydantic models with model_dump()
    - Lists of Pydantic models
    - Already-serialized values (passthrough)
    """
    if obj is None:
        return None

    # Handle single Pydantic model
    if hasattr(obj, 'model_dump'):
        return obj.model_dump(mode="json")

    # Handle list of Pydantic models
    if isinstance(obj, list):
        return [serialize_model(item) for item in obj]

    # Already a dict or primitive
    return obj


# Pre-defined event constructors for type safety and consistency


def status_event(node: str, message: str, data: Any = None) -> dict:
    """Create a status SSE event for a finished pipeline stage."""
    return sse_event("status", {
        "node": node,
        "message": message,
        "data": serialize_model(data),
    })


def error_event(error: Exception) -> dict:
    """Create an error SSE event; planner errors keep their stage and details."""
    if isinstance(error, PlannerError):
        return sse_event("error", error.to_dict())
    return sse_event("error", {"error": type(error).__name__, "message": str(error)})


def complete_event(result: GroceryPlan) -> dict:
    """Create a completion SSE event carrying the whole planning result."""
    return sse_event("complete", {
        **result.model_dump(mode="json"),
        "days": result.days,
        "estimated_total": str(result.estimated_total),
    })
