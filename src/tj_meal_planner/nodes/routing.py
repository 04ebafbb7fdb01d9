"""
Routing functions for conditional graph edges.

These functions determine which path the graph takes based on state.
"""

from langgraph.graph import END

from tj_meal_planner.models import PlannerState


def route_by_input(state: PlannerState) -> str:
    """
    Route based on whether the caller already holds a candidate set.

    Returns:
        "filter_products" in filter mode, "derive_terms" otherwise
    """
    if state.get("mode") == "filter":
        return "filter_products"
    return "derive_terms"


def route_after_selection(state: PlannerState) -> str:
    """
    Stop after filtering in filter mode, otherwise go on to the plan.

    Returns:
        END in filter mode, "synthesize_plan" otherwise
    """
    if state.get("mode") == "filter":
        return END
    return "synthesize_plan"
