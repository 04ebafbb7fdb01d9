"""
Trader Joe's Meal Planner - grocery list and meal plan generation
"""

from tj_meal_planner.errors import (
    PlannerError,
    ValidationError,
    GenerationParseError,
    ExternalServiceError,
)
from tj_meal_planner.meal_planner import (
    build_grocery_planner_graph,
    plan_groceries,
    filter_candidates,
    run_grocery_planner,
)
from tj_meal_planner.models import (
    GroceryPlan,
    PlannerState,
    ProductRecord,
    SelectionEntry,
    SelectionResult,
)

__all__ = [
    "PlannerError",
    "ValidationError",
    "GenerationParseError",
    "ExternalServiceError",
    "build_grocery_planner_graph",
    "plan_groceries",
    "filter_candidates",
    "run_grocery_planner",
    "GroceryPlan",
    "PlannerState",
    "ProductRecord",
    "SelectionEntry",
    "SelectionResult",
]
