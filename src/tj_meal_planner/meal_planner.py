"""
Grocery Meal Planner using LangGraph

Workflow:
1. User describes dietary preferences (e.g., "vegetarian, high protein")
2. LLM turns the preferences into grocery search terms
3. Each term is searched at Trader Joe's; results form the candidate set
4. LLM picks products and weekly quantities; names are matched back onto
   the candidate set (unknown names are dropped)
5. LLM writes a 7-day meal plan using only the selected products

A caller that already holds a candidate set can run step 4 alone.
Any failing step aborts the run; nothing is kept between runs.
"""

import asyncio
import logging
import sys
from typing import Any, List, Optional

import pydantic
from langchain_core.runnables import RunnableConfig
from langgraph.graph import START, END, StateGraph
from pydantic import TypeAdapter

from tj_meal_planner.config import get_settings
from tj_meal_planner.errors import PlannerError, ValidationError
from tj_meal_planner.models import GroceryPlan, PlannerState, ProductRecord, SelectionResult
from tj_meal_planner.nodes import (
    derive_terms_node,
    retrieve_products_node,
    filter_products_node,
    synthesize_plan_node,
    route_by_input,
    route_after_selection,
)
from tj_meal_planner.nodes.base import ProductSearch, TextGenerator
from tj_meal_planner import ui


logger = logging.getLogger(__name__)

_CANDIDATES: TypeAdapter[List[ProductRecord]] = TypeAdapter(List[ProductRecord])


def build_grocery_planner_graph():
    """Build the planning graph.

    Supports two entry modes:
    - Compose mode: derive terms, retrieve products, filter, write the plan
    - Filter mode: caller supplies candidates, only the filter runs
    """
    builder = StateGraph(PlannerState)

    builder.add_node("derive_terms", derive_terms_node)
    builder.add_node("retrieve_products", retrieve_products_node)
    builder.add_node("filter_products", filter_products_node)
    builder.add_node("synthesize_plan", synthesize_plan_node)

    # Entry routing: full pipeline vs filter only
    builder.add_conditional_edges(START, route_by_input)

    builder.add_edge("derive_terms", "retrieve_products")
    builder.add_edge("retrieve_products", "filter_products")
    builder.add_conditional_edges("filter_products", route_after_selection)
    builder.add_edge("synthesize_plan", END)

    # No checkpointer: runs share nothing
    return builder.compile()


def build_run_config(
    generator: Optional[TextGenerator] = None,
    search: Optional[ProductSearch] = None,
) -> RunnableConfig:
    """Put the collaborators for one run into a graph config."""
    configurable: dict[str, Any] = {}
    if generator is not None:
        configurable["generator"] = generator
    if search is not None:
        configurable["product_search"] = search
    return {"configurable": configurable}


def validate_preferences(preferences: Any) -> str:
    """Reject missing or blank preferences before any external call."""
    if not isinstance(preferences, str) or not preferences.strip():
        raise ValidationError("Missing 'preferences'", details={"field": "preferences"})
    return preferences.strip()


def validate_candidates(candidates: Any) -> List[ProductRecord]:
    """Coerce a caller-supplied product list into ProductRecords."""
    if not isinstance(candidates, (list, tuple)):
        raise ValidationError(
            "'products' must be a list of products",
            details={"field": "products"},
        )
    try:
        return _CANDIDATES.validate_python(list(candidates))
    except pydantic.ValidationError as e:
        raise ValidationError(
            "Invalid product in 'products'",
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e


async def plan_groceries(
    preferences: str,
    generator: Optional[TextGenerator] = None,
    search: Optional[ProductSearch] = None,
) -> GroceryPlan:
    """
    Run the full pipeline: terms -> candidates -> selection -> plan.

    Args:
        preferences: Free-text dietary preferences
        generator: Text generator to use (defaults to ChatOpenAI)
        search: Product search to use (defaults to Trader Joe's)

    Returns:
        GroceryPlan with every intermediate artifact

    Raises:
        ValidationError: if preferences are blank
        PlannerError: the first stage failure, tagged with its stage
    """
    preferences = validate_preferences(preferences)
    graph = build_grocery_planner_graph()

    state = await graph.ainvoke(
        {"mode": "compose", "preferences": preferences},
        config=build_run_config(generator, search),
    )

    return GroceryPlan(
        preferences=preferences,
        terms=state["terms"],
        candidates=state["candidates"],
        selection=state["selection"],
        plan=state["plan"],
    )


async def filter_candidates(
    preferences: str,
    candidates: Any,
    generator: Optional[TextGenerator] = None,
) -> SelectionResult:
    """
    Run only the selection filter against a caller-supplied candidate set.

    ``candidates`` may hold ProductRecords or plain dicts (either our field
    names or the retailer's).

    Raises:
        ValidationError: if preferences are blank or candidates are not a list
        PlannerError: if the filter stage fails
    """
    preferences = validate_preferences(preferences)
    records = validate_candidates(candidates)
    graph = build_grocery_planner_graph()

    state = await graph.ainvoke(
        {"mode": "filter", "preferences": preferences, "candidates": records},
        config=build_run_config(generator),
    )
    return state["selection"]


async def run_grocery_planner(preferences: str) -> GroceryPlan:
    """Run the planner with the default collaborators and print the result."""
    print(f"\n{'='*60}")
    print(f"🛒 Planning groceries for: {preferences}")
    print(f"{'='*60}\n")

    result = await plan_groceries(preferences)
    ui.show_grocery_plan(result)
    return result


def main() -> int:
    """Interactive main function."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    print("\n🍽️  Welcome to the Trader Joe's Meal Planner!")
    print("-" * 40)

    preferences = input("Describe your dietary preferences: ").strip()

    if not preferences:
        preferences = "vegetarian, high protein"
        print(f"Using default: {preferences}")

    try:
        asyncio.run(run_grocery_planner(preferences))
    except PlannerError as e:
        logger.debug("Planner failed", exc_info=True)
        ui.show_error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
