"""
Graph node implementations for the grocery meal planner.

This package contains the pipeline stages in the order they run:
- terms: search term derivation
- products: retailer product retrieval
- selection: product choice and name reconciliation
- plan: meal plan synthesis
- routing: conditional edge functions for graph routing

Each stage exposes a plain async function (usable on its own with injected
collaborators) and a graph node wrapper around it.
"""

from tj_meal_planner.nodes.routing import (
    route_by_input,
    route_after_selection,
)

from tj_meal_planner.nodes.terms import (
    derive_terms,
    derive_terms_node,
)

from tj_meal_planner.nodes.products import (
    retrieve,
    retrieve_all,
    retrieve_products_node,
)

from tj_meal_planner.nodes.selection import (
    reconcile_selection,
    filter_products,
    filter_products_node,
)

from tj_meal_planner.nodes.plan import (
    synthesize_plan,
    draft_meal_plan,
    synthesize_plan_node,
)


__all__ = [
    # Routing
    "route_by_input",
    "route_after_selection",
    # Terms
    "derive_terms",
    "derive_terms_node",
    # Products
    "retrieve",
    "retrieve_all",
    "retrieve_products_node",
    # Selection
    "reconcile_selection",
    "filter_products",
    "filter_products_node",
    # Plan
    "synthesize_plan",
    "draft_meal_plan",
    "synthesize_plan_node",
]
