"""
Prompt templates for the grocery meal planner.
"""

from typing import Sequence

from tj_meal_planner.models import ProductRecord, SelectionEntry


def format_candidate_line(index: int, product: ProductRecord) -> str:
    """Format one candidate as "N. name - size (description)"."""
    line = f"{index}. {product.name} - {product.package_size or 'N/A'}"
    if product.description:
        line += f" ({product.description})"
    return line


def format_candidate_list(candidates: Sequence[ProductRecord]) -> str:
    return "\n".join(
        format_candidate_line(i, product)
        for i, product in enumerate(candidates, 1)
    )


def format_selection_list(selection: Sequence[SelectionEntry]) -> str:
    return "\n".join(
        f"- {entry.name} ({entry.package_size or 'N/A'})"
        for entry in selection
    )


def get_search_terms_prompt(preferences: str) -> str:
    """Prompt for turning preferences into grocery search terms."""
    return f"""You are helping a user plan a grocery trip based on their dietary needs.

Preferences: "{preferences}"

Return a JSON array of ingredients or grocery items they should search for.
ONLY return the array. Example: ["tempeh", "quinoa", "avocados", "tofu", "spinach"]"""


def get_filter_products_prompt(preferences: str, candidates: Sequence[ProductRecord]) -> str:
    """Prompt for choosing products and quantities from the candidate list."""
    return f"""User preferences: "{preferences}"

Here is a list of grocery products:

{format_candidate_list(candidates)}

Return a JSON array of product objects that match the preferences.
Each object must include:
- name (must exactly match a name in the list)
- quantity (number of times it should be purchased for the week's meals)

Example:
[
  {{ "name": "Tofu", "quantity": 2 }},
  {{ "name": "Coconut Yogurt", "quantity": 1 }}
]

Check the prices and the quantity of each to plan for the week. Make sure it is not too expensive, but the person has enough food.

ONLY return the array."""


def get_meal_plan_prompt(preferences: str, selection: Sequence[SelectionEntry]) -> str:
    """Prompt for a 7-day plan restricted to the selected products."""
    return f"""You are a meal planning assistant.

User preferences: "{preferences}"

Available products at Trader Joe's this week:
{format_selection_list(selection)}

Using ONLY these products, create a 7-day meal plan with breakfast, lunch, and dinner each day.
Each meal should name the product(s) used. Do not add products that are not in the list.
Keep it simple and realistic. No recipes needed.

Format:
Day 1:
- Breakfast: ...
- Lunch: ...
- Dinner: ...
..."""


def get_draft_meal_plan_prompt(preferences: str) -> str:
    """Prompt for a 7-day plan from preferences alone (no product lookup)."""
    return f"""Create a 7-day meal plan for someone with the following preferences and dietary restrictions:
"{preferences}"

Each day should include:
- Breakfast, lunch, and dinner
- A list of ingredients needed for each meal
- Prefer Trader Joe's style ingredients when possible
- No recipes needed

Format:
Day 1:
- Breakfast: ...
  Ingredients: ...
..."""
