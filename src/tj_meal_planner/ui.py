"""
UI abstraction layer for the meal planner.

Status output goes to the terminal only in CLI mode.
Set CLI_MODE=false in .env to disable terminal output (for server use).
"""

from typing import List

from tj_meal_planner.config import get_settings
from tj_meal_planner.models import GroceryPlan, SelectionEntry


def _print(text: str) -> None:
    """Print only if CLI mode is enabled."""
    if get_settings().cli_mode:
        print(text)


# --- Status Messages ---

def show_deriving_terms(preferences: str) -> None:
    _print(f"🤖 Choosing grocery searches for: {preferences}")


def show_terms(terms: List[str]) -> None:
    _print(f"✅ Search terms: {', '.join(terms) if terms else '(none)'}")


def show_searching_products(count: int) -> None:
    _print(f"🔍 Searching Trader Joe's for {count} terms...")


def show_term_results(term: str, count: int) -> None:
    _print(f"   • {term}: {count} products")


def show_candidate_count(count: int) -> None:
    _print(f"📋 Found {count} candidate products")


def show_filtering(count: int) -> None:
    _print(f"🤖 Picking products and quantities from {count} candidates...")


def show_selection(matched: int, dropped: List[str]) -> None:
    if dropped:
        _print(f"⚠️  Matched {matched} products, ignored unknown: {', '.join(dropped)}")
    else:
        _print(f"✅ Matched {matched} products")


def show_synthesizing(count: int) -> None:
    _print(f"🍽️  Writing a 7-day meal plan from {count} products...")


def show_plan_ready(days: int) -> None:
    _print(f"✅ Meal plan ready ({days} days)")


# --- Error Messages ---

def show_error(message: str) -> None:
    _print(f"❌ {message}")


# --- Summaries ---

def format_selection(entries: List[SelectionEntry]) -> str:
    """Format the shopping list with quantities. Returns the formatted text."""
    text = "\n🛒 Shopping List:\n"
    text += "-" * 40 + "\n"
    for i, entry in enumerate(entries, 1):
        price = f"${entry.retail_price}" if entry.price is not None else "price n/a"
        size = f" ({entry.package_size})" if entry.package_size else ""
        text += f"{i}. {entry.quantity} x {entry.name}{size} - {price}\n"
    text += "-" * 40
    return text


def format_grocery_plan(result: GroceryPlan) -> str:
    """Format a full planning result for display."""
    text = format_selection(result.selection.entries)
    text += f"\nEstimated total: ${result.estimated_total:.2f}\n"
    text += "\n📅 Meal Plan:\n"
    text += "=" * 40 + "\n"
    text += result.plan.strip() + "\n"
    text += "=" * 40
    return text


def show_grocery_plan(result: GroceryPlan) -> str:
    """Display a planning result and return the formatted text."""
    text = format_grocery_plan(result)
    _print(text)
    return text
