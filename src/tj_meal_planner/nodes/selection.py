"""
Product selection.

Asks the generative service to pick products and quantities from the
candidate set, then maps the names it wrote back onto real candidates.
"""

import logging
from typing import List, Optional, Sequence

from langchain_core.runnables import RunnableConfig

from tj_meal_planner.config import Settings, get_settings
from tj_meal_planner.errors import pipeline_stage
from tj_meal_planner.models import (
    PlannerState,
    ProductRecord,
    SelectionEntry,
    SelectionItem,
    SelectionResult,
    estimate_total_cost,
)
from tj_meal_planner.nodes.base import TextGenerator, generator_from_config
from tj_meal_planner.parsing import parse_selection
from tj_meal_planner.prompts import get_filter_products_prompt
from tj_meal_planner import ui


logger = logging.getLogger(__name__)

STAGE = "filter_products"

__all__ = [
    "find_candidate",
    "reconcile_selection",
    "filter_products",
    "filter_products_node",
    "estimate_total_cost",
]


def find_candidate(name: str, candidates: Sequence[ProductRecord]) -> Optional[ProductRecord]:
    """
    Find the first candidate whose name contains ``name``, ignoring case.

    Returns None for a blank name, since it would match everything.
    """
    needle = name.strip().casefold()
    if not needle:
        return None
    for candidate in candidates:
        if needle in candidate.name.casefold():
            return candidate
    return None


def reconcile_selection(
    requested: Sequence[SelectionItem],
    candidates: Sequence[ProductRecord],
) -> SelectionResult:
    """
    Map requested names onto candidates.

    First match in candidate order wins. Requests with no match are left
    out of ``entries`` and listed in ``dropped``. Entries keep the order
    of ``requested``; one candidate matched by two requests gives two
    entries.
    """
    entries: List[SelectionEntry] = []
    dropped: List[str] = []

    for item in requested:
        candidate = find_candidate(item.name, candidates)
        if candidate is None:
            logger.debug(f"No candidate matches {item.name!r}, dropping it")
            dropped.append(item.name)
            continue
        logger.debug(f"Matched {item.name!r} -> {candidate.name!r} x{item.quantity}")
        entries.append(SelectionEntry(**candidate.model_dump(exclude={"quantity"}), quantity=item.quantity))

    return SelectionResult(entries=entries, dropped=dropped)


async def filter_products(
    preferences: str,
    candidates: Sequence[ProductRecord],
    generator: TextGenerator,
    settings: Optional[Settings] = None,
) -> SelectionResult:
    """
    Choose products and weekly quantities that fit the preferences.

    An empty candidate set gives an empty result without calling the
    generative service.

    Raises:
        GenerationParseError: if the reply is not a JSON array of
            {name, quantity} objects
        ExternalServiceError: if the generative service call fails
    """
    if not candidates:
        logger.info("No candidates to filter")
        return SelectionResult()

    settings = settings or get_settings()
    with pipeline_stage(STAGE):
        raw = await generator.generate(
            get_filter_products_prompt(preferences, candidates),
            temperature=settings.selection_temperature,
        )
        requested = parse_selection(raw)

    result = reconcile_selection(requested, candidates)
    logger.info(
        f"Selection: {len(requested)} requested, {len(result.entries)} matched, "
        f"{len(result.dropped)} dropped"
    )
    return result


async def filter_products_node(state: PlannerState, config: RunnableConfig) -> dict:
    """
    Reads: preferences, candidates
    Writes: selection
    """
    candidates = state.get("candidates") or []
    ui.show_filtering(len(candidates))

    selection = await filter_products(
        state["preferences"],
        candidates,
        generator_from_config(config),
    )

    ui.show_selection(len(selection.entries), selection.dropped)
    return {"selection": selection}
