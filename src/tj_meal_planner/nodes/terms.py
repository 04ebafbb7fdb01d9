"""
Search term derivation.

Turns the free-text preferences into grocery search terms.
"""

import logging
from typing import List, Optional

from langchain_core.runnables import RunnableConfig

from tj_meal_planner.config import Settings, get_settings
from tj_meal_planner.errors import pipeline_stage
from tj_meal_planner.models import PlannerState
from tj_meal_planner.nodes.base import TextGenerator, generator_from_config
from tj_meal_planner.parsing import parse_search_terms
from tj_meal_planner.prompts import get_search_terms_prompt
from tj_meal_planner import ui


logger = logging.getLogger(__name__)

STAGE = "derive_terms"


async def derive_terms(
    preferences: str,
    generator: TextGenerator,
    settings: Optional[Settings] = None,
) -> List[str]:
    """
    Ask the generative service which groceries to search for.

    Terms come back in generated order, duplicates included.

    Raises:
        GenerationParseError: if the reply is not a JSON array of strings
        ExternalServiceError: if the generative service call fails
    """
    settings = settings or get_settings()
    with pipeline_stage(STAGE):
        raw = await generator.generate(
            get_search_terms_prompt(preferences),
            temperature=settings.term_temperature,
        )
        terms = parse_search_terms(raw)

    logger.info(f"Derived {len(terms)} search terms: {terms}")
    return terms


async def derive_terms_node(state: PlannerState, config: RunnableConfig) -> dict:
    """
    Reads: preferences
    Writes: terms
    """
    preferences = state["preferences"]
    ui.show_deriving_terms(preferences)

    terms = await derive_terms(preferences, generator_from_config(config))

    ui.show_terms(terms)
    return {"terms": terms}
