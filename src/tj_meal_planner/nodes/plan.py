"""
Meal plan synthesis.
"""

import logging
from typing import Optional, Sequence

from langchain_core.runnables import RunnableConfig

from tj_meal_planner.config import Settings, get_settings
from tj_meal_planner.errors import GenerationParseError, pipeline_stage
from tj_meal_planner.models import PlannerState, SelectionEntry, split_plan_days
from tj_meal_planner.nodes.base import TextGenerator, generator_from_config
from tj_meal_planner.prompts import get_draft_meal_plan_prompt, get_meal_plan_prompt
from tj_meal_planner import ui


logger = logging.getLogger(__name__)

STAGE = "synthesize_plan"

__all__ = ["synthesize_plan", "draft_meal_plan", "synthesize_plan_node", "split_plan_days"]


def _require_text(raw: str, what: str) -> str:
    if not raw or not raw.strip():
        raise GenerationParseError(f"Generative service returned an empty {what}", raw=raw or "")
    return raw.strip()


async def synthesize_plan(
    preferences: str,
    selection: Sequence[SelectionEntry],
    generator: TextGenerator,
    settings: Optional[Settings] = None,
) -> str:
    """
    Write a 7-day plan that only uses the selected products.

    The result is plain text with "Day N:" sections; it is not checked
    against the product list.
    """
    settings = settings or get_settings()
    with pipeline_stage(STAGE):
        raw = await generator.generate(
            get_meal_plan_prompt(preferences, selection),
            temperature=settings.plan_temperature,
        )
        return _require_text(raw, "meal plan")


async def draft_meal_plan(
    preferences: str,
    generator: TextGenerator,
    settings: Optional[Settings] = None,
) -> str:
    """Write a 7-day plan with per-meal ingredients from preferences alone."""
    settings = settings or get_settings()
    with pipeline_stage("draft_plan"):
        raw = await generator.generate(
            get_draft_meal_plan_prompt(preferences),
            temperature=settings.plan_temperature,
        )
        return _require_text(raw, "meal plan")


async def synthesize_plan_node(state: PlannerState, config: RunnableConfig) -> dict:
    """
    Reads: preferences, selection
    Writes: plan
    """
    selection = state.get("selection")
    entries = selection.entries if selection else []
    ui.show_synthesizing(len(entries))

    plan = await synthesize_plan(state["preferences"], entries, generator_from_config(config))

    ui.show_plan_ready(len(split_plan_days(plan)))
    return {"plan": plan}
