"""
Tests for search term derivation.
"""

import pytest

from tj_meal_planner.config import Settings
from tj_meal_planner.errors import ExternalServiceError, GenerationParseError
from tj_meal_planner.nodes.terms import derive_terms

from conftest import StubGenerator


async def test_returns_generated_terms_in_order():
    generator = StubGenerator('["tempeh", "quinoa", "avocados", "tempeh"]')

    terms = await derive_terms("vegan", generator)

    assert terms == ["tempeh", "quinoa", "avocados", "tempeh"]


async def test_prompt_carries_preferences_and_temperature():
    generator = StubGenerator('["tofu"]')

    await derive_terms("vegetarian, high protein", generator, Settings(term_temperature=0.3))

    prompt, temperature = generator.calls[0]
    assert '"vegetarian, high protein"' in prompt
    assert "JSON array" in prompt
    assert temperature == 0.3


async def test_single_generation_call():
    generator = StubGenerator('["tofu"]')
    await derive_terms("vegan", generator)
    assert len(generator.calls) == 1


@pytest.mark.parametrize("raw", ['{"items": []}', '["tofu", "qui', "tofu, quinoa"])
async def test_malformed_reply_fails_with_stage(raw):
    generator = StubGenerator(raw)

    with pytest.raises(GenerationParseError) as exc_info:
        await derive_terms("vegan", generator)

    assert exc_info.value.raw == raw
    assert exc_info.value.stage == "derive_terms"


async def test_service_failure_tagged_with_stage():
    generator = StubGenerator(ExternalServiceError("boom", service="generative"))

    with pytest.raises(ExternalServiceError) as exc_info:
        await derive_terms("vegan", generator)

    assert exc_info.value.stage == "derive_terms"
