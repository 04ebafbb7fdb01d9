"""
Tests for decoding generative-service output.
"""

import pytest

from tj_meal_planner.errors import GenerationParseError
from tj_meal_planner.parsing import parse_search_terms, parse_selection, strip_code_fences


class TestStripCodeFences:
    def test_plain_text_untouched(self):
        assert strip_code_fences(' ["a"] ') == '["a"]'

    def test_json_fence_removed(self):
        assert strip_code_fences('```json\n["a", "b"]\n```') == '["a", "b"]'

    def test_bare_fence_removed(self):
        assert strip_code_fences('```\n[1]\n```') == "[1]"


class TestParseSearchTerms:
    def test_returns_array_in_order_with_duplicates(self):
        assert parse_search_terms('["tofu", "quinoa", "tofu"]') == ["tofu", "quinoa", "tofu"]

    def test_fenced_array(self):
        assert parse_search_terms('```json\n["spinach"]\n```') == ["spinach"]

    @pytest.mark.parametrize("raw", [
        '{"terms": ["tofu"]}',
        '["tofu", "quinoa"',
        "Sure! Here are some ideas: tofu, quinoa",
        '["tofu", 3]',
        '"tofu"',
        "",
    ])
    def test_malformed_raises_with_raw_text(self, raw):
        with pytest.raises(GenerationParseError) as exc_info:
            parse_search_terms(raw)
        assert exc_info.value.raw == raw


class TestParseSelection:
    def test_valid_objects(self):
        items = parse_selection('[{"name": "Tofu", "quantity": 2}, {"name": "Kale", "quantity": 1}]')
        assert [(i.name, i.quantity) for i in items] == [("Tofu", 2), ("Kale", 1)]

    def test_extra_fields_ignored(self):
        items = parse_selection('[{"name": "Tofu", "quantity": 2, "reason": "protein"}]')
        assert items[0].name == "Tofu"

    @pytest.mark.parametrize("raw", [
        '[{"name": "Tofu"}]',
        '[{"quantity": 2}]',
        '[{"name": "Tofu", "quantity": 0}]',
        '[{"name": "Tofu", "quantity": 1.5}]',
        '[{"name": 7, "quantity": 1}]',
        '{"name": "Tofu", "quantity": 2}',
        '[{"name": "Tofu", "quantity": 2}',
        '["Tofu"]',
    ])
    def test_wrong_shape_raises(self, raw):
        with pytest.raises(GenerationParseError) as exc_info:
            parse_selection(raw)
        assert exc_info.value.raw == raw
        assert "errors" in exc_info.value.details
