"""
Pytest configuration and shared fixtures.

Provides deterministic stand-ins for the generative service and the
retailer product search.
"""

import json
from typing import Callable, Dict, List, Optional, Union

import pytest

from tj_meal_planner.errors import ExternalServiceError
from tj_meal_planner.models import ProductQuery, ProductRecord, RawProduct


Reply = Union[str, Exception, Callable[[str], str]]


class StubGenerator:
    """TextGenerator that replays canned replies in order and records calls."""

    def __init__(self, *replies: Reply):
        self.replies: List[Reply] = list(replies)
        self.calls: List[tuple[str, float]] = []

    async def generate(self, prompt: str, temperature: float) -> str:
        self.calls.append((prompt, temperature))
        if not self.replies:
            raise AssertionError(f"Unexpected generate() call #{len(self.calls)}")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(prompt)
        return reply

    @property
    def prompts(self) -> List[str]:
        return [prompt for prompt, _ in self.calls]


class StubProductSearch:
    """ProductSearch answering from a term -> items table."""

    def __init__(
        self,
        catalog: Optional[Dict[str, List[dict]]] = None,
        failing: Optional[set] = None,
    ):
        self.catalog = catalog or {}
        self.failing = failing or set()
        self.queries: List[ProductQuery] = []

    async def search(self, query: ProductQuery) -> List[RawProduct]:
        self.queries.append(query)
        if query.search_text in self.failing:
            raise ExternalServiceError(
                f"search failed for {query.search_text!r}", service="retailer"
            )
        return [RawProduct(**item) for item in self.catalog.get(query.search_text, [])]


def as_json(value) -> str:
    return json.dumps(value)


@pytest.fixture
def catalog() -> Dict[str, List[dict]]:
    return {
        "tofu": [
            {"name": "Organic Tofu", "retail_price": "2.99", "sales_size": "14 oz"},
        ],
        "quinoa": [
            {"name": "Quinoa Blend", "retail_price": "4.49"},
        ],
    }


@pytest.fixture
def product_search(catalog) -> StubProductSearch:
    return StubProductSearch(catalog)


@pytest.fixture
def tofu_candidates() -> List[ProductRecord]:
    return [
        ProductRecord(name="Organic Tofu", retail_price="2.99", package_size="14 oz", matched_term="tofu"),
        ProductRecord(name="Firm Tofu", retail_price="1.99", package_size="16 oz", matched_term="tofu"),
    ]


@pytest.fixture(autouse=True)
def quiet_ui(monkeypatch):
    """Keep status prints out of test output."""
    monkeypatch.setattr("tj_meal_planner.ui._print", lambda text: None)
