"""
Data models and state definitions for the grocery meal planner.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, List, Literal, Optional, TypedDict

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    computed_field,
    field_validator,
)


def _stringify_number(value: Any) -> Any:
    # The GraphQL API is inconsistent about quoting numeric fields
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


# Retailer-facing models

class ProductQuery(BaseModel):
    """One product search against the retailer."""
    search_text: str
    store_code: str
    page_size: int = 15
    page_offset: int = 0


class RawProduct(BaseModel):
    """A product item exactly as the retailer search returns it."""
    model_config = ConfigDict(extra="ignore")

    name: str
    item_description: Optional[str] = None
    primary_image: Optional[str] = None
    retail_price: Optional[str] = None
    sales_size: Optional[str] = None
    sales_uom_description: Optional[str] = None

    @field_validator("retail_price", "sales_size", mode="before")
    @classmethod
    def _numbers_as_text(cls, value: Any) -> Any:
        return _stringify_number(value)


# Pipeline records

class ProductRecord(BaseModel):
    """A retailer product tagged with the search term that found it.

    Also accepts the retailer's own field names (sales_size, item_description,
    ...) so raw search items can be passed straight to the selection filter.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    description: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("description", "item_description")
    )
    image_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("image_url", "primary_image")
    )
    retail_price: Optional[str] = None
    package_size: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("package_size", "sales_size")
    )
    unit_description: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("unit_description", "sales_uom_description")
    )
    matched_term: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("matched_term", "matchedTerm"),
        description="Search term that produced this record (set at retrieval time)",
    )

    @field_validator("retail_price", "package_size", mode="before")
    @classmethod
    def _numbers_as_text(cls, value: Any) -> Any:
        return _stringify_number(value)

    @property
    def price(self) -> Optional[Decimal]:
        return parse_price(self.retail_price)


class SelectionItem(BaseModel):
    """One {name, quantity} pick as returned by the generative service."""
    name: str = Field(description="Product name as the model wrote it")
    quantity: PositiveInt = Field(description="How many to buy for the week")


class SelectionEntry(ProductRecord):
    """A candidate product annotated with a purchase quantity."""
    quantity: int

    @property
    def line_total(self) -> Decimal:
        price = self.price
        if price is None:
            return Decimal("0")
        return price * self.quantity


class SelectionResult(BaseModel):
    """Outcome of the selection filter.

    ``dropped`` lists requested names that matched no candidate.
    """
    entries: List[SelectionEntry] = Field(default_factory=list)
    dropped: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def estimated_total(self) -> Decimal:
        return estimate_total_cost(self.entries)


class GroceryPlan(BaseModel):
    """Everything a composed planning run produces."""
    preferences: str
    terms: List[str]
    candidates: List[ProductRecord]
    selection: SelectionResult
    plan: str

    @property
    def days(self) -> dict[int, str]:
        return split_plan_days(self.plan)

    @property
    def estimated_total(self) -> Decimal:
        return self.selection.estimated_total


# Pricing helpers

def parse_price(value: Optional[str]) -> Optional[Decimal]:
    """Parse a retail price string ("2.99", "$4.49"). Returns None if unparseable."""
    if value is None:
        return None
    text = str(value).strip().lstrip("$").strip()
    if not text:
        return None
    try:
        price = Decimal(text)
    except InvalidOperation:
        return None
    if not price.is_finite():
        return None
    return price


def estimate_total_cost(entries: List[SelectionEntry]) -> Decimal:
    """Sum price * quantity; entries without a usable price count as 0."""
    return sum((entry.line_total for entry in entries), Decimal("0"))


# Meal plan documents

_DAY_HEADER = re.compile(r"^[ \t#*]*Day[ \t]+(\d+)[ \t]*:[ \t*]*", re.IGNORECASE | re.MULTILINE)


def split_plan_days(plan: str) -> dict[int, str]:
    """
    Split a meal plan document on its "Day N:" headers.

    Text before the first header is ignored. A repeated day number keeps
    the first section.

    Returns:
        Mapping of day number to the stripped section body
    """
    headers = list(_DAY_HEADER.finditer(plan))
    days: dict[int, str] = {}
    for i, header in enumerate(headers):
        end = headers[i + 1].start() if i + 1 < len(headers) else len(plan)
        days.setdefault(int(header.group(1)), plan[header.end():end].strip())
    return days


# Graph state definition

class PlannerState(TypedDict, total=False):
    """State for the planning graph."""
    # Entry mode: full pipeline or selection filter only
    mode: Literal["compose", "filter"]

    preferences: str
    terms: Optional[List[str]]
    candidates: Optional[List[ProductRecord]]
    selection: Optional[SelectionResult]
    plan: Optional[str]
