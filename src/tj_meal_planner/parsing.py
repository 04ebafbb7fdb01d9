"""
Decoding of generative-service output.

The model is only asked (not forced) to answer with JSON, so every response
goes through one adapter per expected shape: decode and validate, or raise
GenerationParseError with the raw text attached.
"""

import logging
import re
from typing import List, TypeVar

import pydantic
from pydantic import StrictStr, TypeAdapter

from tj_meal_planner.errors import GenerationParseError
from tj_meal_planner.models import SelectionItem


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Models like to wrap JSON in ```json fences even when told not to
_OPEN_FENCE = re.compile(r"^```[a-zA-Z0-9]*[ \t]*\n?")
_CLOSE_FENCE = re.compile(r"\n?[ \t]*```$")

_SEARCH_TERMS: TypeAdapter[List[StrictStr]] = TypeAdapter(List[StrictStr])
_SELECTION: TypeAdapter[List[SelectionItem]] = TypeAdapter(List[SelectionItem])


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    text = text.strip()
    if text.startswith("```"):
        text = _OPEN_FENCE.sub("", text)
        text = _CLOSE_FENCE.sub("", text)
    return text.strip()


def decode_json_array(raw: str, adapter: TypeAdapter[T], expected: str) -> T:
    """
    Decode raw model output into a validated value.

    Args:
        raw: Untouched response text from the generative service
        adapter: Pydantic adapter describing the expected array shape
        expected: Short description used in the error message

    Returns:
        The validated value

    Raises:
        GenerationParseError: if the text is not valid JSON of that shape
    """
    try:
        return adapter.validate_json(strip_code_fences(raw))
    except pydantic.ValidationError as e:
        logger.debug(f"Could not decode {expected} from: {raw!r}")
        raise GenerationParseError(
            f"Generative service did not return {expected}",
            raw=raw,
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e


def parse_search_terms(raw: str) -> List[str]:
    """Decode a JSON array of search strings."""
    return decode_json_array(raw, _SEARCH_TERMS, "a JSON array of strings")


def parse_selection(raw: str) -> List[SelectionItem]:
    """Decode a JSON array of {name, quantity} objects."""
    return decode_json_array(raw, _SELECTION, "a JSON array of {name, quantity} objects")
