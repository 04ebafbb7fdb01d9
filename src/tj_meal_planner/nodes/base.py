"""
Shared infrastructure for graph nodes.

Defines the two collaborator interfaces the pipeline depends on (text
generation and product search), the default implementations, and helpers
for pulling injected collaborators out of a graph run config.
"""

import asyncio
import logging
from typing import List, Optional, Protocol

import openai
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_core.runnables import RunnableConfig
from langchain_openai import ChatOpenAI

from tj_meal_planner.config import Settings, get_settings
from tj_meal_planner.errors import ExternalServiceError
from tj_meal_planner.models import ProductQuery, RawProduct
from tj_meal_planner.retailer import TraderJoesClient


logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Anything that turns a prompt into free-form text."""

    async def generate(self, prompt: str, temperature: float) -> str:
        ...


class ProductSearch(Protocol):
    """Anything that answers a retailer product query."""

    async def search(self, query: ProductQuery) -> List[RawProduct]:
        ...


class ChatModelGenerator:
    """TextGenerator backed by a LangChain chat model (ChatOpenAI by default)."""

    def __init__(
        self,
        llm: Optional[BaseChatModel] = None,
        timeout: Optional[float] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self._llm = llm or ChatOpenAI(
            model=settings.chat_model,
            timeout=settings.generation_timeout,
            max_retries=0,
        )
        self._timeout = timeout if timeout is not None else settings.generation_timeout

    async def generate(self, prompt: str, temperature: float) -> str:
        """
        Send a single user message and return the reply text.

        Raises:
            ExternalServiceError: on timeout or any OpenAI API failure
        """
        model = self._llm.bind(temperature=temperature)
        try:
            message = await asyncio.wait_for(
                model.ainvoke([HumanMessage(content=prompt)]),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise ExternalServiceError(
                f"Generative service timed out after {self._timeout}s",
                service="generative",
            ) from e
        except openai.OpenAIError as e:
            raise ExternalServiceError(
                f"Generative service request failed: {e}",
                service="generative",
            ) from e

        content = message.content
        if isinstance(content, list):
            # Content blocks: keep the text parts only
            content = "".join(
                block if isinstance(block, str) else block.get("text", "")
                for block in content
            )
        logger.debug(f"Generative response ({len(content)} chars): {content!r}")
        return content


# Singleton instances
_generator: Optional[TextGenerator] = None
_product_search: Optional[ProductSearch] = None


def get_generator() -> TextGenerator:
    """Get the default text generator."""
    global _generator
    if _generator is None:
        _generator = ChatModelGenerator()
    return _generator


def get_product_search() -> ProductSearch:
    """Get the default product search client."""
    global _product_search
    if _product_search is None:
        _product_search = TraderJoesClient()
    return _product_search


def generator_from_config(config: Optional[RunnableConfig]) -> TextGenerator:
    """Return the generator injected into a graph run, or the default one."""
    configurable = (config or {}).get("configurable", {})
    return configurable.get("generator") or get_generator()


def product_search_from_config(config: Optional[RunnableConfig]) -> ProductSearch:
    """Return the product search injected into a graph run, or the default one."""
    configurable = (config or {}).get("configurable", {})
    return configurable.get("product_search") or get_product_search()
