"""
Tests for the LangChain-backed text generator.
"""

import asyncio
from typing import Any, List

import httpx
import openai
import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult

from tj_meal_planner.errors import ExternalServiceError
from tj_meal_planner.nodes.base import ChatModelGenerator, generator_from_config

from conftest import StubGenerator


class RecordingChatModel(BaseChatModel):
    """Chat model that echoes what it was called with."""

    seen: List[Any] = []

    @property
    def _llm_type(self) -> str:
        return "recording"

    def _generate(self, messages: List[BaseMessage], stop=None, run_manager=None, **kwargs) -> ChatResult:
        self.seen.append((messages, kwargs))
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content='["tofu"]'))])


CONNECTION_ERROR = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.test"))


class FailingChatModel(BaseChatModel):
    @property
    def _llm_type(self) -> str:
        return "failing"

    def _generate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        raise CONNECTION_ERROR

    async def _agenerate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        raise CONNECTION_ERROR


class SlowChatModel(BaseChatModel):
    @property
    def _llm_type(self) -> str:
        return "slow"

    def _generate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        raise NotImplementedError

    async def _agenerate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        await asyncio.sleep(1)
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content="late"))])


async def test_returns_reply_text():
    generator = ChatModelGenerator(llm=FakeListChatModel(responses=["hello"]), timeout=5)
    assert await generator.generate("hi", temperature=0.7) == "hello"


async def test_sends_single_user_message_with_temperature():
    model = RecordingChatModel()
    model.seen.clear()
    generator = ChatModelGenerator(llm=model, timeout=5)

    await generator.generate("Which groceries?", temperature=0.25)

    messages, kwargs = model.seen[0]
    assert len(messages) == 1
    assert messages[0].type == "human"
    assert messages[0].content == "Which groceries?"
    assert kwargs["temperature"] == 0.25


async def test_openai_error_becomes_external_service_error():
    generator = ChatModelGenerator(llm=FailingChatModel(), timeout=5)

    with pytest.raises(ExternalServiceError) as exc_info:
        await generator.generate("hi", temperature=0.5)

    assert exc_info.value.service == "generative"


async def test_timeout_becomes_external_service_error():
    generator = ChatModelGenerator(llm=SlowChatModel(), timeout=0.01)

    with pytest.raises(ExternalServiceError, match="timed out"):
        await generator.generate("hi", temperature=0.5)


def test_generator_from_config_prefers_injected():
    stub = StubGenerator()
    assert generator_from_config({"configurable": {"generator": stub}}) is stub
