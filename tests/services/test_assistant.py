"""Tests for the generative assistant."""

import asyncio

import pytest

from api.errors import GenerationError
from api.services.assistant import GenerativeAssistant
from api.services.icons import DEFAULT_ICON, IconKind


class FakeConnector:
    """Async-context-managed stand-in for OpenAIConnector."""

    def __init__(self, reply: str = "", delay: float = 0.0, error: Exception | None = None):
        self.reply = reply
        self.delay = delay
        self.error = error
        self.calls: list[dict] = []
        self.init_kwargs: dict = {}
        self.closed = False
        self.cancelled = False

    def __call__(self, **kwargs):
        self.init_kwargs = kwargs
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True

    async def complete_text(self, prompt, system_prompt=None, model=None, **kwargs):
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt, "model": model})
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error:
            raise self.error
        return self.reply


def make_assistant(connector: FakeConnector, **kwargs) -> GenerativeAssistant:
    return GenerativeAssistant(
        api_key="test-key", model="gpt-4o-mini", connector_factory=connector, **kwargs
    )


class TestSummarize:
    """Test summary generation."""

    async def test_summarize_returns_stripped_reply(self):
        connector = FakeConnector(reply="  A short summary.\n")
        assistant = make_assistant(connector)

        summary = await assistant.summarize("Long note content")

        assert summary == "A short summary."
        assert "Long note content" in connector.calls[0]["prompt"]
        assert connector.calls[0]["model"] == "gpt-4o-mini"
        assert connector.init_kwargs["max_retries"] == 0
        assert connector.closed

    async def test_missing_api_key(self):
        connector = FakeConnector(reply="unused")
        assistant = GenerativeAssistant(api_key=None, connector_factory=connector)

        with pytest.raises(GenerationError, match="API key not configured"):
            await assistant.summarize("content")
        assert connector.calls == []

    async def test_timeout_cancels_call(self):
        """Test the pending call is cancelled and a timeout error raised."""
        connector = FakeConnector(reply="too late", delay=5)
        assistant = make_assistant(connector, summary_timeout=0.05)

        with pytest.raises(GenerationError, match="timed out"):
            await assistant.summarize("content")
        assert connector.cancelled

    async def test_upstream_error(self):
        connector = FakeConnector(error=RuntimeError("boom"))
        assistant = make_assistant(connector)

        with pytest.raises(GenerationError, match="summary generation failed: boom"):
            await assistant.summarize("content")

    async def test_empty_reply_is_an_error(self):
        assistant = make_assistant(FakeConnector(reply="   "))

        with pytest.raises(GenerationError, match="no text"):
            await assistant.summarize("content")


class TestClassifyIcon:
    """Test icon selection."""

    async def test_keyword_match_skips_model(self):
        connector = FakeConnector(reply="Heart")
        assistant = make_assistant(connector)

        icon = await assistant.classify_icon("Planning our vacation to Japan")

        assert icon is IconKind.MAP_PIN
        assert connector.calls == []

    async def test_model_fallback(self):
        connector = FakeConnector(reply='"Heart".')
        assistant = make_assistant(connector)

        icon = await assistant.classify_icon("zzz qqq")

        assert icon is IconKind.HEART
        assert "zzz qqq" in connector.calls[0]["prompt"]

    async def test_unknown_model_reply_is_default(self):
        assistant = make_assistant(FakeConnector(reply="Sparkles"))

        assert await assistant.classify_icon("zzz qqq") is DEFAULT_ICON

    async def test_overlong_model_reply_is_default(self):
        assistant = make_assistant(FakeConnector(reply="I think the best icon is Heart"))

        assert await assistant.classify_icon("zzz qqq") is DEFAULT_ICON

    async def test_model_failure_is_default(self):
        assistant = make_assistant(FakeConnector(error=RuntimeError("down")))

        assert await assistant.classify_icon("zzz qqq") is DEFAULT_ICON

    async def test_timeout_is_default(self):
        assistant = make_assistant(FakeConnector(reply="Heart", delay=5), icon_timeout=0.05)

        assert await assistant.classify_icon("zzz qqq") is DEFAULT_ICON

    async def test_blank_content_skips_model(self):
        connector = FakeConnector(reply="Heart")
        assistant = make_assistant(connector)

        assert await assistant.classify_icon("   ") is DEFAULT_ICON
        assert connector.calls == []


class TestConverse:
    """Test chat replies."""

    async def test_note_grounded_reply(self):
        connector = FakeConnector(reply="Pack light.")
        assistant = make_assistant(connector)

        reply = await assistant.converse(
            "Planning our vacation to Japan", "Trip", "What should I pack?"
        )

        assert reply == "Pack light."
        call = connector.calls[0]
        assert call["prompt"] == "What should I pack?"
        assert "Note title: Trip" in call["system_prompt"]
        assert "Planning our vacation to Japan" in call["system_prompt"]

    async def test_general_reply(self):
        connector = FakeConnector(reply="Hi there!")
        assistant = make_assistant(connector)

        reply = await assistant.converse_general("hello")

        assert reply == "Hi there!"
        assert connector.calls[0]["prompt"] == "hello"
        assert connector.calls[0]["system_prompt"]

    async def test_chat_timeout(self):
        assistant = make_assistant(FakeConnector(reply="late", delay=5), chat_timeout=0.05)

        with pytest.raises(GenerationError, match="general_chat generation timed out"):
            await assistant.converse_general("hello")
