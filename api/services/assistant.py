"""Generative assistant for note summaries, icons and chat replies.

Every operation is a single prompt/response round trip to the language model,
raced against a per-operation timeout. Nothing is retried and no state is kept
between calls.
"""

import asyncio
import os
from collections.abc import Callable
from time import perf_counter

import structlog
from opentelemetry import trace

from connectors.openai import OpenAIConnector, OpenAIModel

from ..errors import GenerationError
from ..observability import get_app_metrics
from ..prompts import (
    get_general_chat_system_prompt,
    get_icon_prompt,
    get_note_chat_system_prompt,
    get_summary_prompt,
)
from .icons import DEFAULT_ICON, IconKind, infer_icon

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

# Timeouts in seconds
SUMMARY_TIMEOUT = float(os.getenv("SUMMARY_TIMEOUT_SECONDS", "15"))
ICON_TIMEOUT = float(os.getenv("ICON_TIMEOUT_SECONDS", "10"))
CHAT_TIMEOUT = float(os.getenv("CHAT_TIMEOUT_SECONDS", "30"))

ICON_NAME_MIN_LENGTH = 3
ICON_NAME_MAX_LENGTH = 20

# Offered to the model as examples, not an exhaustive list
ICON_PROMPT_EXAMPLES = [
    IconKind.BRIEFCASE,
    IconKind.LIGHTBULB,
    IconKind.CODE,
    IconKind.PLANE,
    IconKind.HEART,
    IconKind.BOOK,
    IconKind.TARGET,
    IconKind.CHEF_HAT,
    IconKind.USERS,
    IconKind.CALENDAR,
    IconKind.MUSIC,
    IconKind.SHOPPING_CART,
    IconKind.FILE_TEXT,
]


class GenerativeAssistant:
    """Language-model operations used by the notes and chat endpoints."""

    def __init__(
        self,
        api_key: str | None = None,
        model: OpenAIModel | str | None = None,
        summary_timeout: float = SUMMARY_TIMEOUT,
        icon_timeout: float = ICON_TIMEOUT,
        chat_timeout: float = CHAT_TIMEOUT,
        connector_factory: Callable[..., OpenAIConnector] = OpenAIConnector,
    ):
        """Initialize the assistant.

        Args:
            api_key: OpenAI API key; calls fail with GenerationError when missing
            model: Chat model name (defaults to OPENAI_MODEL or gpt-4o-mini)
            summary_timeout: Seconds to wait for a summary
            icon_timeout: Seconds to wait for an icon suggestion
            chat_timeout: Seconds to wait for a chat reply
            connector_factory: Callable returning an async-context-managed connector
        """
        self.api_key = api_key
        self.model = model or os.getenv("OPENAI_MODEL", OpenAIModel.GPT_4O_MINI.value)
        self.summary_timeout = summary_timeout
        self.icon_timeout = icon_timeout
        self.chat_timeout = chat_timeout
        self.connector_factory = connector_factory
        self.metrics = get_app_metrics()

    async def _generate(
        self,
        operation: str,
        prompt: str,
        timeout: float,
        system_prompt: str | None = None,
    ) -> str:
        """Run one completion and return the raw reply text."""
        with tracer.start_as_current_span(f"assistant.{operation}") as span:
            span.set_attribute("assistant.operation", operation)
            span.set_attribute("assistant.model", getattr(self.model, "value", self.model))
            span.set_attribute("assistant.timeout_s", timeout)
            span.set_attribute("prompt.length", len(prompt))

            if not self.api_key:
                logger.error("openai_api_key_missing", operation=operation)
                self.metrics.generation_failures.add(1, {"operation": operation})
                raise GenerationError("OpenAI API key not configured", {"operation": operation})

            start_time = perf_counter()
            try:
                async with self.connector_factory(
                    api_key=self.api_key, timeout=timeout, max_retries=0
                ) as connector:
                    text = await asyncio.wait_for(
                        connector.complete_text(
                            prompt, system_prompt=system_prompt, model=self.model
                        ),
                        timeout=timeout,
                    )
            except TimeoutError:
                logger.error("generation_timeout", operation=operation, timeout_s=timeout)
                span.set_attribute("error", True)
                self.metrics.generation_failures.add(1, {"operation": operation})
                raise GenerationError(
                    f"{operation} generation timed out after {timeout:g}s",
                    {"operation": operation},
                ) from None
            except Exception as e:
                logger.error(
                    "generation_failed",
                    operation=operation,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                span.record_exception(e)
                self.metrics.generation_failures.add(1, {"operation": operation})
                raise GenerationError(
                    f"{operation} generation failed: {e}", {"operation": operation}
                ) from e
            finally:
                duration = (perf_counter() - start_time) * 1000
                self.metrics.generation_duration.record(duration, {"operation": operation})

            span.set_attribute("response.length", len(text))
            logger.info(
                "generation_completed",
                operation=operation,
                response_length=len(text),
                duration_ms=round(duration, 2),
            )
            return text

    async def _generate_required(
        self, operation: str, prompt: str, timeout: float, system_prompt: str | None = None
    ) -> str:
        text = (await self._generate(operation, prompt, timeout, system_prompt)).strip()
        if not text:
            logger.error("generation_empty_response", operation=operation)
            raise GenerationError(f"{operation} generation returned no text", {"operation": operation})
        return text

    async def summarize(self, content: str) -> str:
        """Summarize note content (the 200-word cap is an instruction to the model).

        Raises:
            GenerationError: upstream failure, missing key, or timeout
        """
        return await self._generate_required(
            "summary", get_summary_prompt(content), self.summary_timeout
        )

    async def classify_icon(self, content: str) -> IconKind:
        """Pick an icon for the content, asking the model only when keywords don't match.

        Never raises; every failure yields the default icon.
        """
        icon = infer_icon(content)
        if icon is not DEFAULT_ICON or not content or not content.strip():
            return icon

        prompt = get_icon_prompt(content, [kind.value for kind in ICON_PROMPT_EXAMPLES])
        try:
            reply = await self._generate("icon", prompt, self.icon_timeout)
        except GenerationError as e:
            logger.warning("icon_generation_fallback", reason=e.message)
            return DEFAULT_ICON

        candidate = reply.strip().strip(".\"'`")
        if not ICON_NAME_MIN_LENGTH <= len(candidate) <= ICON_NAME_MAX_LENGTH:
            logger.warning("icon_generation_rejected", reply_length=len(candidate))
            return DEFAULT_ICON

        return IconKind.parse(candidate)

    async def converse(self, content: str, title: str, user_message: str) -> str:
        """Reply to a message about a specific note."""
        return await self._generate_required(
            "note_chat",
            user_message,
            self.chat_timeout,
            system_prompt=get_note_chat_system_prompt(title=title, content=content),
        )

    async def converse_general(self, user_message: str) -> str:
        """Reply to a message with no note context."""
        return await self._generate_required(
            "general_chat",
            user_message,
            self.chat_timeout,
            system_prompt=get_general_chat_system_prompt(),
        )


def get_assistant() -> GenerativeAssistant:
    """FastAPI dependency providing an assistant configured from the environment."""
    return GenerativeAssistant(api_key=os.getenv("OPENAI_API_KEY"))
