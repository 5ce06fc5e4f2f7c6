"""OpenAI API connector used by the Thought Sort assistant.

Thin async wrapper around the official OpenAI SDK:
- Chat completions with optional sampling parameters
- Plain-text convenience call for single-prompt generation
- Token usage on OpenTelemetry spans and rough cost estimation
"""

from enum import Enum
from typing import Any

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion
from opentelemetry import trace

tracer = trace.get_tracer(__name__)


class OpenAIModel(str, Enum):
    """Chat models the assistant can be pointed at."""

    GPT_4O = "gpt-4o"
    GPT_4O_MINI = "gpt-4o-mini"
    GPT_4_TURBO = "gpt-4-turbo"
    GPT_35_TURBO = "gpt-3.5-turbo"


# Prices per 1M tokens (input, output)
MODEL_PRICING: dict[OpenAIModel, tuple[float, float]] = {
    OpenAIModel.GPT_4O: (2.50, 10.00),
    OpenAIModel.GPT_4O_MINI: (0.15, 0.60),
    OpenAIModel.GPT_4_TURBO: (10.00, 30.00),
    OpenAIModel.GPT_35_TURBO: (0.50, 1.50),
}


class OpenAIConnector:
    """Async OpenAI connector.

    Example:
        >>> async with OpenAIConnector(api_key="sk-...", max_retries=0) as connector:
        ...     text = await connector.complete_text("Summarize: ...")
    """

    def __init__(
        self,
        api_key: str | None = None,
        organization: str | None = None,
        base_url: str | None = None,
        timeout: float = 60.0,
        max_retries: int = 0,
    ):
        """Initialize OpenAI connector.

        Args:
            api_key: OpenAI API key (falls back to OPENAI_API_KEY env var)
            organization: Optional organization ID
            base_url: Optional custom base URL (for proxies or compatible APIs)
            timeout: Request timeout in seconds
            max_retries: Maximum number of SDK-level retry attempts
        """
        self.client = AsyncOpenAI(
            api_key=api_key,
            organization=organization,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self):
        """Close the underlying HTTP client."""
        await self.client.close()

    @tracer.start_as_current_span("openai.chat_completion")
    async def chat_completion(
        self,
        messages: list[dict[str, Any]],
        model: OpenAIModel | str = OpenAIModel.GPT_4O_MINI,
        temperature: float | None = None,
        max_tokens: int | None = None,
        user: str | None = None,
        **kwargs: Any,
    ) -> ChatCompletion:
        """Create a chat completion.

        Args:
            messages: List of message dicts with 'role' and 'content'
            model: Model to use for completion
            temperature: Sampling temperature (0-2)
            max_tokens: Maximum tokens to generate
            user: Unique user identifier for abuse monitoring
            **kwargs: Additional parameters to pass to the API

        Returns:
            ChatCompletion object
        """
        span = trace.get_current_span()
        span.set_attribute("openai.model", getattr(model, "value", model))
        span.set_attribute("openai.message_count", len(messages))

        optional = {"temperature": temperature, "max_tokens": max_tokens, "user": user}
        params: dict[str, Any] = {
            "model": model,
            "messages": messages,
            **{key: value for key, value in optional.items() if value is not None},
            **kwargs,
        }

        try:
            response = await self.client.chat.completions.create(**params)
        except Exception as e:
            span.record_exception(e)
            raise

        usage = response.usage
        if usage:
            span.set_attribute("openai.prompt_tokens", usage.prompt_tokens)
            span.set_attribute("openai.completion_tokens", usage.completion_tokens)
            span.set_attribute("openai.total_tokens", usage.total_tokens)
            span.set_attribute(
                "openai.estimated_cost_usd",
                self.estimate_cost(model, usage.prompt_tokens, usage.completion_tokens),
            )
        return response

    async def complete_text(
        self,
        prompt: str,
        system_prompt: str | None = None,
        model: OpenAIModel | str = OpenAIModel.GPT_4O_MINI,
        **kwargs: Any,
    ) -> str:
        """Send a single prompt and return the reply text ('' if the model sent none)."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        completion = await self.chat_completion(messages=messages, model=model, **kwargs)
        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    def estimate_cost(
        self,
        model: OpenAIModel | str,
        prompt_tokens: int,
        completion_tokens: int = 0,
    ) -> float:
        """Estimate cost in USD for a completion.

        Versioned model names (e.g. "gpt-4o-2024-08-06") are matched by prefix,
        longest prefix first. Unknown models are priced as gpt-4o-mini.
        """
        model_str = model.value if isinstance(model, OpenAIModel) else model

        by_length = sorted(MODEL_PRICING.items(), key=lambda x: len(x[0].value), reverse=True)
        for model_key, (input_price, output_price) in by_length:
            if model_str.startswith(model_key.value):
                return (prompt_tokens / 1_000_000) * input_price + (
                    completion_tokens / 1_000_000
                ) * output_price

        return (prompt_tokens / 1_000_000) * 0.15 + (completion_tokens / 1_000_000) * 0.60
