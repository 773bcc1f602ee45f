"""Anthropic Claude chat capability.

Uses the official Anthropic SDK for async message creation.
Reference: https://github.com/anthropics/anthropic-sdk-python
"""

from typing import Any

from anthropic import AsyncAnthropic

from ..base import ChatCapability, ChatHandle
from ..models import ChatMessage, GenerationConfig, LLMResponse


class AnthropicChatHandle(ChatHandle):
    """Conversation over the stateless Messages API."""

    def __init__(self, client: AsyncAnthropic, model: str, config: GenerationConfig, max_tokens: int):
        self._client = client
        self._model = model
        self._config = config
        self._max_tokens = max_tokens
        self._history: list[ChatMessage] = []

    @property
    def model(self) -> str:
        return self._model

    async def send(self, text: str) -> LLMResponse:
        user_message = ChatMessage(role="user", content=text)
        request_params: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": msg.role, "content": msg.content}
                for msg in [*self._history, user_message]
            ],
            "temperature": min(self._config.temperature, 1.0),
            "top_k": self._config.top_k,
            "max_tokens": self._max_tokens,  # Anthropic requires max_tokens
        }
        if self._config.system_instruction:
            request_params["system"] = self._config.system_instruction

        response = await self._client.messages.create(**request_params)

        # Handle multiple content blocks
        content = ""
        for block in response.content:
            if hasattr(block, "text"):
                content += block.text

        self._history.append(user_message)
        self._history.append(ChatMessage(role="assistant", content=content))

        usage: dict[str, Any] = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.input_tokens + response.usage.output_tokens,
            }
        return LLMResponse.from_usage(content, response.model or self._model, **usage)


class AnthropicCapability(ChatCapability):
    """Anthropic Claude chat capability.

    Hidden design decisions:
    - Anthropic API client initialization
    - System instruction passed out-of-band
    - Temperature clamped to the API's 0..1 range
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        base_url: str | None = None,
        max_tokens_limit: int = 8192,
        **client_kwargs: Any
    ):
        """Initialize Anthropic capability.

        Args:
            api_key: Anthropic API key
            model: Default model to use
            base_url: Optional custom API base URL
            max_tokens_limit: Upper bound applied to max_output_tokens
            **client_kwargs: Additional kwargs for AsyncAnthropic client
        """
        self._model = model
        self._max_tokens_limit = max_tokens_limit
        self._client = AsyncAnthropic(api_key=api_key, base_url=base_url, **client_kwargs)

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    def start_chat(self, config: GenerationConfig) -> AnthropicChatHandle:
        return AnthropicChatHandle(
            self._client,
            config.model or self._model,
            config,
            min(config.max_output_tokens, self._max_tokens_limit),
        )

    async def close(self) -> None:
        """Close the Anthropic client."""
        await self._client.close()
