from typing import Any

from openai import AsyncOpenAI

from ..base import ChatCapability, ChatHandle
from ..models import ChatMessage, GenerationConfig, LLMResponse


class OpenAIChatHandle(ChatHandle):
    """Conversation over the stateless Chat Completions API.

    The transcript is replayed with every request; a turn is only committed
    to it once the reply arrived, so a failed send leaves no trace.
    """

    def __init__(self, client: AsyncOpenAI, model: str, config: GenerationConfig, max_tokens: int):
        self._client = client
        self._model = model
        self._config = config
        self._max_tokens = max_tokens
        self._history: list[ChatMessage] = []
        if config.system_instruction:
            self._history.append(ChatMessage(role="system", content=config.system_instruction))

    @property
    def model(self) -> str:
        return self._model

    async def send(self, text: str) -> LLMResponse:
        user_message = ChatMessage(role="user", content=text)
        openai_messages = [
            {"role": msg.role, "content": msg.content}
            for msg in [*self._history, user_message]
        ]

        completion = await self._client.chat.completions.create(
            model=self._model,
            messages=openai_messages,
            temperature=self._config.temperature,
            top_p=self._config.top_p,
            max_tokens=self._max_tokens,
        )

        content = completion.choices[0].message.content or ""
        self._history.append(user_message)
        self._history.append(ChatMessage(role="assistant", content=content))

        usage: dict[str, Any] = {}
        if completion.usage:
            usage = {
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
                "total_tokens": completion.usage.total_tokens,
            }
        return LLMResponse.from_usage(content, completion.model or self._model, **usage)


class OpenAICapability(ChatCapability):
    """OpenAI (and OpenAI-compatible) chat capability.

    Hidden design decisions:
    - OpenAI API client initialization
    - Message format conversion
    - Local replay of the conversation, since the API keeps no state
    - Clamping the output budget to what chat models accept (no top-k)
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        organization: str | None = None,
        max_tokens_limit: int = 16384,
        **client_kwargs: Any
    ):
        """Initialize OpenAI capability.

        Args:
            api_key: OpenAI API key
            model: Default model to use
            base_url: Optional custom API base URL
            organization: Optional organization ID
            max_tokens_limit: Upper bound applied to max_output_tokens
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._max_tokens_limit = max_tokens_limit
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    def start_chat(self, config: GenerationConfig) -> OpenAIChatHandle:
        return OpenAIChatHandle(
            self._client,
            config.model or self._model,
            config,
            min(config.max_output_tokens, self._max_tokens_limit),
        )

    async def close(self) -> None:
        """Close the OpenAI client."""
        await self._client.close()


class DeepSeekCapability(OpenAICapability):
    """DeepSeek chat capability using the OpenAI-compatible API."""

    def __init__(
        self,
        api_key: str,
        model: str = "deepseek-chat",
        base_url: str = "https://api.deepseek.com",
        max_tokens_limit: int = 8192,
        **client_kwargs: Any
    ):
        super().__init__(
            api_key=api_key,
            model=model,
            base_url=base_url,
            max_tokens_limit=max_tokens_limit,
            **client_kwargs
        )
