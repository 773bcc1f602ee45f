"""Google Gemini chat capability.

Uses the official Google GenAI SDK chat sessions, which keep the
conversation history on the client object and resend it with every turn.
Reference: https://github.com/googleapis/python-genai
"""

from typing import Any

from google import genai
from google.genai import types

from ..base import ChatCapability, ChatHandle
from ..models import GenerationConfig, LLMResponse


def _extract_content(response: Any) -> str:
    """Extract text content from a Gemini response, handling empty responses.

    Args:
        response: Gemini GenerateContentResponse

    Returns:
        Text content or empty string
    """
    if response.candidates and len(response.candidates) > 0:
        candidate = response.candidates[0]
        if candidate.content and candidate.content.parts:
            texts = [part.text for part in candidate.content.parts if getattr(part, "text", None)]
            if texts:
                return "".join(texts)

    # Fallback to response.text (may raise or return None)
    try:
        return response.text or ""
    except (ValueError, AttributeError):
        return ""


def build_content_config(config: GenerationConfig) -> types.GenerateContentConfig:
    """Translate a GenerationConfig into the SDK's request config."""
    return types.GenerateContentConfig(
        temperature=config.temperature,
        top_p=config.top_p,
        top_k=config.top_k,
        max_output_tokens=config.max_output_tokens,
        system_instruction=config.system_instruction,
    )


class GeminiChatHandle(ChatHandle):
    """One Gemini chat session (``client.aio.chats``)."""

    def __init__(self, chat: Any, model: str):
        self._chat = chat
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    async def send(self, text: str) -> LLMResponse:
        response = await self._chat.send_message(text)

        usage: dict[str, Any] = {}
        if response.usage_metadata:
            usage = {
                "prompt_tokens": response.usage_metadata.prompt_token_count,
                "completion_tokens": response.usage_metadata.candidates_token_count,
                "total_tokens": response.usage_metadata.total_token_count,
            }

        return LLMResponse.from_usage(_extract_content(response), self._model, **usage)


class GeminiCapability(ChatCapability):
    """Google Gemini chat capability.

    Hidden design decisions:
    - Google GenAI client initialization
    - Generation config conversion
    - Server-format chat history kept by the SDK chat object
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        **client_kwargs: Any
    ):
        """Initialize Gemini capability.

        Args:
            api_key: Google AI API key
            model: Default model, used when the generation config names none
            **client_kwargs: Additional kwargs for Client
        """
        self._model = model
        self._client = genai.Client(api_key=api_key, **client_kwargs)

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    def start_chat(self, config: GenerationConfig) -> GeminiChatHandle:
        model_to_use = config.model or self._model
        chat = self._client.aio.chats.create(
            model=model_to_use,
            config=build_content_config(config),
            history=[],
        )
        return GeminiChatHandle(chat, model_to_use)

    async def close(self) -> None:
        """Close the Gemini client.

        Note: The Google GenAI client doesn't require explicit closing,
        but we implement this for interface consistency.
        """
        pass
