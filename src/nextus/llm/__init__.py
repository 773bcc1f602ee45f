from .base import ChatCapability, ChatHandle
from .factory import SUPPORTED_PROVIDERS, create_chat_capability
from .models import ChatMessage, GenerationConfig, LLMResponse
from .providers import AnthropicCapability, DeepSeekCapability, GeminiCapability, OpenAICapability

__all__ = [
    "ChatCapability",
    "ChatHandle",
    "SUPPORTED_PROVIDERS",
    "create_chat_capability",
    "ChatMessage",
    "GenerationConfig",
    "LLMResponse",
    "AnthropicCapability",
    "DeepSeekCapability",
    "GeminiCapability",
    "OpenAICapability",
]
