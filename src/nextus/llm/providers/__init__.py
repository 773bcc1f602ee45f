from .anthropic import AnthropicCapability
from .gemini import GeminiCapability
from .openai import DeepSeekCapability, OpenAICapability

__all__ = ["AnthropicCapability", "DeepSeekCapability", "GeminiCapability", "OpenAICapability"]
