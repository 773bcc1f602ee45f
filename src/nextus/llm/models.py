from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GenerationConfig(BaseModel):
    """Generation parameters fixed for the lifetime of a chat session."""

    model_config = ConfigDict(frozen=True)

    model: str | None = Field(
        default=None,
        description="Model identifier (None uses the capability's default)"
    )
    temperature: float = Field(default=1.0, ge=0.0, le=2.0, description="Sampling temperature")
    top_p: float = Field(default=0.95, gt=0.0, le=1.0, description="Nucleus sampling mass")
    top_k: int = Field(default=64, ge=1, description="Top-k truncation")
    max_output_tokens: int = Field(default=65536, ge=1, description="Maximum tokens per reply")
    system_instruction: str | None = Field(
        default=None,
        description="Optional system instruction sent with every turn"
    )


class ChatMessage(BaseModel):
    """A message exchanged with a completion API (provider-internal history)."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")


class LLMResponse(BaseModel):
    """Response from a chat handle."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )

    @classmethod
    def from_usage(cls, content: str, model: str, **usage: Any) -> "LLMResponse":
        """Build a response, dropping usage when the provider reported none."""
        counts = {key: int(value or 0) for key, value in usage.items()}
        return cls(content=content, model=model, usage=counts if any(counts.values()) else None)
