from abc import ABC, abstractmethod
from typing import Any

from .models import GenerationConfig, LLMResponse


class ChatHandle(ABC):
    """A live, stateful conversation with a remote model.

    The handle owns the conversational memory: every successful ``send``
    becomes context for the next one. That history is never exposed, and a
    handle cannot be copied, because two copies would diverge silently.
    """

    @abstractmethod
    async def send(self, text: str) -> LLMResponse:
        """Send one user turn and return the model's reply.

        Args:
            text: User message (already trimmed by the caller)

        Returns:
            LLMResponse containing generated content and metadata

        Raises:
            Exception: Provider-specific errors during generation
        """
        pass

    @property
    @abstractmethod
    def model(self) -> str:
        """Model serving this conversation."""

    def __copy__(self) -> "ChatHandle":
        raise TypeError(f"{type(self).__name__} cannot be copied")

    def __deepcopy__(self, memo: dict[int, Any]) -> "ChatHandle":
        raise TypeError(f"{type(self).__name__} cannot be copied")


class ChatCapability(ABC):
    """Abstract base class for remote conversational capabilities.

    This module hides the design decision of which model vendor is used.
    Implementations must handle provider-specific details like:
    - API client setup and authentication
    - Request/response format conversion
    - Where multi-turn memory lives (server-side chat or local transcript)

    Supports async context manager protocol for proper resource cleanup:
        async with capability:
            handle = capability.start_chat(config)
            response = await handle.send("hello")
    """

    @abstractmethod
    def start_chat(self, config: GenerationConfig) -> ChatHandle:
        """Start a new conversation bound to ``config``.

        Args:
            config: Generation parameters, fixed for the conversation

        Returns:
            ChatHandle reusable for all subsequent turns

        Raises:
            Exception: Provider-specific errors during setup
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""
        pass

    async def __aenter__(self) -> "ChatCapability":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
