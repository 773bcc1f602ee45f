"""Pytest configuration and shared fixtures."""
import asyncio
from datetime import datetime, timedelta

import pytest

from nextus.conversation import ChatController
from nextus.llm import ChatCapability, ChatHandle, GenerationConfig, LLMResponse


class FakeChatHandle(ChatHandle):
    """Scripted chat handle.

    ``replies`` are consumed in order: a string is returned as the reply, an
    exception is raised. Without replies the handle echoes the prompt. When
    ``gate`` is set, ``send`` waits on it before answering.
    """

    def __init__(self, model: str = "fake-model", replies: list | None = None):
        self._model = model
        self.replies = list(replies or [])
        self.sent: list[str] = []
        self.pending = 0
        self.max_pending = 0
        self.gate: asyncio.Event | None = None

    @property
    def model(self) -> str:
        return self._model

    async def send(self, text: str) -> LLMResponse:
        self.sent.append(text)
        self.pending += 1
        self.max_pending = max(self.max_pending, self.pending)
        try:
            if self.gate is not None:
                await self.gate.wait()
            reply = self.replies.pop(0) if self.replies else f"echo: {text}"
            if isinstance(reply, BaseException):
                raise reply
            return LLMResponse.from_usage(
                reply, self._model, prompt_tokens=len(text), completion_tokens=len(reply)
            )
        finally:
            self.pending -= 1


class FakeCapability(ChatCapability):
    """Capability returning a prepared handle, or raising on ``start_chat``."""

    def __init__(self, handle: FakeChatHandle, start_error: Exception | None = None):
        self.handle = handle
        self.start_error = start_error
        self.configs: list[GenerationConfig] = []
        self.close_count = 0

    def start_chat(self, config: GenerationConfig) -> ChatHandle:
        self.configs.append(config)
        if self.start_error is not None:
            raise self.start_error
        return self.handle

    async def close(self) -> None:
        self.close_count += 1


class RecordingFactory:
    """Capability factory that records the credentials it was called with."""

    def __init__(self, capability: FakeCapability | None = None, error: Exception | None = None):
        self.capability = capability
        self.error = error
        self.credentials: list[str] = []

    def __call__(self, credential: str) -> ChatCapability:
        self.credentials.append(credential)
        if self.error is not None:
            raise self.error
        return self.capability


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 9, 0, 0)):
        self._now = start

    def __call__(self) -> datetime:
        current = self._now
        self._now += timedelta(seconds=1)
        return current


@pytest.fixture
def generation_config():
    """Return a generation config with a system instruction."""
    return GenerationConfig(model="fake-model", system_instruction="You are a banking assistant.")


@pytest.fixture
def fake_handle():
    """Return a fresh scripted chat handle."""
    return FakeChatHandle()


@pytest.fixture
def fake_capability(fake_handle):
    """Return a capability wrapping the fake handle."""
    return FakeCapability(fake_handle)


@pytest.fixture
def capability_factory(fake_capability):
    """Return a recording factory producing the fake capability."""
    return RecordingFactory(fake_capability)


@pytest.fixture
def debug_events():
    """Collect (level, component, message) debug events."""
    return []


@pytest.fixture
def make_controller(capability_factory, generation_config, debug_events):
    """Return a builder for controllers wired to the fake capability."""
    def _make(credential: str | None = "test-api-key", factory=None) -> ChatController:
        return ChatController(
            capability_factory=factory or capability_factory,
            generation_config=generation_config,
            credential=credential,
            debug_callback=lambda *event: debug_events.append(event),
            clock=StepClock(),
        )

    return _make


async def settle() -> None:
    """Let freshly created tasks run up to their first suspension."""
    for _ in range(3):
        await asyncio.sleep(0)
