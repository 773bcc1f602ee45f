"""Conversation session controller.

Composes the session lifecycle, the transcript and the request coordinator
behind the surface the presentation layer uses: read the transcript and the
status, raise ``submit`` and ``change_draft`` intents.
"""

from collections.abc import Callable
from datetime import datetime

from ..llm import GenerationConfig
from .coordinator import RequestCoordinator
from .log import MessageListener, MessageLog, TranscriptSnapshot
from .models import ControllerStatus, Session, SubmitOutcome, UsageSummary
from .session import CapabilityFactory, DebugCallback, SessionLifecycle


class ChatController:
    """Single-session chat controller driven by UI events on one event loop."""

    def __init__(
        self,
        capability_factory: CapabilityFactory,
        generation_config: GenerationConfig,
        credential: str | None,
        debug_callback: DebugCallback | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._credential = credential
        self._debug_callback = debug_callback
        self._log = MessageLog()
        self._lifecycle = SessionLifecycle(
            capability_factory, generation_config, debug_callback=self._forward_debug
        )
        self._coordinator = RequestCoordinator(
            self._lifecycle, self._log, clock=clock, debug_callback=self._forward_debug
        )
        self._draft = ""

    def _forward_debug(self, level: str, component: str, message: str) -> None:
        # Late-bound so the UI can attach its panel after construction.
        if self._debug_callback:
            self._debug_callback(level, component, message)

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set callback for debug logging.

        Args:
            callback: Function(level, component, message) for debug output.
                     Levels: "debug", "info", "warning", "error"
        """
        self._debug_callback = callback

    def start(self) -> Session:
        """Establish the session and record the outcome as the first entry.

        Idempotent: once the first entry is recorded, later calls return the
        existing session. If recording it raised, the next call records it.
        """
        if self._coordinator.initialized:
            return self._lifecycle.session

        session = self._lifecycle.establish(self._credential)
        # The credential is no longer needed once the handle exists.
        self._credential = None
        self._coordinator.initialize(session)
        return session

    async def submit(self, text: str) -> SubmitOutcome:
        """Submit a user turn; see RequestCoordinator.submit."""
        return await self._coordinator.submit(text)

    def check(self, text: str) -> SubmitOutcome | None:
        """Return the rejection ``text`` would get, or None."""
        return self._coordinator.check(text)

    def change_draft(self, text: str) -> None:
        """Echo of the input box. Has no effect on the state machine."""
        self._draft = text

    @property
    def draft(self) -> str:
        return self._draft

    def snapshot(self) -> TranscriptSnapshot:
        return self._log.snapshot()

    def subscribe(self, listener: MessageListener) -> Callable[[], None]:
        """Call ``listener`` with every message appended from now on."""
        return self._log.subscribe(listener)

    @property
    def status(self) -> ControllerStatus:
        return self._coordinator.status

    @property
    def diagnostic(self) -> str | None:
        return self._coordinator.diagnostic

    @property
    def session(self) -> Session | None:
        return self._lifecycle.session

    @property
    def usage(self) -> UsageSummary:
        return self._coordinator.usage

    @property
    def model(self) -> str | None:
        handle = self._lifecycle.handle
        if handle is not None:
            return handle.model
        return self._lifecycle.generation_config.model

    @property
    def can_submit(self) -> bool:
        """Advisory flag for the UI: Idle with an established session."""
        return self._coordinator.initialized and self._lifecycle.established and self.status.is_idle

    async def close(self) -> None:
        await self._lifecycle.close()
