"""Request coordination: one turn at a time against the session handle.

State machine::

    Idle --submit--> AwaitingResponse --success--> Idle
                                      --failure--> Errored (sticky)

Everything except the ``send`` call runs synchronously, so validation, the
user entry and the status change all happen before the coroutine first
suspends. A second ``submit`` arriving meanwhile sees the request in flight
and is refused.
"""

import asyncio
from collections.abc import Callable
from datetime import datetime

from ..prompts import get_config_error, get_greeting
from .errors import TurnFailedError, describe_exception
from .log import MessageLog
from .models import ControllerStatus, Message, Role, Session, SubmitOutcome, UsageSummary
from .session import DebugCallback, SessionLifecycle

ERROR_PREFIX = "⚠️ Error: "
NOT_INITIALIZED = "Chat is not properly initialized. Please check your API key configuration."
ERRORED_HINT = "The conversation stopped after an error. Restart Nextus to continue."


def format_turn_error(detail: str) -> str:
    """Transcript text for a failed turn."""
    return f"{ERROR_PREFIX}{detail}. Restart the session to continue."


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class RequestCoordinator:
    """Serializes user turns and records them in the transcript."""

    def __init__(
        self,
        lifecycle: SessionLifecycle,
        log: MessageLog,
        clock: Callable[[], datetime] | None = None,
        debug_callback: DebugCallback | None = None,
    ) -> None:
        self._lifecycle = lifecycle
        self._log = log
        self._clock = clock or datetime.now
        self._debug_callback = debug_callback
        self._status = ControllerStatus.idle()
        self._in_flight = False
        self._initialized = False
        self._diagnostic: str | None = None
        self._usage = UsageSummary()

    def _debug(self, level: str, component: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, component, message)

    @property
    def status(self) -> ControllerStatus:
        return self._status

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def diagnostic(self) -> str | None:
        """Most recent user-facing problem, cleared when a turn is accepted."""
        return self._diagnostic

    @property
    def usage(self) -> UsageSummary:
        return self._usage

    def _append(self, role: Role, content: str) -> Message:
        message = Message(role=role, content=content, created_at=self._clock())
        self._log.append(message)
        return message

    def initialize(self, session: Session) -> None:
        """Record the session outcome as the first transcript entry.

        Raises:
            RuntimeError: If called more than once
        """
        if self._initialized:
            raise RuntimeError("Coordinator already initialized")

        if session.established:
            self._append(Role.ASSISTANT, get_greeting())
        else:
            self._diagnostic = session.last_error
            self._append(Role.ASSISTANT, get_config_error())
        self._status = ControllerStatus.idle()
        self._initialized = True

    @property
    def initialized(self) -> bool:
        """True once the first entry has been recorded."""
        return self._initialized

    def check(self, text: str) -> SubmitOutcome | None:
        """Return why ``text`` would be refused, or None if it would be accepted.

        Guards are checked in order and the first failing one wins.
        """
        if not text.strip():
            return SubmitOutcome.REJECTED_EMPTY
        if self._in_flight:
            return SubmitOutcome.REJECTED_BUSY
        if not self._initialized or not self._lifecycle.established or self._lifecycle.handle is None:
            return SubmitOutcome.REJECTED_NO_SESSION
        if self._status.is_errored:
            return SubmitOutcome.REJECTED_ERRORED
        return None

    async def submit(self, text: str) -> SubmitOutcome:
        """Run one turn for ``text``.

        Rejections return without suspending, without touching the
        transcript and without changing status.

        Returns:
            COMPLETED or FAILED for an accepted turn, a REJECTED_* value otherwise
        """
        rejection = self.check(text)
        if rejection is not None:
            self._debug("debug", "Coordinator", f"Submission refused: {rejection.value}")
            if rejection == SubmitOutcome.REJECTED_NO_SESSION:
                self._diagnostic = NOT_INITIALIZED
            elif rejection == SubmitOutcome.REJECTED_ERRORED:
                self._diagnostic = self._status.reason or ERRORED_HINT
            return rejection

        handle = self._lifecycle.handle
        prompt = text.strip()
        self._diagnostic = None
        self._in_flight = True
        self._status = ControllerStatus.awaiting_response()
        self._append(Role.USER, prompt)
        self._debug("info", "Coordinator", f"Sending turn ({len(prompt)} chars)")

        try:
            response = await handle.send(prompt)
        except asyncio.CancelledError:
            self._in_flight = False
            self._status = ControllerStatus.errored("Request cancelled")
            self._debug("warning", "Coordinator", "Turn cancelled while awaiting response")
            raise
        except Exception as e:
            failure = TurnFailedError(describe_exception(e, "An unexpected error occurred"))
            self._in_flight = False
            self._diagnostic = failure.detail
            self._status = ControllerStatus.errored(failure.detail)
            self._append(Role.ASSISTANT, format_turn_error(failure.detail))
            self._debug("error", "Coordinator", f"Turn failed: {failure.detail}")
            return SubmitOutcome.FAILED

        self._in_flight = False
        self._usage.add_usage(response.usage)
        self._status = ControllerStatus.idle()
        self._append(Role.ASSISTANT, response.content)
        self._debug("info", "Coordinator", f"Response received ({len(response.content)} chars)")
        self._debug("debug", "Coordinator", f"Response preview: {_truncate(response.content, 150)}")
        return SubmitOutcome.COMPLETED
