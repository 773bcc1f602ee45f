"""Conversation session controller.

Module structure (each module hides a design decision):
- models.py: Transcript entries, session outcome, controller status
- errors.py: Error taxonomy
- log.py: Append-only transcript and its snapshots
- session.py: Establishing the remote conversation once
- coordinator.py: Single-flight turn state machine
- controller.py: Composition used by the presentation layer
"""

from .controller import ChatController
from .coordinator import ERROR_PREFIX, NOT_INITIALIZED, RequestCoordinator, format_turn_error
from .errors import (
    InitializationFailedError,
    MissingCredentialError,
    NextusError,
    SessionError,
    SessionErrorKind,
    TurnFailedError,
)
from .log import MessageLog, TranscriptSnapshot
from .models import (
    ControllerStatus,
    Message,
    Role,
    Session,
    StatusKind,
    SubmitOutcome,
    UsageSummary,
)
from .session import SessionLifecycle

__all__ = [
    "ChatController",
    "ControllerStatus",
    "ERROR_PREFIX",
    "InitializationFailedError",
    "Message",
    "MessageLog",
    "MissingCredentialError",
    "NOT_INITIALIZED",
    "NextusError",
    "RequestCoordinator",
    "Role",
    "Session",
    "SessionError",
    "SessionErrorKind",
    "SessionLifecycle",
    "StatusKind",
    "SubmitOutcome",
    "TranscriptSnapshot",
    "TurnFailedError",
    "UsageSummary",
    "format_turn_error",
]
