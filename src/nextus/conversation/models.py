"""Data models for the conversation controller.

These models define the transcript entries, the session outcome and the
controller status, independent of how they are rendered.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import SessionErrorKind


class Role(str, Enum):
    """Author of a transcript entry."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single transcript entry. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Who authored the message")
    content: str = Field(description="Message text")
    created_at: datetime | None = Field(default=None, description="When the entry was appended")

    @model_validator(mode="after")
    def _user_content_not_blank(self) -> "Message":
        if self.role == Role.USER and not self.content.strip():
            raise ValueError("User messages must have non-empty content")
        return self


class Session(BaseModel):
    """Outcome of establishing the remote conversation.

    The live handle is owned by SessionLifecycle; this model only describes
    whether it exists and why not.
    """

    model_config = ConfigDict(frozen=True)

    established: bool = Field(description="True when a usable chat handle exists")
    last_error: str | None = Field(default=None, description="Diagnostic for a failed establishment")
    error_kind: SessionErrorKind | None = Field(default=None, description="Failure category")


class StatusKind(str, Enum):
    """Controller state machine states."""

    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    ERRORED = "errored"


class ControllerStatus(BaseModel):
    """Tagged controller status: exactly one kind, with a reason only when errored."""

    model_config = ConfigDict(frozen=True)

    kind: StatusKind
    reason: str | None = None

    @classmethod
    def idle(cls) -> "ControllerStatus":
        return cls(kind=StatusKind.IDLE)

    @classmethod
    def awaiting_response(cls) -> "ControllerStatus":
        return cls(kind=StatusKind.AWAITING_RESPONSE)

    @classmethod
    def errored(cls, reason: str) -> "ControllerStatus":
        return cls(kind=StatusKind.ERRORED, reason=reason)

    @property
    def is_idle(self) -> bool:
        return self.kind == StatusKind.IDLE

    @property
    def is_awaiting(self) -> bool:
        return self.kind == StatusKind.AWAITING_RESPONSE

    @property
    def is_errored(self) -> bool:
        return self.kind == StatusKind.ERRORED

    @model_validator(mode="after")
    def _reason_only_when_errored(self) -> "ControllerStatus":
        if self.kind == StatusKind.ERRORED and not self.reason:
            raise ValueError("Errored status requires a reason")
        if self.kind != StatusKind.ERRORED and self.reason is not None:
            raise ValueError(f"{self.kind.value} status carries no reason")
        return self


class SubmitOutcome(str, Enum):
    """Result of a submission: the turn ran, or why it was refused."""

    COMPLETED = "completed"
    FAILED = "failed"
    REJECTED_EMPTY = "rejected_empty"
    REJECTED_BUSY = "rejected_busy"
    REJECTED_NO_SESSION = "rejected_no_session"
    REJECTED_ERRORED = "rejected_errored"

    @property
    def rejected(self) -> bool:
        return self.value.startswith("rejected_")


class UsageSummary(BaseModel):
    """Summary of token usage across all turns.

    Attributes:
        total_calls: Total number of successful turns
        total_input_tokens: Total input tokens across all turns
        total_output_tokens: Total output tokens across all turns
    """

    total_calls: int = Field(default=0, description="Total successful turns")
    total_input_tokens: int = Field(default=0, description="Total input tokens")
    total_output_tokens: int = Field(default=0, description="Total output tokens")

    def add_usage(self, usage: dict[str, int] | None) -> None:
        """Add the usage reported for one turn (``None`` counts the call only)."""
        self.total_calls += 1
        if usage:
            self.total_input_tokens += usage.get("prompt_tokens", 0)
            self.total_output_tokens += usage.get("completion_tokens", 0)

    @property
    def total_tokens(self) -> int:
        return self.total_input_tokens + self.total_output_tokens
