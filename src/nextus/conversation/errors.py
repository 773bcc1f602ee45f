"""Error taxonomy for the conversation controller.

Startup failures are SessionErrors; per-turn failures are TurnFailedErrors.
Neither escapes the controller: both are converted into transcript entries
and status. Rejected submissions are not errors at all, they are reported
as SubmitOutcome values.
"""

from enum import Enum


class SessionErrorKind(str, Enum):
    """Why a session could not be established."""

    MISSING_CREDENTIAL = "missing_credential"
    INITIALIZATION_FAILED = "initialization_failed"


class NextusError(Exception):
    """Base class for all nextus errors."""


class SessionError(NextusError):
    """The remote conversation could not be established."""

    kind: SessionErrorKind

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class MissingCredentialError(SessionError):
    """No API key was supplied."""

    kind = SessionErrorKind.MISSING_CREDENTIAL

    def __init__(
        self,
        detail: str = "API key is not configured. Please add your Gemini API key to .env file.",
    ) -> None:
        super().__init__(detail)


class InitializationFailedError(SessionError):
    """Building the capability or starting the chat raised."""

    kind = SessionErrorKind.INITIALIZATION_FAILED


class TurnFailedError(NextusError):
    """A single outbound turn failed after the session was established."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


def describe_exception(exc: BaseException, fallback: str) -> str:
    """Human-readable detail for an exception, ``fallback`` when it has none."""
    detail = str(exc).strip()
    return detail or fallback
