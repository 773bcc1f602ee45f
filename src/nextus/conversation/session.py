"""Session lifecycle: obtain the remote chat handle once, or fail for good.

Hidden design decisions:
- How the capability is constructed from the credential
- Where the live handle is kept (never handed out for mutation)
- That a failed establishment is terminal (no retry)
"""

from collections.abc import Callable
from typing import Any

from ..llm import ChatCapability, ChatHandle, GenerationConfig
from .errors import (
    InitializationFailedError,
    MissingCredentialError,
    SessionError,
    describe_exception,
)
from .models import Session

CapabilityFactory = Callable[[str], ChatCapability]
DebugCallback = Callable[[str, str, str], None]


class SessionLifecycle:
    """Establishes the conversation at most once and owns the handle."""

    def __init__(
        self,
        capability_factory: CapabilityFactory,
        generation_config: GenerationConfig,
        debug_callback: DebugCallback | None = None,
    ) -> None:
        """Initialize the lifecycle.

        Args:
            capability_factory: Builds a capability from the credential
            generation_config: Generation parameters fixed for the session
            debug_callback: Optional callable(level, component, message)
        """
        self._capability_factory = capability_factory
        self._generation_config = generation_config
        self._debug_callback = debug_callback
        self._capability: ChatCapability | None = None
        self._handle: ChatHandle | None = None
        self._session: Session | None = None

    def _debug(self, level: str, component: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, component, message)

    @property
    def session(self) -> Session | None:
        """Outcome of establishment, None before ``establish`` ran."""
        return self._session

    @property
    def handle(self) -> ChatHandle | None:
        """The live chat handle, lent to the coordinator."""
        return self._handle

    @property
    def generation_config(self) -> GenerationConfig:
        return self._generation_config

    @property
    def established(self) -> bool:
        return self._session is not None and self._session.established

    def establish(self, credential: str | None) -> Session:
        """Create the capability and start the conversation.

        Only the first call does any work; later calls return the same
        outcome, so a failure stays a failure until the process restarts.

        Args:
            credential: API key, possibly missing or blank

        Returns:
            Session describing success or the reason for failure
        """
        if self._session is not None:
            self._debug("debug", "Session", "Already established, returning previous outcome")
            return self._session

        try:
            self._handle = self._open(credential)
        except SessionError as e:
            self._debug("error", "Session", f"Establishment failed ({e.kind.value}): {e.detail}")
            self._session = Session(established=False, last_error=e.detail, error_kind=e.kind)
        else:
            self._debug("info", "Session", f"Chat started with model {self._handle.model}")
            self._session = Session(established=True)
        return self._session

    def _open(self, credential: str | None) -> ChatHandle:
        if credential is None or not credential.strip():
            raise MissingCredentialError()

        self._debug("debug", "Session", "Building chat capability")
        try:
            self._capability = self._capability_factory(credential.strip())
            return self._capability.start_chat(self._generation_config)
        except Exception as e:
            raise InitializationFailedError(
                describe_exception(e, "Failed to initialize chat")
            ) from e

    async def close(self) -> None:
        """Release the capability's resources. Safe to call more than once."""
        capability, self._capability = self._capability, None
        if capability is not None:
            await capability.close()
            self._debug("debug", "Session", "Capability closed")

    def __repr__(self) -> str:
        state: Any = self._session.established if self._session else "pending"
        return f"SessionLifecycle(established={state})"
