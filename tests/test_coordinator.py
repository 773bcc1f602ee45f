"""Unit tests for the request coordinator state machine."""
import asyncio

import pytest
from conftest import StepClock, settle
from hypothesis import given
from hypothesis import strategies as st

from nextus.conversation import (
    NOT_INITIALIZED,
    ControllerStatus,
    MessageLog,
    RequestCoordinator,
    Role,
    SessionLifecycle,
    StatusKind,
    SubmitOutcome,
    format_turn_error,
)
from nextus.prompts import get_config_error, get_greeting


@pytest.fixture
def lifecycle(capability_factory, generation_config):
    """Return an unestablished session lifecycle."""
    return SessionLifecycle(capability_factory, generation_config)


@pytest.fixture
def log():
    """Return an empty transcript."""
    return MessageLog()


@pytest.fixture
def coordinator(lifecycle, log):
    """Return an initialized coordinator over an established session."""
    coordinator = RequestCoordinator(lifecycle, log, clock=StepClock())
    coordinator.initialize(lifecycle.establish("key"))
    return coordinator


class TestControllerStatus:
    """Tests for the ControllerStatus tagged value."""

    def test_constructors(self):
        """Test that each constructor yields exactly one kind."""
        assert ControllerStatus.idle().is_idle
        assert ControllerStatus.awaiting_response().is_awaiting
        errored = ControllerStatus.errored("boom")
        assert errored.is_errored
        assert errored.reason == "boom"
        assert not errored.is_idle and not errored.is_awaiting

    def test_errored_requires_reason(self):
        """Test that an errored status without a reason fails validation."""
        with pytest.raises(ValueError):
            ControllerStatus(kind=StatusKind.ERRORED)

    def test_idle_rejects_reason(self):
        """Test that only errored statuses carry a reason."""
        with pytest.raises(ValueError):
            ControllerStatus(kind=StatusKind.IDLE, reason="nope")


class TestInitialize:
    """Tests for recording the session outcome."""

    def test_greeting_when_established(self, coordinator, log):
        """Test that a working session is greeted."""
        assert len(log) == 1
        assert log.last().role == Role.ASSISTANT
        assert log.last().content == get_greeting()
        assert coordinator.status.is_idle
        assert coordinator.diagnostic is None

    def test_config_error_when_not_established(self, lifecycle, log):
        """Test that a failed session shows the configuration explanation."""
        coordinator = RequestCoordinator(lifecycle, log)
        session = lifecycle.establish(None)

        coordinator.initialize(session)

        assert [m.content for m in log.snapshot()] == [get_config_error()]
        assert coordinator.diagnostic == session.last_error

    def test_initialize_twice_fails(self, coordinator, lifecycle):
        """Test that the initial entry is recorded only once."""
        with pytest.raises(RuntimeError):
            coordinator.initialize(lifecycle.session)

    def test_unreadable_prompt_leaves_coordinator_uninitialized(self, lifecycle, log, monkeypatch):
        """Test that a failed first entry can be recorded again and blocks turns meanwhile."""
        def broken_greeting() -> str:
            raise IsADirectoryError("prompts/greeting.txt")

        monkeypatch.setattr("nextus.conversation.coordinator.get_greeting", broken_greeting)
        coordinator = RequestCoordinator(lifecycle, log)
        session = lifecycle.establish("key")

        with pytest.raises(IsADirectoryError):
            coordinator.initialize(session)

        assert not coordinator.initialized
        assert len(log) == 0
        assert coordinator.check("hello") == SubmitOutcome.REJECTED_NO_SESSION

        monkeypatch.setattr("nextus.conversation.coordinator.get_greeting", lambda: "Hello!")
        coordinator.initialize(session)

        assert coordinator.initialized
        assert [m.content for m in log.snapshot()] == ["Hello!"]

    def test_timestamps_come_from_clock(self, coordinator, log):
        """Test that every appended entry is stamped."""
        assert log.last().created_at is not None


class TestGuards:
    """Tests for submission guards and their order."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", " ", "\n\t  "])
    async def test_empty_rejected(self, coordinator, log, fake_handle, text):
        """Test that blank text changes nothing."""
        before = coordinator.status

        outcome = await coordinator.submit(text)

        assert outcome == SubmitOutcome.REJECTED_EMPTY
        assert len(log) == 1
        assert coordinator.status == before
        assert fake_handle.sent == []

    @pytest.mark.asyncio
    async def test_not_initialized_rejected(self, lifecycle, log):
        """Test that a coordinator without a recorded session refuses turns."""
        lifecycle.establish("key")
        coordinator = RequestCoordinator(lifecycle, log)

        outcome = await coordinator.submit("hello")

        assert outcome == SubmitOutcome.REJECTED_NO_SESSION
        assert len(log) == 0
        assert coordinator.diagnostic == NOT_INITIALIZED

    @pytest.mark.asyncio
    async def test_no_session_rejected(self, lifecycle, log, fake_handle):
        """Test that turns are refused when establishment failed."""
        coordinator = RequestCoordinator(lifecycle, log)
        coordinator.initialize(lifecycle.establish(None))

        outcome = await coordinator.submit("hello")

        assert outcome == SubmitOutcome.REJECTED_NO_SESSION
        assert len(log) == 1
        assert coordinator.status.is_idle
        assert coordinator.diagnostic == NOT_INITIALIZED
        assert fake_handle.sent == []

    @pytest.mark.asyncio
    async def test_empty_checked_before_busy(self, coordinator, fake_handle):
        """Test that the empty guard wins over the busy guard."""
        fake_handle.gate = asyncio.Event()
        task = asyncio.create_task(coordinator.submit("first"))
        await settle()

        assert coordinator.check("   ") == SubmitOutcome.REJECTED_EMPTY
        assert coordinator.check("second") == SubmitOutcome.REJECTED_BUSY

        fake_handle.gate.set()
        await task

    def test_check_accepts_valid_text(self, coordinator):
        """Test that an idle, established coordinator accepts text."""
        assert coordinator.check("hello") is None

    @given(st.text(alphabet=" \t\n\r", max_size=20))
    def test_whitespace_is_always_rejected(self, text: str):
        """Property test: whitespace-only input never passes the guard."""
        coordinator = RequestCoordinator(SessionLifecycle(lambda key: None, None), MessageLog())
        assert coordinator.check(text) == SubmitOutcome.REJECTED_EMPTY


class TestSubmit:
    """Tests for a single turn."""

    @pytest.mark.asyncio
    async def test_success(self, coordinator, log, fake_handle):
        """Test that a reply is appended and the coordinator returns to idle."""
        fake_handle.replies = ["$100"]

        outcome = await coordinator.submit("  What is my balance?  ")

        assert outcome == SubmitOutcome.COMPLETED
        assert fake_handle.sent == ["What is my balance?"]
        entries = list(log.snapshot())
        assert [(m.role, m.content) for m in entries[1:]] == [
            (Role.USER, "What is my balance?"),
            (Role.ASSISTANT, "$100"),
        ]
        assert coordinator.status.is_idle
        assert not coordinator.in_flight
        assert coordinator.usage.total_calls == 1
        assert coordinator.usage.total_input_tokens == len("What is my balance?")
        assert coordinator.usage.total_output_tokens == len("$100")

    @pytest.mark.asyncio
    async def test_user_entry_appended_before_suspension(self, coordinator, log, fake_handle):
        """Test that the user entry and status change precede the remote call."""
        fake_handle.gate = asyncio.Event()

        task = asyncio.create_task(coordinator.submit("hello"))
        await settle()

        assert len(log) == 2
        assert log.last().role == Role.USER
        assert coordinator.status.kind == StatusKind.AWAITING_RESPONSE
        assert coordinator.in_flight

        fake_handle.gate.set()
        assert await task == SubmitOutcome.COMPLETED
        assert len(log) == 3

    @pytest.mark.asyncio
    async def test_failure(self, coordinator, log, fake_handle):
        """Test that a failed turn is surfaced and the state becomes errored."""
        fake_handle.replies = [TimeoutError("network timeout")]

        outcome = await coordinator.submit("hello")

        assert outcome == SubmitOutcome.FAILED
        assert len(log) == 3
        assert log.last().role == Role.ASSISTANT
        assert log.last().content == format_turn_error("network timeout")
        assert coordinator.status == ControllerStatus.errored("network timeout")
        assert coordinator.diagnostic == "network timeout"
        assert coordinator.usage.total_calls == 0

    @pytest.mark.asyncio
    async def test_failure_without_message(self, coordinator, log, fake_handle):
        """Test that an exception without a message still yields a diagnostic."""
        fake_handle.replies = [RuntimeError()]

        await coordinator.submit("hello")

        assert coordinator.status.reason == "An unexpected error occurred"
        assert "An unexpected error occurred" in log.last().content

    @pytest.mark.asyncio
    async def test_errored_is_sticky(self, coordinator, log, fake_handle):
        """Test that no further turns run after a failure."""
        fake_handle.replies = [RuntimeError("boom")]
        await coordinator.submit("hello")

        outcome = await coordinator.submit("retry")

        assert outcome == SubmitOutcome.REJECTED_ERRORED
        assert len(log) == 3
        assert fake_handle.sent == ["hello"]
        assert coordinator.status.is_errored
        assert coordinator.diagnostic == "boom"

    @pytest.mark.asyncio
    async def test_listeners_see_final_status(self, coordinator, log, fake_handle):
        """Test that status is settled before the terminal entry is announced."""
        fake_handle.replies = ["ok", RuntimeError("boom")]
        statuses: list[StatusKind] = []
        log.subscribe(lambda message: statuses.append(coordinator.status.kind))

        await coordinator.submit("one")
        await coordinator.submit("two")

        assert statuses == [
            StatusKind.AWAITING_RESPONSE,
            StatusKind.IDLE,
            StatusKind.AWAITING_RESPONSE,
            StatusKind.ERRORED,
        ]

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, coordinator, log, fake_handle):
        """Test that cancelling a turn re-raises and leaves the state errored."""
        fake_handle.gate = asyncio.Event()
        task = asyncio.create_task(coordinator.submit("hello"))
        await settle()

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert len(log) == 2
        assert not coordinator.in_flight
        assert coordinator.status == ControllerStatus.errored("Request cancelled")


class TestSingleFlight:
    """Tests for at most one outstanding remote call."""

    @pytest.mark.asyncio
    async def test_concurrent_submit_rejected(self, coordinator, log, fake_handle):
        """Test that a submission during a pending turn is refused."""
        fake_handle.gate = asyncio.Event()
        first = asyncio.create_task(coordinator.submit("first"))
        await settle()

        outcome = await coordinator.submit("second")

        assert outcome == SubmitOutcome.REJECTED_BUSY
        assert len(log) == 2
        assert fake_handle.sent == ["first"]

        fake_handle.gate.set()
        assert await first == SubmitOutcome.COMPLETED
        assert fake_handle.max_pending == 1

    @pytest.mark.asyncio
    async def test_burst_of_submissions(self, coordinator, log, fake_handle):
        """Test that a burst scheduled together results in exactly one turn."""
        fake_handle.gate = asyncio.Event()
        tasks = [asyncio.create_task(coordinator.submit(f"message {i}")) for i in range(5)]
        await settle()
        fake_handle.gate.set()

        outcomes = await asyncio.gather(*tasks)

        assert outcomes.count(SubmitOutcome.COMPLETED) == 1
        assert outcomes.count(SubmitOutcome.REJECTED_BUSY) == 4
        assert fake_handle.max_pending == 1
        assert len(log) == 3

    @pytest.mark.asyncio
    async def test_sequential_turns(self, coordinator, log, fake_handle):
        """Test that turns run one after another once each completes."""
        for i in range(3):
            assert await coordinator.submit(f"turn {i}") == SubmitOutcome.COMPLETED

        assert fake_handle.sent == ["turn 0", "turn 1", "turn 2"]
        assert len(log) == 7
        assert coordinator.usage.total_calls == 3
