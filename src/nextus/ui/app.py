"""Main Textual TUI application.

Renders the controller's transcript and status, and turns user input into
controller intents. The controller's own guards decide what is accepted;
disabling the input here only mirrors them.
"""

import asyncio
from collections.abc import Callable

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from ..conversation import ChatController, Message, SubmitOutcome
from .config import APP_TITLE, SUBTITLE_ERROR, SUBTITLE_OK, LogLevel
from .styles import APP_CSS
from .themes import NEXTUS_BLUE
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, StatusPanel


class NextusChatApp(App):
    """Textual TUI for the banking assistant chat."""

    CSS = APP_CSS
    TITLE = APP_TITLE
    SUB_TITLE = SUBTITLE_OK

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("ctrl+y", "copy_status", "Copy Status"),
        Binding("ctrl+b", "toggle_maximize_chat", "Max Chat"),
        Binding("ctrl+d", "toggle_debug", "Debug"),
    ]

    def __init__(self, controller: ChatController, log_level: str | None = None) -> None:
        super().__init__()
        self._controller = controller
        self._log_level = log_level
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def controller(self) -> ChatController:
        return self._controller

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        yield DebugPanel(id="debug-panel")

        with Vertical(id="bottom-bar"):
            yield StatusPanel(id="status")
            yield ChatInputBar(id="chat-input-bar")

        yield Footer()

    def on_mount(self) -> None:
        """Start the session and render its first entry."""
        self.register_theme(NEXTUS_BLUE)
        self.theme = "nextus-blue"

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.threshold = LogLevel.parse(self._log_level)
            log_panel.set_visible(True)
            log_panel.add_entry("info", "TUI", f"Log panel enabled with level: {log_panel.threshold.name}")

        self._controller.set_debug_callback(log_panel.add_entry)

        session = self._controller.start()
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        for message in self._controller.snapshot():
            chat.add_message(message)
        self._unsubscribe = self._controller.subscribe(self._on_transcript_append)

        if not session.established:
            self.notify(session.last_error or "Configuration error", severity="error", timeout=8)
        self._refresh_state()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._controller.set_debug_callback(None)

    def _on_transcript_append(self, message: Message) -> None:
        self.query_one("#chat-history", ChatHistoryWidget).add_message(message)
        self._refresh_state()

    def _refresh_state(self) -> None:
        """Mirror controller status, diagnostic and usage in the widgets."""
        controller = self._controller
        session = controller.session
        established = session is not None and session.established
        blocked = controller.diagnostic is not None

        self.sub_title = SUBTITLE_ERROR if blocked else SUBTITLE_OK
        self.screen.set_class(blocked, "-errored")

        chat = self.query_one("#chat-history", ChatHistoryWidget)
        chat.set_waiting(controller.status.is_awaiting)
        chat.set_error_highlight(blocked)

        self.query_one("#chat-input-bar", ChatInputBar).set_state(
            enabled=controller.can_submit,
            sending=controller.status.is_awaiting,
            blocked=blocked,
        )
        self.query_one("#status", StatusPanel).update_status(
            controller.status, controller.usage, controller.model, established
        )

    def on_chat_input_bar_draft_changed(self, event: ChatInputBar.DraftChanged) -> None:
        self._controller.change_draft(event.value)

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        rejection = self._controller.check(event.value)
        if rejection is not None:
            self.query_one("#debug-panel", DebugPanel).add_entry("debug", "TUI", f"Input refused: {rejection.value}")
            if rejection != SubmitOutcome.REJECTED_EMPTY:
                self.notify(self._controller.diagnostic or "Please wait for the current reply", timeout=3)
            self._refresh_state()
            return
        # Block the input now; the worker only starts on a later loop step.
        self.query_one("#chat-input-bar", ChatInputBar).set_state(enabled=False, sending=True, blocked=False)
        self._run_turn(event.value)

    @work(group="turns")
    async def _run_turn(self, text: str) -> None:
        """Run one turn as a background async worker."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        try:
            outcome = await self._controller.submit(text)
        except asyncio.CancelledError:
            log_panel.add_entry("warning", "TUI", "Turn cancelled")
            raise
        finally:
            self._refresh_state()

        if outcome == SubmitOutcome.FAILED:
            self.notify(f"Error: {(self._controller.diagnostic or '')[:50]}", severity="error", timeout=5)
        elif outcome.rejected:
            log_panel.add_entry("warning", "TUI", f"Input refused: {outcome.value}")
            self.notify(f"Message not sent ({outcome.value})", severity="warning", timeout=3)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_toggle_maximize_chat(self) -> None:
        """Toggle maximize for chat panel (hides the log panel)."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        log_panel = self.query_one("#debug-panel", DebugPanel)
        if chat.has_class("-maximized"):
            chat.remove_class("-maximized")
        else:
            chat.add_class("-maximized")
            log_panel.set_visible(False)

    def action_copy_status(self) -> None:
        """Copy the status line to clipboard."""
        status = self.query_one("#status", StatusPanel)
        self.copy_to_clipboard(status.get_plain_text())
        self.notify("Status copied")

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")


async def run_textual_tui(controller: ChatController, log_level: str | None = None) -> None:
    """Run the Textual TUI.

    Args:
        controller: Unstarted chat controller; the app starts it on mount
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = NextusChatApp(controller, log_level=log_level)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
