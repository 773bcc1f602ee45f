"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Transcript rendering and scrolling
- Input history and enabled/disabled states
- Status line formatting
- Log rendering and level filtering
"""

from datetime import datetime

from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message as TextualMessage
from textual.widgets import Button, LoadingIndicator, Markdown, RichLog, Static, TextArea

from ..conversation import ControllerStatus, Message, Role, StatusKind, UsageSummary
from .config import (
    ERROR_MARKER,
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    MESSAGE_TIMESTAMP_FORMAT,
    PLACEHOLDER_BLOCKED,
    PLACEHOLDER_READY,
    SEND_LABEL,
    SENDING_LABEL,
    LogLevel,
)


class ClickableMessage(Vertical):
    """A chat message container that copies its content when clicked."""

    def __init__(self, content: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._content = content

    def on_click(self, event: Click) -> None:
        """Copy message content to the clipboard (OSC 52)."""
        event.stop()
        self.app.copy_to_clipboard(self._content)
        self.app.notify("Copied to clipboard", timeout=2)


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    class DraftChanged(TextualMessage):
        """Message sent whenever the draft text changes."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        text_area.placeholder = PLACEHOLDER_READY
        yield text_area
        yield Button(SEND_LABEL, id="send-btn").with_tooltip(
            "Submit message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.highlight_cursor_line = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        self.post_message(self.DraftChanged(event.text_area.text))

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        last_row = len(lines) - 1
        last_col = len(lines[-1]) if lines else 0
        return text_area.cursor_location == (last_row, last_col)

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:  # Up
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:  # Down
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        if self.query_one("#send-btn", Button).disabled:
            return
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if not value:
            return
        if not self._history or self._history[-1] != value:
            self._history.append(value)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        text_area.text = ""
        self.post_message(self.Submitted(value))

    def set_state(self, *, enabled: bool, sending: bool, blocked: bool) -> None:
        """Reflect the controller state in the input widgets.

        Args:
            enabled: Whether a submission would currently be accepted
            sending: A request is in flight
            blocked: A diagnostic is shown (configuration or turn error)
        """
        text_area = self.query_one("#chat-input", TextArea)
        button = self.query_one("#send-btn", Button)
        text_area.disabled = not enabled
        text_area.placeholder = PLACEHOLDER_BLOCKED if blocked else PLACEHOLDER_READY
        button.disabled = not enabled
        button.label = SENDING_LABEL if sending else SEND_LABEL
        self.set_class(blocked, "-blocked")

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class StatusPanel(Static):
    """One-line status: controller state, turns, tokens and model."""

    _STATE_MARKUP = {
        StatusKind.IDLE: "[bold green]Ready[/]",
        StatusKind.AWAITING_RESPONSE: "[bold yellow]Waiting for reply[/]",
        StatusKind.ERRORED: "[bold red]Error[/]",
    }

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._status = ControllerStatus.idle()
        self._usage = UsageSummary()
        self._model = "unknown"
        self._established = True

    def on_mount(self) -> None:
        self._update_display()

    def update_status(
        self,
        status: ControllerStatus,
        usage: UsageSummary,
        model: str | None,
        established: bool,
    ) -> None:
        """Update the status display."""
        self._status = status
        self._usage = usage.model_copy()
        self._model = model or "unknown"
        self._established = established
        self._update_display()

    def _state_markup(self) -> str:
        if not self._established:
            return "[bold red]Not configured[/]"
        return self._STATE_MARKUP[self._status.kind]

    def _update_display(self) -> None:
        parts = [
            self._state_markup(),
            f"[bold cyan]Turns:[/] {self._usage.total_calls}",
            f"[bold magenta]Tokens:[/] {self._usage.total_tokens:,} "
            f"[dim]({self._usage.total_input_tokens:,}/{self._usage.total_output_tokens:,})[/]",
            f"[bold blue]Model:[/] {self._model}",
        ]
        self.update("  ".join(parts))

    def get_plain_text(self) -> str:
        """Get status as plain text for clipboard."""
        state = "Not configured" if not self._established else self._status.kind.value
        return (
            f"Status: {state}  "
            f"Turns: {self._usage.total_calls}  "
            f"Tokens: {self._usage.total_tokens} "
            f"({self._usage.total_input_tokens}/{self._usage.total_output_tokens})  "
            f"Model: {self._model}"
        )


class DebugPanel(RichLog):
    """Trace of controller events, filtered by a severity threshold.

    ``add_entry`` has the signature of the controller's debug callback, so the
    panel can be handed to the controller as is. Hidden until toggled with
    Ctrl+D or opened with ``--log-level``.
    """

    BORDER_TITLE = "Log"

    _LEVEL_STYLES = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    _COMPONENT_STYLES = {
        "TUI": "cyan",
        "Session": "green",
        "Coordinator": "magenta",
    }

    def __init__(self, *args, threshold: LogLevel = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(*args, markup=False, highlight=False, auto_scroll=True, wrap=False, **kwargs)
        self._threshold = threshold
        self.display = False
        self.border_subtitle = "Hidden"

    @property
    def threshold(self) -> LogLevel:
        return self._threshold

    @threshold.setter
    def threshold(self, level: LogLevel) -> None:
        self._threshold = level
        self._refresh_subtitle()

    def add_entry(self, level: str, component: str, message: str) -> None:
        """Write one line if ``level`` reaches the threshold."""
        severity = LogLevel.parse(level)
        if severity < self._threshold:
            return

        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."
        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_style = self._LEVEL_STYLES[severity]
        component_style = self._COMPONENT_STYLES.get(component, "white")

        line = Text.assemble(
            (timestamp, "dim"),
            " ",
            (f"{severity.name:<7}", level_style),
            " ",
            (f"[{component}]", component_style),
            " ",
            message,
        )
        self.write(line)

    def set_visible(self, visible: bool) -> None:
        self.display = visible
        self._refresh_subtitle()

    def toggle(self) -> bool:
        """Flip visibility and return the new state."""
        self.set_visible(not self.display)
        return self.display

    def _refresh_subtitle(self) -> None:
        self.border_subtitle = f"Level: {self._threshold.name}" if self.display else "Hidden"


class ChatHistoryWidget(VerticalScroll):
    """Scrollable transcript. Only ever grows."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._messages: list[Message] = []
        self._containers: list[ClickableMessage] = []
        self._highlight_errors = False

    @property
    def message_count(self) -> int:
        return len(self._messages)

    def add_message(self, message: Message) -> None:
        """Render a transcript entry below the existing ones."""
        self._messages.append(message)
        container = self._render_message(message)
        self._containers.append(container)
        self._apply_error_class(message, container)
        # Keep the thinking indicator below the newest entry
        indicator = self.query("#thinking")
        if indicator:
            self.mount(container, before=indicator.first())
        else:
            self.mount(container)
        self.border_subtitle = f"{len(self._messages)} messages"
        self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Get the last assistant response."""
        for msg in reversed(self._messages):
            if msg.role == Role.ASSISTANT:
                return msg.content
        return None

    def set_waiting(self, waiting: bool) -> None:
        """Show or hide the thinking indicator."""
        indicator = self.query("#thinking")
        if waiting and not indicator:
            self.mount(LoadingIndicator(id="thinking"))
            self.scroll_end(animate=False)
        elif not waiting and indicator:
            indicator.remove()

    def set_error_highlight(self, enabled: bool) -> None:
        """Style entries carrying the error marker while a diagnostic is current."""
        if enabled == self._highlight_errors:
            return
        self._highlight_errors = enabled
        for message, container in zip(self._messages, self._containers):
            self._apply_error_class(message, container)

    def _apply_error_class(self, message: Message, container: ClickableMessage) -> None:
        is_error = (
            self._highlight_errors
            and message.role == Role.ASSISTANT
            and ERROR_MARKER in message.content
        )
        container.set_class(is_error, "error-message")

    def _render_message(self, msg: Message) -> ClickableMessage:
        if msg.role == Role.USER:
            prefix = "You"
            border_class = "user-message"
        else:
            prefix = "Assistant"
            border_class = "assistant-message"

        header_text = prefix
        if msg.created_at is not None:
            header_text = f"{prefix} [{msg.created_at.strftime(MESSAGE_TIMESTAMP_FORMAT)}]"

        container = ClickableMessage(content=msg.content, classes=f"chat-message {border_class}")
        container.compose_add_child(Static(header_text, classes="message-header", markup=False))

        if msg.role == Role.ASSISTANT and ERROR_MARKER in msg.content:
            # Diagnostics (numbered setup steps) read better verbatim than as markdown
            container.compose_add_child(Static(msg.content, classes="message-content", markup=False))
        elif msg.role == Role.ASSISTANT:
            container.compose_add_child(Markdown(msg.content, classes="message-content"))
        else:
            container.compose_add_child(Static(msg.content, classes="message-content", markup=False))
        return container
