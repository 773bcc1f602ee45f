"""Terminal UI module for nextus.

Provides a Textual-based TUI over the chat controller.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (transcript, input bar, status line, log panel)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palette and theme configuration
- config.py: Labels, limits and log levels
- app.py: Application orchestration (user interaction flow)
"""

from .app import NextusChatApp, run_textual_tui
from .config import LogLevel
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, StatusPanel

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "LogLevel",
    "NextusChatApp",
    "StatusPanel",
    "run_textual_tui",
]
