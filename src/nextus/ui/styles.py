"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.

Layout: transcript on top, optional log panel below it, status line and
input bar docked at the bottom. The ``-errored`` class on the screen turns
the header red, mirroring the configuration-error banner.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout
   ============================================ */
Screen {
    layout: vertical;
    background: $background;
}

/* ============================================
   Header - red while a diagnostic is shown
   ============================================ */
Header {
    background: $primary;
    color: $background;
    dock: top;
    height: 1;
}

HeaderTitle {
    text-style: bold;
}

Screen.-errored Header {
    background: $error;
}

/* ============================================
   Chat History Panel
   ============================================ */
#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }

    &.-maximized {
        height: 1fr;
    }
}

.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 1 2;
}

/* User messages - right-leaning blue bubble */
.user-message {
    margin-left: 8;
    border-right: tall $primary;
    background: $primary 20%;

    & .message-header {
        color: $accent;
        text-style: bold;
        text-align: right;
    }
}

/* Assistant messages - neutral surface */
.assistant-message {
    margin-right: 8;
    border-left: tall $border;
    background: $surface;

    & .message-header {
        color: $text-muted;
        text-style: bold;
    }
}

/* Error entries - red tint while the error is current */
.error-message {
    border-left: tall $error;
    background: $error 12%;

    & .message-header {
        color: $error;
    }

    & .message-content {
        color: $text-error;
    }
}

.message-header {
    height: auto;
}

.message-content {
    height: auto;
    margin: 0;
}

#thinking {
    height: 3;
    width: 20;
    color: $primary;
}

/* ============================================
   Debug/Log Panel
   ============================================ */
#debug-panel {
    height: 10;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-y: scroll;
    overflow-x: auto;
    scrollbar-gutter: stable;
}

/* ============================================
   Bottom Bar - Status + Input
   ============================================ */
#bottom-bar {
    dock: bottom;
    height: auto;
    padding: 0 1;
    background: $panel;
    border-top: solid $border;
}

#status {
    height: 1;
    padding: 0 2;
    background: $surface;
    color: $foreground;
}

ChatInputBar {
    height: 5;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }

    &.-blocked {
        border: round $error 60%;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#send-btn {
    width: 14;
    height: 100%;
    margin: 0 0 0 1;
    border: tall $primary;
    background: $primary;
    color: $background;
    text-style: bold;

    &:hover {
        background: $primary-lighten-1;
    }

    &:disabled {
        background: $surface-lighten-1;
        border: tall $border;
        color: $text-muted;
    }
}

ChatInputBar.-blocked #send-btn {
    background: $error 60%;
    border: tall $error;
}

/* ============================================
   Footer - Keyboard Shortcuts
   ============================================ */
Footer {
    background: $panel;
    height: auto;
}

Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-error {
        border: tall $error;
        background: $error 12%;
    }
}

Markdown {
    margin: 0;
    padding: 0;
}
"""
