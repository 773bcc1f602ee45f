"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Banking blue on slate, with red reserved for configuration and turn errors
NEXTUS_BLUE = Theme(
    name="nextus-blue",
    primary="#3b82f6",      # Blue 500 - headers, user bubbles
    secondary="#1d4ed8",    # Blue 700 - secondary accent
    accent="#93c5fd",       # Blue 300 - highlights
    foreground="#e5e7eb",   # Gray 200 - body text
    background="#0b1120",   # Deep navy
    success="#22c55e",      # Green - send button
    warning="#f59e0b",      # Amber - log warnings
    error="#ef4444",        # Red - error entries and header
    surface="#111827",      # Gray 900
    panel="#0f172a",        # Slate 900
    dark=True,
    variables={
        "block-cursor-foreground": "#0b1120",
        "block-cursor-background": "#93c5fd",
        "block-cursor-text-style": "bold",
        "block-hover-background": "#1e293b 20%",

        "input-cursor-background": "#e5e7eb",
        "input-cursor-foreground": "#0b1120",
        "input-selection-background": "#3b82f6 30%",

        "border": "#334155",
        "border-blurred": "#1e293b",

        "scrollbar": "#1e293b",
        "scrollbar-hover": "#334155",
        "scrollbar-active": "#3b82f6",
        "scrollbar-background": "#0f172a",
        "scrollbar-corner-color": "#0f172a",

        "footer-foreground": "#cbd5e1",
        "footer-background": "#0b1120",
        "footer-key-foreground": "#93c5fd",
        "footer-key-background": "#1e293b",
        "footer-description-foreground": "#94a3b8",

        "text-muted": "#64748b",
        "text-disabled": "#334155",
        "text-error": "#fca5a5",

        "button-foreground": "#e5e7eb",
        "button-color-foreground": "#0b1120",
        "button-focus-text-style": "bold reverse",
    },
)
