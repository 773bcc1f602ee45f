"""UI configuration constants.

Centralizes labels, limits and other configuration values for the UI module.
"""

from enum import IntEnum


class LogLevel(IntEnum):
    """Trace severities, ordered so a threshold comparison filters them."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    @classmethod
    def parse(cls, value: str) -> "LogLevel":
        """Level for a name such as ``"info"``; unknown names mean DEBUG."""
        return cls.__members__.get(value.strip().upper(), cls.DEBUG)


# Header
APP_TITLE = "AI Banking Assistant"
SUBTITLE_OK = "Powered by Nextus"
SUBTITLE_ERROR = "Configuration Error"

# Input bar
PLACEHOLDER_READY = "Type your message..."
PLACEHOLDER_BLOCKED = "Please configure API key first..."
SEND_LABEL = "Send"
SENDING_LABEL = "Sending..."

# Transcript
ERROR_MARKER = "⚠️"  # Assistant entries carrying this are shown as errors
MESSAGE_TIMESTAMP_FORMAT = "%H:%M:%S"
INPUT_HISTORY_MAX_SIZE = 100  # Maximum entries in input history

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # Characters before truncating log messages
