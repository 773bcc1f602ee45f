"""
Nextus: a conversational AI banking assistant.

The core is the conversation session controller; the terminal UI and the
CLI are thin presentation layers over it.
"""

__version__ = "0.1.0"

from .conversation import (
    ChatController,
    ControllerStatus,
    Message,
    Role,
    Session,
    StatusKind,
    SubmitOutcome,
)
from .llm import ChatCapability, ChatHandle, GenerationConfig, create_chat_capability

__all__ = [
    "ChatCapability",
    "ChatController",
    "ChatHandle",
    "ControllerStatus",
    "GenerationConfig",
    "Message",
    "Role",
    "Session",
    "StatusKind",
    "SubmitOutcome",
    "create_chat_capability",
]
