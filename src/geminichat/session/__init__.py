"""Conversation session module for geminichat.

Owns the append-only message log and the single in-flight request guard.
"""

from .session import (
    DEFAULT_MODEL,
    MISSING_KEY_MESSAGE,
    NO_CONTENT_PLACEHOLDER,
    ConversationSession,
)

__all__ = [
    "ConversationSession",
    "DEFAULT_MODEL",
    "MISSING_KEY_MESSAGE",
    "NO_CONTENT_PLACEHOLDER",
]
