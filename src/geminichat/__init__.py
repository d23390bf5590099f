"""
geminichat: a conversation client for the hosted Gemini API.

Each module hides one design decision: the session owns the log, the llm
module owns the endpoint, the credentials module owns key persistence and
the assets module owns file conversion.
"""

__version__ = "0.1.0"

from .errors import AssetError, ChatError, CredentialError, TransportError, ValidationError
from .models import InlineAsset, InlineDataPart, Message, Role, TextPart
from .session import ConversationSession

__all__ = [
    "AssetError",
    "ChatError",
    "ConversationSession",
    "CredentialError",
    "InlineAsset",
    "InlineDataPart",
    "Message",
    "Role",
    "TextPart",
    "TransportError",
    "ValidationError",
]
