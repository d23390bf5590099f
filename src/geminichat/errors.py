"""Error taxonomy for geminichat.

Every error is terminal for the current send attempt only. None of them
corrupt the conversation log and none are retried automatically.
"""


class ChatError(Exception):
    """Base class for errors surfaced to the user."""

    def __str__(self) -> str:
        return self.args[0] if self.args else self.__class__.__name__


class ValidationError(ChatError):
    """Empty send attempt (no text and no attachment)."""


class CredentialError(ChatError):
    """Missing or invalid API key."""


class TransportError(ChatError):
    """Network or endpoint failure. The message is passed through verbatim."""


class AssetError(ChatError):
    """File to inline payload conversion failed, or the payload was rejected."""
