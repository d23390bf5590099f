"""Data models for the conversation log.

Messages are frozen once built. The log only ever grows by appending
new messages; nothing in it is mutated or removed.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Author of a message."""

    USER = "user"
    MODEL = "model"


class InlineAsset(BaseModel):
    """A binary payload embedded directly in the request."""

    model_config = ConfigDict(frozen=True)

    mime_type: str = Field(description="Declared MIME type, e.g. 'image/png'")
    data: str = Field(description="Base64 encoded payload")

    @property
    def size(self) -> int:
        """Approximate decoded size in bytes."""
        return len(self.data) * 3 // 4 - self.data[-2:].count("=")


class TextPart(BaseModel):
    """Plain text content."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class InlineDataPart(BaseModel):
    """Inline binary content."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["inline_data"] = "inline_data"
    inline_data: InlineAsset


Part = Annotated[TextPart | InlineDataPart, Field(discriminator="kind")]


class Message(BaseModel):
    """One turn in the conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role
    parts: tuple[Part, ...] = Field(min_length=1)

    @classmethod
    def user(cls, *parts: TextPart | InlineDataPart) -> "Message":
        return cls(role=Role.USER, parts=parts)

    @classmethod
    def model_text(cls, text: str) -> "Message":
        """Build a model turn holding a single text part."""
        return cls(role=Role.MODEL, parts=(TextPart(text=text),))

    @property
    def text(self) -> str:
        """All text parts joined with newlines."""
        return "\n".join(p.text for p in self.parts if isinstance(p, TextPart))

    @property
    def assets(self) -> list[InlineAsset]:
        return [p.inline_data for p in self.parts if isinstance(p, InlineDataPart)]
