"""Pytest configuration and shared fixtures."""
import asyncio
import base64
import os
from collections.abc import Sequence
from typing import Any

import pytest

from geminichat.credentials import CredentialManager, InMemoryKeyValueStore
from geminichat.llm import LLMProvider, LLMResponse
from geminichat.models import Message
from geminichat.session import ConversationSession

# 1x1 transparent PNG
PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


class FakeProvider(LLMProvider):
    """Records every call and answers from a script.

    Each scripted item is either a reply text (str or None) or an exception
    to raise. When the script runs out the last item repeats.
    """

    def __init__(self, *script: Any, gate: asyncio.Event | None = None):
        self.script = list(script) or ["Hi there"]
        self.calls: list[tuple[str, list[Message]]] = []
        self.gate = gate
        self.closed = False

    async def generate_content(self, model: str, contents: Sequence[Message], **kwargs: Any) -> LLMResponse:
        self.calls.append((model, list(contents)))
        if self.gate is not None:
            await self.gate.wait()
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        return LLMResponse(text=item, model=model)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {"gemini": os.getenv("GEMINI_API_KEY")}


@pytest.fixture
def png_bytes():
    return base64.b64decode(PNG_BASE64)


@pytest.fixture
def png_file(tmp_path, png_bytes):
    """Create a temporary PNG file."""
    path = tmp_path / "pixel.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def credentials(store):
    return CredentialManager(store, api_key="test-key")


@pytest.fixture
def provider():
    return FakeProvider("Hi there")


@pytest.fixture
def make_session(credentials):
    """Build a session whose provider factory returns the given fake."""
    def _make(provider: LLMProvider, **kwargs: Any) -> ConversationSession:
        kwargs.setdefault("credentials", credentials)
        return ConversationSession(provider_factory=lambda key: provider, **kwargs)
    return _make
