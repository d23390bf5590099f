from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from ..models import Message
from .models import LLMResponse


class LLMProvider(ABC):
    """A remote endpoint that turns a conversation into the next model turn.

    Subclasses own client construction, conversion of ``Message`` parts to
    the wire format and translation of SDK failures into ``ChatError``
    subclasses. One call is one request; nothing is retried.

        async with create_llm_provider("gemini", api_key=key) as provider:
            response = await provider.generate_content(model, log)
    """

    @abstractmethod
    async def generate_content(
        self,
        model: str,
        contents: Sequence[Message],
        **kwargs: Any
    ) -> LLMResponse:
        """Generate the next model turn for a conversation.

        Args:
            model: Model identifier
            contents: Full conversation history, oldest first
            **kwargs: Provider-specific parameters

        Returns:
            LLMResponse with the reply text (None when there is none)

        Raises:
            CredentialError: The key was rejected
            AssetError: An inline payload was rejected
            TransportError: Any other endpoint or network failure
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying client."""

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Close on exit, ignoring httpx's "Event loop is closed" on shutdown.

        See https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
