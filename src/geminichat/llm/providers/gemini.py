"""Google Gemini LLM provider implementation.

Uses the official Google GenAI SDK for async content generation.
Reference: https://github.com/googleapis/python-genai

Note: Gemini can return responses without text (safety filtering, empty
candidates). This implementation reports those as ``text=None`` and leaves
the placeholder decision to the caller. There is no retry.
"""

from collections.abc import Sequence
from typing import Any

from google import genai
from google.genai import errors, types

from ...assets import decode_asset
from ...errors import AssetError, ChatError, CredentialError, TransportError
from ...models import InlineDataPart, Message, TextPart
from ..base import LLMProvider
from ..models import LLMResponse

# Substrings Gemini uses in 400 responses for rejected keys and payloads
_KEY_ERROR_MARKERS = ("api key", "api_key_invalid", "permission denied")
_ASSET_ERROR_MARKERS = ("payload size", "request payload", "inline_data", "too large", "unsupported mime")


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider implementation.

    Hidden design decisions:
    - Google GenAI client initialization
    - Message format conversion (text and inline data parts)
    - Mapping SDK errors onto CredentialError / AssetError / TransportError
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        **client_kwargs: Any
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Google AI API key
            model: Default model (gemini-2.5-flash, gemini-2.5-pro, ...)
            **client_kwargs: Additional kwargs for Client
        """
        self._model = model
        self._client = genai.Client(api_key=api_key, **client_kwargs)

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    def _convert_part(self, part: TextPart | InlineDataPart) -> types.Part:
        if isinstance(part, TextPart):
            return types.Part(text=part.text)
        asset = part.inline_data
        return types.Part.from_bytes(data=decode_asset(asset), mime_type=asset.mime_type)

    def _convert_messages(self, messages: Sequence[Message]) -> list[types.Content]:
        """Convert Message list to Gemini format.

        Roles already use Gemini's names ('user' / 'model').
        """
        return [
            types.Content(
                role=msg.role.value,
                parts=[self._convert_part(p) for p in msg.parts]
            )
            for msg in messages
        ]

    def _extract_content(self, response) -> str | None:
        """Extract text content from Gemini response.

        Args:
            response: Gemini GenerateContentResponse

        Returns:
            Text content, or None when the response has no text
        """
        if response.candidates:
            candidate = response.candidates[0]
            if candidate.content and candidate.content.parts:
                texts = [part.text for part in candidate.content.parts if getattr(part, "text", None)]
                if texts:
                    return "".join(texts)

        # Fallback to response.text (may raise or return None)
        try:
            return response.text or None
        except (ValueError, AttributeError):
            return None

    def _map_error(self, error: errors.APIError) -> ChatError:
        """Translate an SDK error into the geminichat taxonomy."""
        message = str(error)
        lowered = message.lower()
        code = getattr(error, "code", None)

        if code in (401, 403) or (code == 400 and any(m in lowered for m in _KEY_ERROR_MARKERS)):
            return CredentialError(message)
        if code == 413 or (code == 400 and any(m in lowered for m in _ASSET_ERROR_MARKERS)):
            return AssetError(message)
        return TransportError(message)

    async def generate_content(
        self,
        model: str,
        contents: Sequence[Message],
        **kwargs: Any
    ) -> LLMResponse:
        """Generate the next model turn using Google Gemini.

        Args:
            model: Model to use (falls back to the provider default when empty)
            contents: Conversation history
            **kwargs: Additional GenerateContentConfig parameters

        Returns:
            LLMResponse with generated text
        """
        model_to_use = model or self._model
        gemini_contents = self._convert_messages(contents)
        config = types.GenerateContentConfig(**kwargs) if kwargs else None

        try:
            response = await self._client.aio.models.generate_content(
                model=model_to_use,
                contents=gemini_contents,
                config=config
            )
        except errors.APIError as e:
            raise self._map_error(e) from e
        except Exception as e:
            raise TransportError(str(e) or e.__class__.__name__) from e

        usage = None
        if response.usage_metadata:
            usage = {
                "prompt_tokens": response.usage_metadata.prompt_token_count or 0,
                "completion_tokens": response.usage_metadata.candidates_token_count or 0,
                "total_tokens": response.usage_metadata.total_token_count or 0
            }

        return LLMResponse(
            text=self._extract_content(response),
            model=model_to_use,
            usage=usage
        )

    async def close(self) -> None:
        """Close the Gemini client.

        Note: The Google GenAI client doesn't require explicit closing,
        but we implement this for interface consistency.
        """
        pass
