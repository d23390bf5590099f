"""Unit tests for the LLM provider layer."""
import base64
from types import SimpleNamespace

import pytest
from google.genai import errors, types

from geminichat.errors import AssetError, CredentialError, TransportError
from geminichat.llm import GeminiProvider, LLMResponse, create_llm_provider
from geminichat.models import InlineAsset, InlineDataPart, Message, Role, TextPart

from conftest import PNG_BASE64


def _text_response(*texts: str) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=[types.Part(text=t) for t in texts])
            )
        ],
        usage_metadata=types.GenerateContentResponseUsageMetadata(
            prompt_token_count=3,
            candidates_token_count=2,
            total_token_count=5,
        ),
    )


def _api_error(cls, code: int, message: str):
    return cls(code, {"error": {"code": code, "message": message, "status": "ERROR"}})


@pytest.fixture
def gemini():
    return GeminiProvider(api_key="fake-key")


def fake_client(provider: GeminiProvider, outcome):
    """Replace the SDK client with one that records calls and returns outcome."""
    calls = []

    async def generate_content(**kwargs):
        calls.append(kwargs)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    provider._client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))
    return calls


class TestGeminiProvider:
    """Tests for GeminiProvider."""

    def test_default_model(self, gemini):
        assert gemini.model == "gemini-2.5-flash"

    def test_convert_messages(self, gemini):
        asset = InlineAsset(mime_type="image/png", data=PNG_BASE64)
        history = [
            Message.model_text("Hello"),
            Message.user(InlineDataPart(inline_data=asset), TextPart(text="What is this?")),
        ]

        contents = gemini._convert_messages(history)

        assert [c.role for c in contents] == ["model", "user"]
        image, text = contents[1].parts
        assert image.inline_data.mime_type == "image/png"
        assert image.inline_data.data == base64.b64decode(PNG_BASE64)
        assert text.text == "What is this?"

    @pytest.mark.asyncio
    async def test_generate_content(self, gemini):
        calls = fake_client(gemini, _text_response("Hi", " there"))

        response = await gemini.generate_content("gemini-2.5-pro", [Message.user(TextPart(text="Hello"))])

        assert response == LLMResponse(
            text="Hi there",
            model="gemini-2.5-pro",
            usage={"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5},
        )
        assert calls[0]["model"] == "gemini-2.5-pro"
        assert calls[0]["config"] is None
        assert calls[0]["contents"][0].role == Role.USER.value

    @pytest.mark.asyncio
    async def test_empty_model_uses_default(self, gemini):
        calls = fake_client(gemini, _text_response("ok"))
        await gemini.generate_content("", [Message.user(TextPart(text="Hello"))])
        assert calls[0]["model"] == "gemini-2.5-flash"

    @pytest.mark.asyncio
    async def test_generation_kwargs_become_config(self, gemini):
        calls = fake_client(gemini, _text_response("ok"))
        await gemini.generate_content("m", [Message.user(TextPart(text="Hello"))], temperature=0.2)
        assert calls[0]["config"].temperature == 0.2

    @pytest.mark.asyncio
    async def test_response_without_text(self, gemini):
        fake_client(gemini, types.GenerateContentResponse(candidates=[]))

        response = await gemini.generate_content("m", [Message.user(TextPart(text="Hello"))])

        assert response.text is None
        assert response.usage is None

    @pytest.mark.parametrize("error, expected", [
        (_api_error(errors.ClientError, 401, "Unauthorized"), CredentialError),
        (_api_error(errors.ClientError, 403, "The caller does not have permission"), CredentialError),
        (_api_error(errors.ClientError, 400, "API key not valid. Please pass a valid API key."), CredentialError),
        (_api_error(errors.ClientError, 413, "Request Entity Too Large"), AssetError),
        (_api_error(errors.ClientError, 400, "Request payload size exceeds the limit"), AssetError),
        (_api_error(errors.ClientError, 400, "Invalid JSON payload received"), TransportError),
        (_api_error(errors.ClientError, 429, "Resource has been exhausted"), TransportError),
        (_api_error(errors.ServerError, 503, "The model is overloaded"), TransportError),
    ])
    @pytest.mark.asyncio
    async def test_error_mapping(self, gemini, error, expected):
        fake_client(gemini, error)

        with pytest.raises(expected) as exc_info:
            await gemini.generate_content("m", [Message.user(TextPart(text="Hello"))])

        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_network_failure_is_transport_error(self, gemini):
        fake_client(gemini, ConnectionError("connection reset"))

        with pytest.raises(TransportError, match="connection reset"):
            await gemini.generate_content("m", [Message.user(TextPart(text="Hello"))])

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_generate_real_api(self, api_keys):
        """Integration test: one text turn against the real API."""
        if not api_keys["gemini"]:
            pytest.skip("GEMINI_API_KEY not set")

        provider = GeminiProvider(api_key=api_keys["gemini"])
        try:
            response = await provider.generate_content(
                "",
                [Message.user(TextPart(text="Reply with the single word: pong"))],
            )
            assert response.text
            assert "pong" in response.text.lower()
        finally:
            await provider.close()

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_generate_with_image_real_api(self, api_keys):
        """Integration test: an inline image turn against the real API."""
        if not api_keys["gemini"]:
            pytest.skip("GEMINI_API_KEY not set")

        provider = GeminiProvider(api_key=api_keys["gemini"])
        try:
            message = Message.user(
                InlineDataPart(inline_data=InlineAsset(mime_type="image/png", data=PNG_BASE64)),
                TextPart(text="How many pixels wide is this image?"),
            )
            response = await provider.generate_content("", [message])
            assert response.text
        finally:
            await provider.close()

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_invalid_key_real_api(self, api_keys):
        """Integration test: a bogus key maps to CredentialError."""
        if not api_keys["gemini"]:
            pytest.skip("GEMINI_API_KEY not set")

        provider = GeminiProvider(api_key="definitely-not-a-key")
        with pytest.raises(CredentialError):
            await provider.generate_content("", [Message.user(TextPart(text="Hello"))])


class TestFactory:
    """Tests for create_llm_provider."""

    @pytest.mark.parametrize("name", ["gemini", "Google"])
    def test_create_gemini(self, name):
        provider = create_llm_provider(name, api_key="fake-key", model="gemini-2.5-pro")
        assert isinstance(provider, GeminiProvider)
        assert provider.model == "gemini-2.5-pro"

    def test_missing_api_key(self):
        with pytest.raises(TypeError, match="api_key"):
            create_llm_provider("gemini")

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unsupported provider"):
            create_llm_provider("openai", api_key="x")
