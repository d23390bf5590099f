"""Conversation session.

Owns the message log and mediates every exchange with the remote model.

State is a single in-flight flag:
    idle -> (send issued) -> in-flight -> (response or error) -> idle

The log is append-only. A user turn is appended optimistically before the
request goes out; the model turn is appended only when the request
succeeds.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..credentials import CredentialManager, InMemoryKeyValueStore
from ..errors import ChatError, CredentialError, TransportError, ValidationError
from ..llm import LLMProvider, create_llm_provider
from ..models import InlineAsset, InlineDataPart, Message, TextPart

DEFAULT_MODEL = "gemini-2.5-flash"
NO_CONTENT_PLACEHOLDER = "[No content]"
MISSING_KEY_MESSAGE = "Please enter a valid Gemini API key first"

ProviderFactory = Callable[[str], LLMProvider]
Listener = Callable[["ConversationSession"], None]
DebugCallback = Callable[[str, str, str], None]


def _default_provider_factory(api_key: str) -> LLMProvider:
    return create_llm_provider("gemini", api_key=api_key)


class ConversationSession:
    """Single conversation with a hosted model.

    Presentation layers subscribe to change notifications and redraw from
    the read-only views (``log``, ``in_flight``, ``error``, ...).

    Usage:
        session = ConversationSession(credentials=manager)
        await session.load_credential()
        reply = await session.submit("Hello")
    """

    def __init__(
        self,
        credentials: CredentialManager | None = None,
        model: str = DEFAULT_MODEL,
        provider_factory: ProviderFactory | None = None,
        greeting: str | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            credentials: Key holder; defaults to an in-memory, non-persistent one
            model: Model identifier sent with every request
            provider_factory: Builds a provider for an API key
            greeting: Optional model-authored message seeding the log
        """
        self._credentials = credentials or CredentialManager(InMemoryKeyValueStore())
        self._model = model
        self._provider_factory = provider_factory or _default_provider_factory
        self._provider: LLMProvider | None = None
        self._provider_key: str | None = None

        self._log: list[Message] = []
        self._pending_file: InlineAsset | None = None
        self._in_flight = False
        self._error: str | None = None

        self._listeners: list[Listener] = []
        self._debug_callback: DebugCallback | None = None

        if greeting:
            self._log.append(Message.model_text(greeting))

    def subscribe(self, listener: Listener) -> None:
        """Register a callback invoked with the session after every change."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set callback for debug logging.

        Args:
            callback: Function(level, component, message) where level is
                      'debug', 'info', 'warning', or 'error'
        """
        self._debug_callback = callback
        self._credentials.set_debug_callback(callback)

    def _debug(self, level: str, component: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, component, message)

    @property
    def log(self) -> tuple[Message, ...]:
        return tuple(self._log)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def error(self) -> str | None:
        """Human-readable error from the last failed attempt."""
        return self._error

    @property
    def pending_file(self) -> InlineAsset | None:
        return self._pending_file

    @property
    def credentials(self) -> CredentialManager:
        return self._credentials

    @property
    def has_credential(self) -> bool:
        return self._credentials.has_credential

    @property
    def model(self) -> str:
        return self._model

    @model.setter
    def model(self, value: str) -> None:
        self._model = value
        self._notify()

    async def load_credential(self) -> None:
        """Read the durable key once at session start."""
        await self._credentials.load()
        self._notify()

    async def set_credential(self, key: str) -> None:
        await self._credentials.set_credential(key)
        self._notify()

    async def clear_credential(self) -> None:
        await self._credentials.clear_credential()
        self._notify()

    async def set_remember(self, remember: bool) -> None:
        await self._credentials.set_remember(remember)
        self._notify()

    def _get_provider(self) -> LLMProvider:
        """Return a provider for the current key, building one if the key changed."""
        key = self._credentials.api_key.strip()
        if not key:
            raise CredentialError(MISSING_KEY_MESSAGE)
        if self._provider is None or self._provider_key != key:
            try:
                self._provider = self._provider_factory(key)
            except Exception as e:
                self._provider = None
                self._provider_key = None
                raise CredentialError(f"{MISSING_KEY_MESSAGE} ({e})") from e
            self._provider_key = key
            self._debug("debug", "LLM", "Provider created for current key")
        return self._provider

    async def close(self) -> None:
        """Release the cached provider."""
        if self._provider is not None:
            await self._provider.close()
            self._provider = None
            self._provider_key = None

    def attach(self, asset: InlineAsset) -> None:
        self._pending_file = asset
        self._notify()

    def detach(self) -> None:
        self._pending_file = None
        self._notify()

    def append_user_turn(
        self,
        text: str | None = None,
        file: InlineAsset | None = None,
    ) -> Message:
        """Build the user turn for the next send.

        The asset part comes first and the text part second. The log is not
        touched; ``send_turn`` appends the returned message.

        Raises:
            ValidationError: If both text and file are empty
        """
        content = (text or "").strip()
        parts: list[TextPart | InlineDataPart] = []
        if file is not None and file.data:
            parts.append(InlineDataPart(inline_data=file))
        if content:
            parts.append(TextPart(text=content))
        if not parts:
            raise ValidationError("Nothing to send: enter a message or attach a file")
        return Message.user(*parts)

    async def prepare_turn(
        self,
        text: str | None = None,
        path: str | Path | None = None,
    ) -> Message:
        """Convert an optional file and build the user turn.

        Uses ``pending_file`` when no path is given.

        Raises:
            AssetError: If the file cannot be converted
            ValidationError: If there is nothing to send
        """
        from ..assets import file_to_inline_asset

        file = self._pending_file
        if path is not None:
            file = await file_to_inline_asset(path)
            self._debug("debug", "Assets", f"Converted {path} ({file.mime_type}, {file.size:,} bytes)")
        return self.append_user_turn(text, file)

    async def send_turn(self, new_message: Message, **kwargs: Any) -> Message | None:
        """Send a user turn together with the whole log.

        A call while another request is in flight is ignored and returns
        None. On success the model reply is appended and returned. On
        failure only the optimistic user turn stays in the log, the error is
        recorded on ``error`` and re-raised.

        Raises:
            CredentialError: No usable key (nothing is appended)
            TransportError: The request failed
            AssetError: The endpoint rejected an inline payload
        """
        if self._in_flight:
            self._debug("warning", "Session", "Send ignored: a request is already in flight")
            return None

        try:
            provider = self._get_provider()
        except CredentialError as e:
            self.report_error(str(e))
            raise

        self._error = None
        self._in_flight = True
        self._log.append(new_message)
        self._pending_file = None
        self._notify()

        self._debug("info", "LLM", f"Sending {len(self._log)} message(s) to {self._model}")
        try:
            response = await provider.generate_content(self._model, list(self._log), **kwargs)
            reply = Message.model_text(response.text or NO_CONTENT_PLACEHOLDER)
            self._log.append(reply)
            self._debug("info", "LLM", f"Reply received ({len(reply.text)} chars)")
            return reply
        except ChatError as e:
            self._error = str(e)
            self._debug("error", "LLM", self._error)
            raise
        except Exception as e:
            self._error = str(e) or e.__class__.__name__
            self._debug("error", "LLM", self._error)
            raise TransportError(self._error) from e
        finally:
            self._in_flight = False
            self._notify()

    async def submit(
        self,
        text: str | None = None,
        path: str | Path | None = None,
        **kwargs: Any
    ) -> Message | None:
        """Run the full send flow for user input.

        Checks run before anything is built: busy guard first, then the key,
        then file conversion and validation. Errors are recorded on
        ``error`` and re-raised.
        """
        if self._in_flight:
            self._debug("warning", "Session", "Submit ignored: a request is already in flight")
            return None
        try:
            if not self.has_credential:
                raise CredentialError(MISSING_KEY_MESSAGE)
            message = await self.prepare_turn(text, path)
        except ChatError as e:
            self.report_error(str(e))
            raise
        return await self.send_turn(message, **kwargs)

    def report_error(self, message: str | None) -> None:
        """Record a human-readable error for the presentation layer."""
        self._error = message
        if message:
            self._debug("error", "Session", message)
        self._notify()

    def clear_error(self) -> None:
        self.report_error(None)
