"""Main Textual TUI application.

Orchestrates the UI components around a single ConversationSession. The
session mutates its own state and notifies; the app redraws from it.
"""

import asyncio

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Checkbox, Footer, Header, Input

from ..errors import ChatError
from ..session import ConversationSession
from .config import LOG_LEVELS, STARTER_PROMPT
from .styles import APP_CSS
from .themes import GEMINI_LIGHT
from .widgets import (
    AttachmentBar,
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    ErrorLine,
    SettingsBar,
    SuggestionBar,
    copy_text,
)


class ChatApp(App):
    """Textual TUI for chatting with Gemini."""

    CSS = APP_CSS
    TITLE = "Gemini Chat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+o", "focus_attachment", "Attach", priority=True),
        Binding("ctrl+k", "clear_key", "Clear Key", priority=True),
        Binding("ctrl+r", "copy_last_response", "Copy Response", priority=True),
        Binding("ctrl+d", "toggle_debug", "Log", priority=True),
    ]

    def __init__(
        self,
        session: ConversationSession,
        log_level: str | None = None,
        starter: str | None = STARTER_PROMPT,
    ) -> None:
        super().__init__()
        self._session = session
        self._log_level = log_level
        self._starter = starter
        self._was_in_flight = False
        self._synced = False

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield SettingsBar(self._session.model, id="settings")
        yield ChatHistoryWidget(id="chat-history")
        yield ErrorLine("", id="error-line", markup=False)
        yield AttachmentBar(id="attachment-bar")
        yield ChatInputBar(id="chat-input-bar")
        yield SuggestionBar(id="suggestions")
        yield DebugPanel(id="debug-panel")
        yield Footer()

    async def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(GEMINI_LIGHT)
        self.theme = "gemini-light"

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            level = self._log_level.lower()
            log_panel.threshold = level if level in LOG_LEVELS else "debug"
            log_panel.toggle()
            log_panel.route("info", "TUI", f"Log panel enabled with level: {log_panel.threshold.upper()}")
        self._session.set_debug_callback(log_panel.route)

        await self._session.load_credential()
        credentials = self._session.credentials
        with self.prevent(Input.Changed, Checkbox.Changed):
            self.query_one("#key-input", Input).value = credentials.api_key
            self.query_one("#remember-checkbox", Checkbox).value = credentials.remember

        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        if self._starter:
            input_bar.text = self._starter
        input_bar.focus_input()

        self._session.subscribe(self._on_session_changed)
        self._synced = True
        self._on_session_changed(self._session)

    def on_unmount(self) -> None:
        self._session.unsubscribe(self._on_session_changed)
        self._session.set_debug_callback(None)

    def _on_session_changed(self, session: ConversationSession) -> None:
        """Redraw everything derived from session state."""
        if not self._synced:
            return
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        chat.sync(session.log)
        chat.set_thinking(session.in_flight)

        self.query_one("#error-line", ErrorLine).show_error(session.error)
        self.query_one("#attachment-bar", AttachmentBar).show_attachment(session.pending_file)

        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        if session.in_flight and not self._was_in_flight:
            input_bar.text = ""
        self._was_in_flight = session.in_flight
        self._update_send_state()

        self.sub_title = f"{session.model} | {'key set' if session.has_credential else 'no key'}"

    def _update_send_state(self) -> None:
        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        has_content = bool(input_bar.text.strip()) or self._session.pending_file is not None
        input_bar.set_busy(
            self._session.in_flight,
            can_send=has_content and self._session.has_credential,
        )

    def on_text_area_changed(self, event) -> None:
        if self._synced:
            self._update_send_state()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "model-input":
            self._session.model = event.value.strip()
        elif event.input.id == "key-input":
            self._apply_key(event.value)

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        if event.checkbox.id == "remember-checkbox":
            self._apply_remember(event.value)

    @work(group="credentials")
    async def _apply_key(self, key: str) -> None:
        try:
            await self._session.set_credential(key)
        except ChatError as e:
            self._session.report_error(str(e))

    @work(group="credentials")
    async def _apply_remember(self, remember: bool) -> None:
        try:
            await self._session.set_remember(remember)
        except ChatError as e:
            self._session.report_error(str(e))
            return
        self.notify("Key will be remembered" if remember else "Stored key removed", timeout=2)

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        self._send(event.value)

    def on_suggestion_bar_picked(self, event: SuggestionBar.Picked) -> None:
        self._send(event.text)

    @work(group="send")
    async def _send(self, text: str) -> None:
        """Run one send as a background async worker.

        Not exclusive: a second send while one is in flight is rejected by
        the session rather than cancelling the first.
        """
        try:
            await self._session.submit(text)
        except ChatError as e:
            self.notify(f"Error: {str(e)[:50]}", severity="error", timeout=5)
        except asyncio.CancelledError:
            self.notify("Cancelled", severity="warning", timeout=2)
            raise

    def on_attachment_bar_attach_requested(self, event: AttachmentBar.AttachRequested) -> None:
        self._attach(event.path)

    def on_attachment_bar_detach_requested(self, event: AttachmentBar.DetachRequested) -> None:
        self._session.detach()

    @work(group="attach", exclusive=True)
    async def _attach(self, path: str) -> None:
        from ..assets import file_to_inline_asset

        try:
            asset = await file_to_inline_asset(path)
        except ChatError as e:
            self._session.report_error(str(e))
            return
        self._session.clear_error()
        self._session.attach(asset)
        self.notify(f"Attached {path}", timeout=2)

    def action_focus_attachment(self) -> None:
        self.query_one("#attachment-bar", AttachmentBar).focus_input()

    async def action_clear_key(self) -> None:
        try:
            await self._session.clear_credential()
        except ChatError as e:
            self._session.report_error(str(e))
            return
        with self.prevent(Input.Changed):
            self.query_one("#key-input", Input).value = ""
        self.notify("API key cleared", timeout=2)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        """Copy last model response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            copy_text(self, response, "Response")
        else:
            self.notify("No response to copy", severity="warning")


async def run_textual_tui(
    session: ConversationSession,
    log_level: str | None = None,
    starter: str | None = STARTER_PROMPT,
) -> None:
    """Run the Textual TUI.

    Args:
        session: Conversation session to drive
        log_level: Log level for panel (debug/info/warning/error), None to hide
        starter: Text pre-filled into the composer
    """
    app = ChatApp(session=session, log_level=log_level, starter=starter)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        await session.close()
