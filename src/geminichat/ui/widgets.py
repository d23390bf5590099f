"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Settings controls (model, API key, remember toggle)
- Chat message rendering, including inline images
- Attachment selection
- Log rendering and level filtering
"""

from datetime import datetime

import pyperclip
from rich.markup import escape
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message as TextualMessage
from textual.widgets import Button, Checkbox, Input, RichLog, Static, TextArea

from ..models import InlineAsset, InlineDataPart, Message, Role, TextPart
from .config import (
    LOG_LEVELS,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    MODEL_LABEL,
    SUGGESTIONS,
    THINKING_TEXT,
    USER_LABEL,
)
from .images import build_asset_widget, describe_asset


def copy_text(widget, text: str, label: str) -> None:
    """Copy text to the system clipboard, falling back to OSC 52."""
    try:
        pyperclip.copy(text)
        widget.app.notify(f"{label} copied", timeout=2)
    except pyperclip.PyperclipException:
        widget.app.copy_to_clipboard(text)
        widget.app.notify(f"{label} copied (terminal)", timeout=2)


class SettingsBar(Horizontal):
    """Model identifier, API key and the remember toggle."""

    def __init__(self, model: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._model = model

    def compose(self):
        with Vertical(classes="setting"):
            yield Static("Model", classes="setting-label")
            yield Input(
                value=self._model,
                placeholder="e.g. gemini-2.5-flash",
                id="model-input",
            )
        with Vertical(classes="setting"):
            yield Static("Gemini API Key", classes="setting-label")
            yield Input(placeholder="Paste your API key", password=True, id="key-input")
            yield Checkbox("Remember on this machine", value=True, id="remember-checkbox")


class ClickableMessage(Vertical):
    """A chat message container that copies its text when clicked."""

    def __init__(self, content: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._content = content

    def on_click(self, event: Click) -> None:
        event.stop()
        if self._content:
            copy_text(self, self._content, "Message")


class ChatHistoryWidget(VerticalScroll):
    """Scrollable message list mirroring the session log.

    The log is append-only, so syncing only mounts messages past the
    number already rendered.
    """

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._rendered = 0
        self._last_response: str | None = None
        self._thinking: Vertical | None = None

    def sync(self, log: tuple[Message, ...]) -> None:
        """Render any messages not displayed yet."""
        for msg in log[self._rendered:]:
            self._render_message(msg)
            if msg.role == Role.MODEL:
                self._last_response = msg.text
        if len(log) != self._rendered:
            self._rendered = len(log)
            self.border_subtitle = f"{self._rendered} messages"
            self.scroll_end(animate=False)

    def set_thinking(self, thinking: bool) -> None:
        """Show or hide the placeholder bubble for a pending reply."""
        if thinking and self._thinking is None:
            self._thinking = Vertical(
                Static(MODEL_LABEL, classes="message-header"),
                Static(THINKING_TEXT, classes="message-content"),
                classes="chat-message assistant-message thinking",
            )
            self.mount(self._thinking)
            self.scroll_end(animate=False)
        elif not thinking and self._thinking is not None:
            self._thinking.remove()
            self._thinking = None

    def get_last_response(self) -> str | None:
        """Get the last model response."""
        return self._last_response

    def _render_message(self, msg: Message) -> None:
        if msg.role == Role.USER:
            label, border_class = USER_LABEL, "user-message"
        else:
            label, border_class = MODEL_LABEL, "assistant-message"

        container = ClickableMessage(content=msg.text, classes=f"chat-message {border_class}")
        container.compose_add_child(Static(label, classes="message-header"))
        for part in msg.parts:
            if isinstance(part, InlineDataPart):
                container.compose_add_child(build_asset_widget(part.inline_data))
            elif isinstance(part, TextPart):
                for line in part.text.split("\n"):
                    container.compose_add_child(
                        Static(line, markup=False, classes="message-content")
                    )

        if self._thinking is not None:
            self.mount(container, before=self._thinking)
        else:
            self.mount(container)


class AttachmentBar(Horizontal):
    """File path entry with attach and clear buttons."""

    class AttachRequested(TextualMessage):
        """Posted when the user asks to attach the file at ``path``."""

        def __init__(self, path: str) -> None:
            super().__init__()
            self.path = path

    class DetachRequested(TextualMessage):
        """Posted when the user clears the attachment."""

    def compose(self):
        yield Input(placeholder="Image path (optional)", id="attach-input")
        yield Button("Attach", id="attach-btn")
        yield Button("Clear", id="detach-btn", variant="default")
        yield Static("", id="attach-label", markup=False)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "attach-btn":
            event.stop()
            path = self.query_one("#attach-input", Input).value.strip()
            if path:
                self.post_message(self.AttachRequested(path))
        elif event.button.id == "detach-btn":
            event.stop()
            self.post_message(self.DetachRequested())

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "attach-input" and event.value.strip():
            event.stop()
            self.post_message(self.AttachRequested(event.value.strip()))

    def show_attachment(self, asset: InlineAsset | None) -> None:
        label = self.query_one("#attach-label", Static)
        if asset is None:
            label.update("")
            self.query_one("#attach-input", Input).value = ""
        else:
            label.update(f"Selected: {describe_asset(asset)}")

    def focus_input(self) -> None:
        self.query_one("#attach-input", Input).focus()


class ChatInputBar(Horizontal):
    """Composer: a TextArea plus the Send button.

    Submitting never clears the text; the app clears it once the turn
    has been accepted.
    """

    class Submitted(TextualMessage):
        """Posted with the composer text when the user sends."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        text_area.highlight_cursor_line = False
        yield text_area
        yield Button("Send", id="send-btn", variant="primary").with_tooltip("Send (Ctrl+J)")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            event.stop()
            self._submit()

    def on_key(self, event) -> None:
        # Terminals report Ctrl+Enter as plain Enter, so Ctrl+J sends
        if event.key == "ctrl+j":
            event.prevent_default()
            event.stop()
            self._submit()

    def _submit(self) -> None:
        if not self.query_one("#send-btn", Button).disabled:
            self.post_message(self.Submitted(self.text.strip()))

    @property
    def text(self) -> str:
        return self.query_one("#chat-input", TextArea).text

    @text.setter
    def text(self, value: str) -> None:
        self.query_one("#chat-input", TextArea).text = value

    def set_busy(self, busy: bool, can_send: bool) -> None:
        """Send shows "Wait" while busy and is disabled unless it can send."""
        button = self.query_one("#send-btn", Button)
        button.label = "Wait" if busy else "Send"
        button.disabled = busy or not can_send

    def focus_input(self) -> None:
        self.query_one("#chat-input", TextArea).focus()


class SuggestionBar(Horizontal):
    """Quick prompts that send immediately when picked."""

    class Picked(TextualMessage):
        def __init__(self, text: str) -> None:
            super().__init__()
            self.text = text

    def compose(self):
        for i, text in enumerate(SUGGESTIONS):
            yield Button(text, id=f"suggestion-{i}", classes="suggestion")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        index = int(event.button.id.removeprefix("suggestion-"))
        self.post_message(self.Picked(SUGGESTIONS[index]))


class ErrorLine(Static):
    """Single line showing the last error, hidden when there is none."""

    def show_error(self, message: str | None) -> None:
        if message:
            self.update(f"⚠ {message}")
            self.display = True
        else:
            self.update("")
            self.display = False


class DebugPanel(RichLog):
    """Trace log fed by the session's debug callback.

    Hidden until toggled (Ctrl+D or ``--log-level``). Entries below
    ``threshold`` are dropped. Clicking copies the plain text.
    """

    BORDER_TITLE = "Log"

    LEVEL_STYLES = {"debug": "dim", "info": "cyan", "warning": "yellow", "error": "red"}
    COMPONENT_STYLES = {
        "TUI": "cyan",
        "Session": "green",
        "LLM": "magenta",
        "Credentials": "yellow",
        "Assets": "blue",
    }

    def __init__(self, *args, threshold: str = "debug", **kwargs) -> None:
        super().__init__(*args, markup=True, highlight=False, wrap=True, **kwargs)
        self.threshold = threshold
        self._plain: list[str] = []

    def route(self, level: str, component: str, message: str) -> None:
        """Debug callback: (level, component, message)."""
        if LOG_LEVELS.get(level, 0) < LOG_LEVELS.get(self.threshold, 0):
            return
        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."
        stamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        self._plain.append(f"{stamp} {level.upper():<7} [{component}] {message}")
        level_style = self.LEVEL_STYLES.get(level, "white")
        comp_style = self.COMPONENT_STYLES.get(component, "white")
        self.write(
            f"[dim]{stamp}[/] [{level_style}]{level.upper():<7}[/] "
            f"[{comp_style}]\\[{component}][/] {escape(message)}"
        )

    def toggle(self) -> bool:
        """Flip visibility and return the new state."""
        self.display = not self.display
        self.border_subtitle = f"{self.threshold} and above" if self.display else ""
        return self.display

    def get_plain_text(self) -> str:
        return "\n".join(self._plain)

    def on_click(self, event: Click) -> None:
        event.stop()
        if self._plain:
            copy_text(self, self.get_plain_text(), "Log")
        else:
            self.app.notify("Log is empty", timeout=2)
