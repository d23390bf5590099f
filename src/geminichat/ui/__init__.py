"""Terminal UI module for geminichat.

Provides a Textual-based TUI over a ConversationSession.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (settings, message list, composer, log panel)
- images.py: Inline image rendering inside chat messages
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- config.py: Constants (greeting, suggestions, log levels)
- app.py: Application orchestration (user interaction flow)
"""

from .app import ChatApp, run_textual_tui
from .config import GREETING, STARTER_PROMPT, SUGGESTIONS
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel

__all__ = [
    "ChatApp",
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "GREETING",
    "STARTER_PROMPT",
    "SUGGESTIONS",
    "run_textual_tui",
]
