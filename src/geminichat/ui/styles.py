"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.
"""

APP_CSS = """
Screen {
    layout: vertical;
    background: $background;
}

/* ============================================
   Settings Bar - Model / Key / Remember
   ============================================ */
#settings {
    height: auto;
    padding: 0 1;
    background: $surface;
    border-bottom: solid $border;

    .setting {
        width: 1fr;
        height: auto;
        padding: 0 1;
    }

    .setting-label {
        text-style: bold;
        color: $text-muted;
    }

    Checkbox {
        border: none;
        background: transparent;
        padding: 0;
    }
}

/* ============================================
   Chat History Panel
   ============================================ */
#chat-history {
    height: 1fr;
    background: $surface;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

.chat-message {
    height: auto;
    max-width: 85%;
    margin: 1 0 0 0;
    padding: 0 1;
}

.user-message {
    background: $primary;
    color: #ffffff;
    margin-left: 8;
}

.assistant-message {
    background: $secondary;
    color: #ffffff;
}

.thinking {
    opacity: 70%;
}

.message-header {
    text-style: bold;
    opacity: 80%;
}

.message-content {
    height: auto;
}

.message-image {
    width: auto;
    height: auto;
    margin: 1 0;
}

.message-attachment {
    text-style: italic;
}

/* ============================================
   Error Line
   ============================================ */
#error-line {
    height: auto;
    padding: 0 2;
    color: $text-error;
    background: $error 15%;
    border-top: solid $error 40%;
}

/* ============================================
   Attachment Bar
   ============================================ */
AttachmentBar {
    height: auto;
    padding: 0 1;

    #attach-input {
        width: 1fr;
    }

    Button {
        min-width: 8;
        margin-left: 1;
    }

    #attach-label {
        width: auto;
        padding: 1 1 0 1;
        color: $text-muted;
    }
}

/* ============================================
   Chat Input Bar - Text Entry + Send
   ============================================ */
ChatInputBar {
    height: 5;
    border: round $primary 60%;
    background: $surface;

    &:focus-within {
        border: round $primary;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#send-btn {
    width: 10;
    height: 100%;
    margin-left: 1;
}

/* ============================================
   Suggestions
   ============================================ */
SuggestionBar {
    height: auto;
    padding: 0 1;

    .suggestion {
        width: auto;
        margin-right: 1;
    }
}

/* ============================================
   Debug/Log Panel
   ============================================ */
#debug-panel {
    display: none;
    height: auto;
    min-height: 6;
    max-height: 12;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-y: scroll;
    overflow-x: auto;
}
"""
