"""UI configuration constants.

Centralizes magic numbers and configuration values for the UI module.
"""

# Debug callback levels; the log panel drops entries below its threshold
LOG_LEVELS = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "error": 40,
}

# Conversation seed
GREETING = "👋 This is the Gemini helper, let's start chatting!"
STARTER_PROMPT = "Hi! Chat with me for a bit!"

# Quick prompts shown under the composer; picking one sends it immediately
SUGGESTIONS = (
    "Describe the uploaded image",
    "Translate into Chinese: Hello!",
    "Write a short poem",
)

# Message labels
USER_LABEL = "You"
MODEL_LABEL = "Gemini"
THINKING_TEXT = "Thinking…"

# Inline image rendering
IMAGE_MAX_HEIGHT = 12  # Terminal rows

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # Characters before truncating log messages
