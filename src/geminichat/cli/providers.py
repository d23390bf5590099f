"""Provider factory functions for CLI.

Centralizes creation of the key store, credential manager and session from
environment variables. Hides configuration details from command
implementations.
"""

import os
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..credentials import CredentialManager, KeyValueStore, create_key_value_store
from ..session import DEFAULT_MODEL, ConversationSession

# Default console for output
_console = Console()

LEVEL_STYLES = {
    "debug": "dim",
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
}


def get_model(model: str | None = None) -> str:
    """Resolve the model identifier.

    Environment variables:
        GEMINI_MODEL: Model identifier (default: gemini-2.5-flash)
    """
    return model or os.getenv("GEMINI_MODEL", DEFAULT_MODEL)


def get_key_store(backend: str | None = None, path: str | Path | None = None) -> KeyValueStore:
    """Create the durable key store from arguments or environment variables.

    Environment variables:
        GEMINICHAT_KEY_STORE: Backend (memory, file, sqlite; default: file)
        GEMINICHAT_KEY_STORE_PATH: File or database path for file/sqlite
    """
    backend = (backend or os.getenv("GEMINICHAT_KEY_STORE", "file")).lower()
    path = path or os.getenv("GEMINICHAT_KEY_STORE_PATH")

    config = {}
    if path and backend in ("file", "sqlite"):
        config["path"] = path
    return create_key_value_store(backend, **config)


def console_logger(console: Console | None = None):
    """Build a debug callback that prints to a Rich console.

    Returns:
        Function(level, component, message)
    """
    con = console or _console

    def _log(level: str, component: str, message: str) -> None:
        style = LEVEL_STYLES.get(level, "white")
        con.print(f"[{style}]{level.upper():<7}[/] [bold]\\[{component}][/] {escape(message)}")

    return _log


async def open_session(
    store: KeyValueStore,
    model: str | None = None,
    remember: bool = True,
    greeting: str | None = None,
    verbose: bool = False,
    console: Console | None = None,
) -> ConversationSession:
    """Connect the store and build a session with the stored key loaded.

    The caller owns the store and must disconnect it.

    Environment variables:
        GEMINI_API_KEY: Key used when nothing is stored (never persisted)
    """
    await store.connect()
    credentials = CredentialManager(
        store,
        remember=remember,
        api_key=os.getenv("GEMINI_API_KEY", ""),
    )
    session = ConversationSession(
        credentials=credentials,
        model=get_model(model),
        greeting=greeting,
    )
    if verbose:
        session.set_debug_callback(console_logger(console))
    await session.load_credential()
    return session
