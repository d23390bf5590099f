"""API key handling.

The key always lives in memory. When ``remember`` is on it is mirrored
into a durable key-value store under a fixed entry name.
"""

import asyncio
from collections.abc import Callable

from .base import KeyValueStore

DEFAULT_ENTRY_NAME = "gemini_api_key"


class CredentialManager:
    """Holds the API key and keeps the durable copy in sync.

    Mirroring rules:
    - set_credential with remember on writes the store (blank key removes it)
    - clear_credential always removes the stored entry
    - turning remember off removes the stored entry
    - turning remember on with a non-empty key persists it immediately
    """

    def __init__(
        self,
        store: KeyValueStore,
        name: str = DEFAULT_ENTRY_NAME,
        remember: bool = True,
        api_key: str = "",
    ):
        """Initialize the manager.

        Args:
            store: Durable store the key is mirrored into
            name: Entry name inside the store
            remember: Whether the key is mirrored at all
            api_key: Initial in-memory key (not persisted; a stored key replaces it on load)
        """
        self._store = store
        self._name = name
        self._remember = remember
        self._api_key = api_key
        self._debug_callback: Callable[[str, str, str], None] | None = None
        # Orders memory and store updates so both end on the same key
        self._lock = asyncio.Lock()

    def set_debug_callback(self, callback: Callable[[str, str, str], None] | None) -> None:
        """Set callback for diagnostic messages: (level, component, message)."""
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Credentials", message)

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def has_credential(self) -> bool:
        return bool(self._api_key.strip())

    @property
    def remember(self) -> bool:
        return self._remember

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def masked(self) -> str:
        """Key with everything but the last four characters hidden."""
        key = self._api_key.strip()
        if not key:
            return ""
        if len(key) <= 4:
            return "*" * len(key)
        return "*" * (len(key) - 4) + key[-4:]

    async def load(self) -> str:
        """Read the stored key into memory.

        Only consulted when remember is on. An empty store leaves the
        in-memory key untouched.
        """
        async with self._lock:
            if not self._remember:
                return self._api_key
            saved = await self._store.get(self._name)
            if saved:
                self._api_key = saved
                self._debug("info", f"Loaded stored key from {self._store.backend_type} store")
            return self._api_key

    async def set_credential(self, key: str) -> None:
        async with self._lock:
            self._api_key = key
            if not self._remember:
                return
            if key.strip():
                await self._store.set(self._name, key)
                self._debug("debug", "Stored key updated")
            else:
                await self._store.delete(self._name)
                self._debug("debug", "Stored key removed (blank key)")

    async def clear_credential(self) -> None:
        async with self._lock:
            self._api_key = ""
            await self._store.delete(self._name)
            self._debug("info", "Key cleared")

    async def set_remember(self, remember: bool) -> None:
        async with self._lock:
            self._remember = remember
            if not remember:
                await self._store.delete(self._name)
                self._debug("info", "Remember off, stored key removed")
            elif self.has_credential:
                await self._store.set(self._name, self._api_key)
                self._debug("info", "Remember on, key stored")
