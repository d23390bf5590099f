"""In-memory key-value backend.

Simple dict-based storage. Data is lost when the application exits.
"""

from .base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """In-memory store (session-only).

    Suitable for single-session use or testing.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._entries: dict[str, str] = dict(initial or {})

    async def connect(self) -> None:
        """Initialize store (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close store (no-op for in-memory)."""
        pass

    async def get(self, name: str) -> str | None:
        return self._entries.get(name)

    async def set(self, name: str, value: str) -> None:
        self._entries[name] = value

    async def delete(self, name: str) -> None:
        self._entries.pop(name, None)

    @property
    def backend_type(self) -> str:
        return "memory"
