"""Abstract base class for durable key-value storage.

This module defines the interface the credential layer persists through.
The abstraction hides:
- Storage format (JSON, SQLite, etc.)
- Persistence mechanism (file, database, in-memory)
- Connection management
"""

from abc import ABC, abstractmethod
from typing import Any


class KeyValueStore(ABC):
    """Abstract string key-value store.

    Supports async context manager protocol:
        async with store:
            await store.set("gemini_api_key", "...")
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def get(self, name: str) -> str | None:
        """Read an entry, or None when absent."""

    @abstractmethod
    async def set(self, name: str, value: str) -> None:
        """Create or replace an entry."""

    @abstractmethod
    async def delete(self, name: str) -> None:
        """Remove an entry. Removing a missing entry is not an error."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "KeyValueStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()
