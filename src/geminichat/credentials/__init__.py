"""Credential module for geminichat.

Holds the API key and mirrors it into durable key-value storage.
"""

from .base import KeyValueStore
from .factory import create_key_value_store
from .in_memory import InMemoryKeyValueStore
from .manager import DEFAULT_ENTRY_NAME, CredentialManager

__all__ = [
    "CredentialManager",
    "DEFAULT_ENTRY_NAME",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "create_key_value_store",
]
