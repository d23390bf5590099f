"""JSON file key-value backend.

Stores entries as a flat JSON object in a single file that only the
current user can read. File access runs in a worker thread; updates are
serialized per store and replace the file atomically.
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path

from ..errors import CredentialError
from .base import KeyValueStore

DEFAULT_PATH = Path.home() / ".config" / "geminichat" / "credentials.json"


class JsonFileKeyValueStore(KeyValueStore):
    """Key-value store backed by a JSON file."""

    def __init__(self, path: str | Path = DEFAULT_PATH):
        self._path = Path(path).expanduser()
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        """Nothing to open; the file is read on every access."""
        pass

    async def disconnect(self) -> None:
        pass

    def _read(self) -> dict[str, str]:
        """Load all entries.

        Raises:
            CredentialError: If the file is not a JSON object
        """
        if not self._path.exists():
            return {}
        text = self._path.read_text(encoding="utf-8").strip()
        if not text:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CredentialError(
                f"Key file {self._path} is not valid JSON ({e}); fix or delete it"
            ) from e
        if not isinstance(data, dict):
            raise CredentialError(
                f"Key file {self._path} must hold a JSON object; fix or delete it"
            )
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, entries: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            json.dump(entries, tmp, indent=2)
        tmp_path = Path(tmp.name)
        try:
            os.chmod(tmp_path, 0o600)
            tmp_path.replace(self._path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    async def get(self, name: str) -> str | None:
        async with self._lock:
            entries = await asyncio.to_thread(self._read)
        return entries.get(name)

    async def set(self, name: str, value: str) -> None:
        async with self._lock:
            entries = await asyncio.to_thread(self._read)
            entries[name] = value
            await asyncio.to_thread(self._write, entries)

    async def delete(self, name: str) -> None:
        async with self._lock:
            entries = await asyncio.to_thread(self._read)
            if name in entries:
                del entries[name]
                await asyncio.to_thread(self._write, entries)

    @property
    def backend_type(self) -> str:
        return "file"

    @property
    def path(self) -> Path:
        return self._path
