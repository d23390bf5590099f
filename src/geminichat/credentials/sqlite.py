"""SQLite key-value backend.

Provides persistent storage using a SQLite database file.
Uses aiosqlite for async access.
"""

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from .base import KeyValueStore


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed key-value store."""

    def __init__(self, path: str | Path = "./geminichat.db"):
        self._db_path = Path(path).expanduser()
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._create_schema()

    async def _create_schema(self) -> None:
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS entries (
                name TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        await self._connection.commit()

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("SQLite store is not connected. Call connect() first.")
        return self._connection

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def get(self, name: str) -> str | None:
        conn = self._require_connection()
        async with conn.execute(
            "SELECT value FROM entries WHERE name = ?",
            (name,)
        ) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else None

    async def set(self, name: str, value: str) -> None:
        conn = self._require_connection()
        now = datetime.now(timezone.utc).isoformat()
        await conn.execute("""
            INSERT INTO entries (name, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
        """, (name, value, now))
        await conn.commit()

    async def delete(self, name: str) -> None:
        conn = self._require_connection()
        await conn.execute("DELETE FROM entries WHERE name = ?", (name,))
        await conn.commit()

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
