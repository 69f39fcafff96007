"""SQLite-backed storage implementation for pyorchestra.

Design Pattern: Adapter Pattern
SqliteStateStore adapts an SQLite table to the StateStore interface.

Implementation details:
- aiosqlite for async operations
- WAL mode for concurrent reads
- UPSERT for last-write-wins snapshot semantics
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from pyorchestra.storage.base import StateStore, StorageError


class SqliteStateStore(StateStore):
    """SQLite-backed key-value storage.

    After __init__, the instance is not yet usable. Call connect() first.

    Usage:
        store = SqliteStateStore("state.db")
        await store.connect()
        try:
            await store.put("pyorchestra:wf-1", snapshot_bytes)
        finally:
            await store.close()
    """

    def __init__(self, db_path: str):
        """Initialize storage (connection not opened yet).

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self.db_path = db_path
        self._connection: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()  # Serialize access to shared connection

    @classmethod
    async def in_memory(cls) -> SqliteStateStore:
        """
        Create a connected in-memory SQLite store for testing.

        Example:
            store = await SqliteStateStore.in_memory()
        """
        instance = cls(":memory:")
        await instance.connect()
        return instance

    def __repr__(self) -> str:
        if self.db_path == ":memory:":
            return "SqliteStateStore(in-memory)"
        return f"SqliteStateStore({self.db_path})"

    async def connect(self) -> None:
        """Open database connection and initialize schema.

        Fixed initialization sequence:
        1. Open connection
        2. Enable WAL mode
        3. Create table
        """
        if self._connection is not None:
            return

        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(
            self.db_path,
            timeout=5.0,
            isolation_level=None,  # Autocommit mode
        )

        # In-memory databases report "memory" and don't support WAL
        cursor = await self._connection.execute("PRAGMA journal_mode=WAL")
        result = await cursor.fetchone()
        await cursor.close()

        if result:
            mode = result[0].upper()
            if mode not in ("WAL", "MEMORY"):
                raise StorageError(f"Failed to enable WAL mode, got: {result[0]}")

        await self._connection.execute("PRAGMA busy_timeout=5000")

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS state_store (
                key TEXT PRIMARY KEY,
                value BLOB NOT NULL,
                updated_at INTEGER NOT NULL
            )
        """)

    async def get(self, key: str) -> bytes | None:
        self._check_connected()

        async with self._lock:
            try:
                cursor = await self._connection.execute(
                    "SELECT value FROM state_store WHERE key = ?", (key,)
                )
                row = await cursor.fetchone()
                await cursor.close()
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to read key {key!r}: {e}") from e

        return bytes(row[0]) if row else None

    async def put(self, key: str, value: bytes) -> None:
        self._check_connected()

        updated_at = int(datetime.now(UTC).timestamp() * 1000)
        async with self._lock:
            try:
                await self._connection.execute(
                    """
                    INSERT INTO state_store (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, updated_at),
                )
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to write key {key!r}: {e}") from e

    async def delete(self, key: str) -> bool:
        self._check_connected()

        async with self._lock:
            try:
                cursor = await self._connection.execute(
                    "DELETE FROM state_store WHERE key = ?", (key,)
                )
                removed = cursor.rowcount > 0
                await cursor.close()
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to delete key {key!r}: {e}") from e

        return removed

    async def keys(self, prefix: str = "") -> list[str]:
        self._check_connected()

        async with self._lock:
            try:
                cursor = await self._connection.execute(
                    "SELECT key FROM state_store WHERE substr(key, 1, ?) = ? ORDER BY key",
                    (len(prefix), prefix),
                )
                rows = await cursor.fetchall()
                await cursor.close()
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to list keys with prefix {prefix!r}: {e}") from e

        return [row[0] for row in rows]

    async def reset(self) -> None:
        """Clear all data (for testing/demos)."""
        self._check_connected()

        async with self._lock:
            try:
                await self._connection.execute("DELETE FROM state_store")
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to reset store: {e}") from e

    async def close(self) -> None:
        """Close the connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    def _check_connected(self) -> None:
        """Guard clause: Ensure connection is open."""
        if self._connection is None:
            raise StorageError("Not connected. Call connect() first.")
