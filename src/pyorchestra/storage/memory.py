"""In-memory storage implementation for pyorchestra.

Design Pattern: Adapter Pattern
InMemoryStateStore adapts a plain dict to the StateStore interface.

Instance is immediately usable after __init__.
"""

from __future__ import annotations

import asyncio

from pyorchestra.storage.base import StateStore


class InMemoryStateStore(StateStore):
    """In-memory key-value storage for testing.

    Can be substituted for SqliteStateStore without changing client code.

    Usage:
        store = InMemoryStateStore()
        await store.put("pyorchestra:wf-1", snapshot_bytes)
    """

    def __init__(self):
        self._data: dict[str, bytes] = {}
        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"InMemoryStateStore({len(self._data)} keys)"

    async def get(self, key: str) -> bytes | None:
        async with self._lock:
            return self._data.get(key)

    async def put(self, key: str, value: bytes) -> None:
        async with self._lock:
            self._data[key] = value

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._data.pop(key, None) is not None

    async def keys(self, prefix: str = "") -> list[str]:
        async with self._lock:
            return sorted(key for key in self._data if key.startswith(prefix))

    async def reset(self) -> None:
        """Clear all data (for testing/demos)."""
        async with self._lock:
            self._data.clear()
