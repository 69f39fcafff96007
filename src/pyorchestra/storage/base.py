"""
StateStore - Abstract key-value interface for optional persistence.

Design Pattern: Adapter Pattern
StateStore defines the target interface that storage adapters implement.
Hosts pick a backend (memory, SQLite, or their own) and hand it to the
engine; the engine only ever writes snapshots through this interface.

Design Principle: Dependency Inversion (SOLID)
The engine and SnapshotWriter depend on this abstraction, not on a
concrete database. Writes are eventually-consistent snapshots, not a
transactional log: the latest write for a key wins.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class StorageError(Exception):
    """Storage operation failed."""

    pass


class StateStore(ABC):
    """
    Abstract async key-value store.

    Keys are strings, values are opaque bytes. Implementations must be
    safe to call from several coroutines of one event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """
        Read the value stored under ``key``.

        Returns:
            The stored bytes, or None if the key is absent

        Raises:
            StorageError: If the backend operation fails
        """
        pass

    @abstractmethod
    async def put(self, key: str, value: bytes) -> None:
        """
        Store ``value`` under ``key``, replacing any previous value.

        Raises:
            StorageError: If the backend operation fails
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Remove ``key``.

        Returns:
            True if a value was removed, False if the key was absent
        """
        pass

    @abstractmethod
    async def keys(self, prefix: str = "") -> list[str]:
        """
        List stored keys starting with ``prefix``, sorted.
        """
        pass

    async def close(self) -> None:
        """Release backend resources. Default: nothing to release."""
        return None
