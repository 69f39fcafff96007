"""Storage backends for optional snapshot persistence.

Provides key-value implementations behind a common interface:
    - StateStore: Abstract interface
    - SqliteStateStore: SQLite-backed storage
    - InMemoryStateStore: In-memory storage for testing

Design: Adapter Pattern + Dependency Inversion (SOLID)
    All storage implementations adapt to the StateStore interface, so a
    host can swap backends without touching the engine.
"""

from pyorchestra.storage.base import StateStore, StorageError
from pyorchestra.storage.memory import InMemoryStateStore


def __getattr__(name: str):
    """Lazy import the SQLite adapter so aiosqlite loads only when used."""
    if name == "SqliteStateStore":
        from pyorchestra.storage.sqlite import SqliteStateStore

        return SqliteStateStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "StateStore",
    "StorageError",
    "InMemoryStateStore",
    "SqliteStateStore",
]
