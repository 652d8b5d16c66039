"""Storage protocol - pluggable byte key/value backend.

Implementations: MemoryStorage (tests, one-shot runs), FilesystemStorage
(CLI). The contract only ever sees this interface.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Storage(Protocol):
    """Abstract interface for raw contract storage."""

    def get(self, key: bytes) -> bytes | None:
        """Fetch the value stored under ``key``, or None."""
        ...

    def set(self, key: bytes, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    def remove(self, key: bytes) -> None:
        """Delete ``key`` if present."""
        ...


class MemoryStorage:
    """Dict-backed Storage implementation."""

    def __init__(self, data: dict[bytes, bytes] | None = None):
        self.data: dict[bytes, bytes] = dict(data or {})

    def get(self, key: bytes) -> bytes | None:
        return self.data.get(bytes(key))

    def set(self, key: bytes, value: bytes) -> None:
        self.data[bytes(key)] = bytes(value)

    def remove(self, key: bytes) -> None:
        self.data.pop(bytes(key), None)

    def __len__(self) -> int:
        return len(self.data)


__all__ = ["MemoryStorage", "Storage"]
