"""Namespaced views and buffered transactions over raw contract storage.

A namespace tag is written as a 2-byte big-endian length followed by the tag
itself, so ``scope(b"ab")`` and ``scope(b"a")`` can never produce the same
physical key even if the user key of one starts where the other ends.
"""

from __future__ import annotations

import struct
from contextlib import contextmanager
from typing import Iterator

from scorevault.store.interface import Storage

_MISSING = object()


def length_prefixed(tag: bytes) -> bytes:
    """Encode a namespace tag as ``len(tag) (u16 BE) || tag``."""
    if len(tag) > 0xFFFF:
        raise ValueError("namespace tag too long")
    return struct.pack(">H", len(tag)) + tag


class NamespacedStore:
    """A view of ``storage`` where every key is prefixed by ``prefix``."""

    def __init__(self, storage: Storage, prefix: bytes = b""):
        self.storage = storage
        self.prefix = prefix

    def scope(self, tag: bytes) -> NamespacedStore:
        """Return a child view; nested scopes compose their prefixes."""
        return NamespacedStore(self.storage, self.prefix + length_prefixed(tag))

    def get(self, key: bytes) -> bytes | None:
        return self.storage.get(self.prefix + bytes(key))

    def set(self, key: bytes, value: bytes) -> None:
        self.storage.set(self.prefix + bytes(key), value)

    def remove(self, key: bytes) -> None:
        self.storage.remove(self.prefix + bytes(key))

    def has(self, key: bytes) -> bool:
        return self.get(key) is not None


class Transaction:
    """Write buffer over a Storage.

    Reads see pending writes first. Nothing reaches the backing storage
    until ``commit``; ``rollback`` discards everything.
    """

    def __init__(self, storage: Storage):
        self.storage = storage
        self._pending: dict[bytes, object] = {}

    def get(self, key: bytes) -> bytes | None:
        key = bytes(key)
        if key in self._pending:
            value = self._pending[key]
            return None if value is _MISSING else value  # type: ignore[return-value]
        return self.storage.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        self._pending[bytes(key)] = bytes(value)

    def remove(self, key: bytes) -> None:
        self._pending[bytes(key)] = _MISSING

    @property
    def pending(self) -> int:
        return len(self._pending)

    def commit(self) -> None:
        for key, value in self._pending.items():
            if value is _MISSING:
                self.storage.remove(key)
            else:
                self.storage.set(key, value)  # type: ignore[arg-type]
        self._pending.clear()

    def rollback(self) -> None:
        self._pending.clear()


@contextmanager
def transaction(storage: Storage) -> Iterator[Transaction]:
    """Run a block of writes as one unit: commit on success, drop on error."""
    txn = Transaction(storage)
    try:
        yield txn
    except BaseException:
        txn.rollback()
        raise
    txn.commit()


__all__ = ["NamespacedStore", "Transaction", "length_prefixed", "transaction"]
