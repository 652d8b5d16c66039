"""Filesystem-based Storage implementation.

Keeps the whole key space in memory and persists it as gzip-compressed JSON:
  {data_dir}/vault/state.json.gz

Keys and values are hex-encoded. Writes are flushed atomically (temp file +
rename) when the store is flushed or its ``with`` block exits cleanly.
"""

from __future__ import annotations

import gzip
import json
import os
from pathlib import Path
from typing import Any

import bittensor as bt


def _write_gzip_json(path: Path, data: Any) -> None:
    """Write data as gzipped JSON via a temp file, creating parent dirs as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    raw = json.dumps(data, sort_keys=True).encode()
    tmp = path.with_suffix(path.suffix + ".tmp")
    with gzip.open(tmp, "wb") as f:
        f.write(raw)
    os.replace(tmp, path)


def _read_gzip_json(path: Path) -> Any:
    """Read gzipped JSON file."""
    with gzip.open(path, "rb") as f:
        return json.loads(f.read())


class FilesystemStorage:
    """Local filesystem Storage implementation."""

    def __init__(self, data_dir: str):
        self.base = Path(data_dir) / "vault"
        self.path = self.base / "state.json.gz"
        self._data: dict[bytes, bytes] = {}
        self._dirty = False
        if self.path.exists():
            raw = _read_gzip_json(self.path)
            self._data = {bytes.fromhex(k): bytes.fromhex(v) for k, v in raw.items()}
            bt.logging.debug({"vault_store": {"event": "loaded", "keys": len(self._data)}})

    def get(self, key: bytes) -> bytes | None:
        return self._data.get(bytes(key))

    def set(self, key: bytes, value: bytes) -> None:
        self._data[bytes(key)] = bytes(value)
        self._dirty = True

    def remove(self, key: bytes) -> None:
        if self._data.pop(bytes(key), None) is not None:
            self._dirty = True

    def flush(self) -> None:
        """Persist pending changes to disk. No-op when nothing changed."""
        if not self._dirty:
            return
        _write_gzip_json(self.path, {k.hex(): v.hex() for k, v in self._data.items()})
        self._dirty = False
        bt.logging.debug({"vault_store": {"event": "flushed", "keys": len(self._data)}})

    def __len__(self) -> int:
        return len(self._data)

    def __enter__(self) -> FilesystemStorage:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.flush()


__all__ = ["FilesystemStorage"]
