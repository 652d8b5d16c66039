"""Viewing keys: persistent per-account shared secrets.

The caller gets ``api_key_<base64>`` exactly once; only the raw 32 bytes
are stored. Verification always runs the same constant-time comparison,
against a zero buffer when the account never created a key, so timing does
not reveal whether a key exists.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets
import struct

import bittensor as bt

from .address import CanonicalAddr, humanize, short
from .storage import NamespacedStore

PREFIX_VIEWING_KEY = b"viewing_keys"
VIEWING_KEY_PREFIX = "api_key_"
VIEWING_KEY_SIZE = 32

_ZERO_KEY = bytes(VIEWING_KEY_SIZE)


def ct_compare(a: bytes, b: bytes) -> bool:
    """Constant-time equality for byte strings."""
    return hmac.compare_digest(a, b)


def derive_key(
    seed: bytes,
    entropy: bytes,
    block_height: int,
    block_time: int,
    sender: bytes,
) -> bytes:
    """Derive a fresh 32-byte secret.

    HMAC-SHA256 keyed by the contract seed over caller entropy, the block
    context, the sender and per-call randomness, then hashed once more.
    """
    rng_entropy = b"".join([
        struct.pack(">QQ", block_height, block_time),
        sender,
        entropy,
        secrets.token_bytes(32),
    ])
    rand = hmac.new(hashlib.sha256(seed).digest(), rng_entropy, hashlib.sha256).digest()
    return hashlib.sha256(rand).digest()


def encode_key(secret: bytes) -> str:
    return VIEWING_KEY_PREFIX + base64.b64encode(secret).decode("ascii")


def decode_key(supplied: str) -> bytes | None:
    """Return the raw secret in ``supplied``, or None if it is malformed."""
    if not supplied.startswith(VIEWING_KEY_PREFIX):
        return None
    try:
        raw = base64.b64decode(supplied[len(VIEWING_KEY_PREFIX):], validate=True)
    except (binascii.Error, ValueError):
        return None
    if len(raw) != VIEWING_KEY_SIZE:
        return None
    return raw


class ViewingKeys:
    """Viewing-key registry over its own storage scope."""

    def __init__(self, root: NamespacedStore):
        self.store = root.scope(PREFIX_VIEWING_KEY)

    def generate(
        self,
        account: CanonicalAddr,
        seed: bytes,
        entropy: str,
        block_height: int,
        block_time: int,
    ) -> str:
        """Create (or replace) the account's key and return its printable form."""
        secret = derive_key(seed, entropy.encode("utf-8"), block_height, block_time, bytes(account))
        self.store.set(bytes(account), secret)
        bt.logging.info({"viewing_key": {"event": "generated", "account": short(humanize(account))}})
        return encode_key(secret)

    def verify(self, account: CanonicalAddr | None, supplied: str) -> bool:
        """Check ``supplied`` against the account's key.

        An unknown account (``None``) compares against the zero buffer, so
        every outcome costs one constant-time comparison.
        """
        stored = self.store.get(bytes(account)) if account is not None else None
        decoded = decode_key(supplied)

        expected = stored if stored is not None and len(stored) == VIEWING_KEY_SIZE else _ZERO_KEY
        candidate = decoded if decoded is not None else _ZERO_KEY
        matched = ct_compare(expected, candidate)

        return matched and stored is not None and decoded is not None


__all__ = [
    "PREFIX_VIEWING_KEY",
    "VIEWING_KEY_PREFIX",
    "VIEWING_KEY_SIZE",
    "ViewingKeys",
    "ct_compare",
    "decode_key",
    "derive_key",
    "encode_key",
]
