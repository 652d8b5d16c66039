"""Account identities: raw fingerprints and their bech32 form.

A ``CanonicalAddr`` is the 20-byte RIPEMD160(SHA256(pubkey)) fingerprint
used as the storage key. A ``HumanAddr`` is the chain's bech32 rendering of
it. Convert only through ``humanize`` / ``canonicalize``.
"""

from __future__ import annotations

import hashlib

import bech32
from Crypto.Hash import RIPEMD160

from .errors import InvalidInput

BECH32_PREFIX = "secret"
CANONICAL_LENGTH = 20


class CanonicalAddr(bytes):
    """Fixed-length binary account id."""

    def __new__(cls, raw: bytes):
        if len(raw) != CANONICAL_LENGTH:
            raise InvalidInput(f"canonical address must be {CANONICAL_LENGTH} bytes, got {len(raw)}")
        return super().__new__(cls, raw)


class HumanAddr(str):
    """Bech32-encoded account address."""


def ripemd160(data: bytes) -> bytes:
    return RIPEMD160.new(data).digest()


def pubkey_to_canonical(pubkey: bytes) -> CanonicalAddr:
    """Fingerprint a compressed secp256k1 public key."""
    return CanonicalAddr(ripemd160(hashlib.sha256(pubkey).digest()))


def humanize(canonical: CanonicalAddr, prefix: str = BECH32_PREFIX) -> HumanAddr:
    data = bech32.convertbits(bytes(canonical), 8, 5)
    return HumanAddr(bech32.bech32_encode(prefix, data))


def canonicalize(human: str, prefix: str = BECH32_PREFIX) -> CanonicalAddr:
    hrp, data = bech32.bech32_decode(human)
    if hrp is None or data is None:
        raise InvalidInput(f"invalid bech32 address: {human!r}")
    if hrp != prefix:
        raise InvalidInput(f"wrong address prefix {hrp!r}, expected {prefix!r}")
    raw = bech32.convertbits(data, 5, 8, False)
    if raw is None:
        raise InvalidInput(f"invalid bech32 payload: {human!r}")
    return CanonicalAddr(bytes(raw))


def short(address: str | None) -> str:
    """Truncate an address for log readability."""
    if not address:
        return "none"
    return address[:16]


__all__ = [
    "BECH32_PREFIX",
    "CanonicalAddr",
    "HumanAddr",
    "canonicalize",
    "humanize",
    "pubkey_to_canonical",
    "ripemd160",
    "short",
]
