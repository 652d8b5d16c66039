"""Tests for canonical / human address conversion."""

import hashlib

import pytest

from scorevault.contract.address import (
    CanonicalAddr,
    HumanAddr,
    canonicalize,
    humanize,
    pubkey_to_canonical,
    ripemd160,
    short,
)
from scorevault.contract.errors import InvalidInput


class TestAddresses:

    def test_ripemd160_known_vector(self):
        assert ripemd160(b"").hex() == "9c1185a5c5e9fc54612808977ee8f548b2258d31"
        assert ripemd160(b"abc").hex() == "8eb208f7e05d987a9b044a8e98c6b087f15a0bfc"

    def test_pubkey_fingerprint(self, alice):
        expected = ripemd160(hashlib.sha256(alice.pubkey).digest())
        assert bytes(pubkey_to_canonical(alice.pubkey)) == expected

    def test_humanize_format(self):
        human = humanize(CanonicalAddr(bytes(range(20))))
        assert isinstance(human, HumanAddr)
        assert human.startswith("secret1")
        assert len(human) == len("secret1") + 32 + 6

    def test_conversions_are_inverse(self):
        canonical = CanonicalAddr(bytes(range(20)))
        assert canonicalize(humanize(canonical)) == canonical

    def test_canonical_length_enforced(self):
        with pytest.raises(InvalidInput):
            CanonicalAddr(b"\x00" * 19)

    def test_wrong_prefix_rejected(self):
        other = humanize(CanonicalAddr(bytes(20)), prefix="cosmos")
        with pytest.raises(InvalidInput):
            canonicalize(other)

    def test_bad_checksum_rejected(self):
        human = humanize(CanonicalAddr(bytes(20)))
        flipped = human[:-1] + ("q" if human[-1] != "q" else "p")
        with pytest.raises(InvalidInput):
            canonicalize(flipped)

    def test_short(self):
        assert short(None) == "none"
        assert short("secret1abcdefghijklmnop") == "secret1abcdefghi"
