"""Tests for the fixed-format binary codec."""

import pytest

from scorevault.contract.codec import decode, encode
from scorevault.contract.errors import SerializationError
from scorevault.contract.models import MAX_U16, MAX_U64, Constants, GlobalState, UserRecord


class TestEncoding:

    def test_global_state_layout(self):
        state = GlobalState(max_size=1000, score_count=2, prng_seed=b"\xaa\xbb")
        raw = encode(state)
        assert raw == (
            (1000).to_bytes(2, "little")
            + (2).to_bytes(8, "little")
            + (2).to_bytes(8, "little") + b"\xaa\xbb"
        )

    def test_deterministic(self):
        a = UserRecord(score=5, timestamp=6, description=b"x")
        b = UserRecord(description=b"x", timestamp=6, score=5)
        assert encode(a) == encode(b)

    def test_boundary_global_state(self):
        state = GlobalState(max_size=MAX_U16, score_count=MAX_U64, prng_seed=bytes(32))
        assert decode(GlobalState, encode(state)) == state

    def test_boundary_user_record(self):
        record = UserRecord(score=MAX_U64, timestamp=0, description=b"d" * MAX_U16)
        restored = decode(UserRecord, encode(record))
        assert restored == record
        assert len(restored.description) == MAX_U16

    def test_constants_string_field(self):
        c = Constants(contract_address="secret1abc")
        assert decode(Constants, encode(c)).contract_address == "secret1abc"


class TestDecodeErrors:

    def test_truncated_names_type(self):
        raw = encode(UserRecord(score=1, timestamp=2, description=b"hello"))
        with pytest.raises(SerializationError) as exc:
            decode(UserRecord, raw[:-1])
        assert exc.value.type_name == "UserRecord"
        assert "UserRecord" in str(exc.value)

    def test_trailing_bytes_rejected(self):
        raw = encode(UserRecord(score=1, timestamp=2))
        with pytest.raises(SerializationError):
            decode(UserRecord, raw + b"\x00")

    def test_short_integer(self):
        with pytest.raises(SerializationError) as exc:
            decode(GlobalState, b"\x01")
        assert exc.value.type_name == "GlobalState"

    def test_out_of_range_value(self):
        # max_size=0 encodes fine at the byte level but is not a valid GlobalState
        raw = (0).to_bytes(2, "little") + (0).to_bytes(8, "little") + (0).to_bytes(8, "little")
        with pytest.raises(SerializationError):
            decode(GlobalState, raw)

    def test_encode_overflow(self):
        record = UserRecord.model_construct(score=MAX_U64 + 1, timestamp=0, description=b"")
        with pytest.raises(SerializationError):
            encode(record)
