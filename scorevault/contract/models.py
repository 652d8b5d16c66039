"""Pydantic models for persisted contract state.

Every model here goes through the binary codec, so each declares its
``binary_layout`` in field order.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, Field

MAX_U16 = 0xFFFF
MAX_U64 = 0xFFFF_FFFF_FFFF_FFFF


class Constants(BaseModel):
    """Values fixed at init."""

    binary_layout: ClassVar[tuple[tuple[str, str], ...]] = (("contract_address", "str"),)

    contract_address: str


class GlobalState(BaseModel):
    """Contract-wide configuration and counters."""

    binary_layout: ClassVar[tuple[tuple[str, str], ...]] = (
        ("max_size", "u16"),
        ("score_count", "u64"),
        ("prng_seed", "bytes"),
    )

    max_size: int = Field(ge=1, le=MAX_U16)
    score_count: int = Field(default=0, ge=0, le=MAX_U64)
    prng_seed: bytes = b""


class UserRecord(BaseModel):
    """The single score an account has recorded."""

    binary_layout: ClassVar[tuple[tuple[str, str], ...]] = (
        ("score", "u64"),
        ("timestamp", "u64"),
        ("description", "bytes"),
    )

    score: int = Field(ge=0, le=MAX_U64)
    timestamp: int = Field(ge=0, le=MAX_U64)
    description: bytes = b""


__all__ = ["MAX_U16", "MAX_U64", "Constants", "GlobalState", "UserRecord"]
