"""Request, response and environment models for the contract entry points.

Requests are single-key envelopes, e.g. ``{"record": {"score": 300,
"description": "ok"}}``; exactly one variant must be set.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .models import MAX_U16, MAX_U64
from .permit import Permit, PermitQuery


# ---------------------------------------------------------------------------
# Environment supplied by the host on every call
# ---------------------------------------------------------------------------


class BlockInfo(BaseModel):
    height: int = Field(ge=0)
    time: int = Field(ge=0, description="seconds since epoch")
    chain_id: str = "secret-4"


class MessageInfo(BaseModel):
    sender: str


class ContractInfo(BaseModel):
    address: str


class Env(BaseModel):
    block: BlockInfo
    message: MessageInfo
    contract: ContractInfo


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class InitMsg(BaseModel):
    # Range is enforced by init so the failure surfaces as InvalidConfig.
    max_size: int
    prng_seed: str


class Record(BaseModel):
    score: int = Field(ge=0, le=MAX_U64)
    description: str = ""


class CreateViewingKey(BaseModel):
    entropy: str
    padding: str | None = None


class RevokePermit(BaseModel):
    permit_name: str
    padding: str | None = None


class WithPermit(BaseModel):
    permit: Permit
    query: PermitQuery


class GetStats(BaseModel):
    pass


class WithViewingKey(BaseModel):
    address: str
    key: str


class _Envelope(BaseModel):
    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _exactly_one(self):
        set_fields = [name for name in type(self).model_fields if getattr(self, name) is not None]
        if len(set_fields) != 1:
            raise ValueError(f"expected exactly one variant, got {set_fields or 'none'}")
        return self

    @property
    def variant(self) -> tuple[str, BaseModel]:
        for name in type(self).model_fields:
            value = getattr(self, name)
            if value is not None:
                return name, value
        raise ValueError("empty message")


class HandleMsg(_Envelope):
    record: Record | None = None
    create_viewing_key: CreateViewingKey | None = None
    revoke_permit: RevokePermit | None = None
    with_permit: WithPermit | None = None


class QueryMsg(_Envelope):
    get_stats: GetStats | None = None
    with_permit: WithPermit | None = None
    with_viewing_key: WithViewingKey | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ResponseStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class InitResponse(BaseModel):
    status: ResponseStatus = ResponseStatus.SUCCESS


class RecordAnswer(BaseModel):
    status: str


class CreateViewingKeyAnswer(BaseModel):
    key: str


class RevokePermitAnswer(BaseModel):
    status: ResponseStatus


class ScoreResponse(BaseModel):
    status: str
    score: int | None = None
    timestamp: int | None = None
    description: str


class StatsResponse(BaseModel):
    score_count: int = Field(ge=0, le=MAX_U64)
    max_size: int = Field(ge=1, le=MAX_U16)


__all__ = [
    "BlockInfo",
    "ContractInfo",
    "CreateViewingKey",
    "CreateViewingKeyAnswer",
    "Env",
    "GetStats",
    "HandleMsg",
    "InitMsg",
    "InitResponse",
    "MessageInfo",
    "QueryMsg",
    "Record",
    "RecordAnswer",
    "ResponseStatus",
    "RevokePermit",
    "RevokePermitAnswer",
    "ScoreResponse",
    "StatsResponse",
    "WithPermit",
    "WithViewingKey",
]
