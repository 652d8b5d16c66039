"""Score vault contract.

Records one score per account and gates reads behind query permits or
viewing keys:
- permits: secp256k1-signed query_permit sign docs, revocable by name
- viewing keys: per-account 32-byte secrets compared in constant time
"""

from .contract import handle, init, query
from .errors import (
    ContractError,
    InvalidConfig,
    InvalidInput,
    MalformedPubkey,
    MalformedSignature,
    PermissionDenied,
    PermitRevoked,
    SerializationError,
    SignatureVerificationFailed,
    TokenMismatch,
    Unauthorized,
)
from .msg import Env, HandleMsg, InitMsg, QueryMsg, ScoreResponse, StatsResponse
from .permit import Permission, Permit, PermitParams, PermitQuery

__all__ = [
    "ContractError",
    "Env",
    "HandleMsg",
    "InitMsg",
    "InvalidConfig",
    "InvalidInput",
    "MalformedPubkey",
    "MalformedSignature",
    "Permission",
    "PermissionDenied",
    "Permit",
    "PermitParams",
    "PermitQuery",
    "PermitRevoked",
    "QueryMsg",
    "ScoreResponse",
    "SerializationError",
    "SignatureVerificationFailed",
    "StatsResponse",
    "TokenMismatch",
    "Unauthorized",
    "handle",
    "init",
    "query",
]
