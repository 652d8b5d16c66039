"""Error kinds raised by the score vault contract.

Every authentication failure is an ``Unauthorized`` subclass. They all
render the same message so callers cannot tell a revoked permit from a bad
signature or a missing viewing key; the specific sub-check is kept in
``reason`` for server-side logs and tests.
"""

from __future__ import annotations


UNAUTHORIZED_MESSAGE = "Wrong viewing key or permit for this address, or viewing key not set"


class ContractError(Exception):
    """Base class for all contract failures."""

    kind = "generic"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class InvalidConfig(ContractError):
    kind = "invalid_config"


class InvalidInput(ContractError):
    kind = "invalid_input"


class NotFound(ContractError):
    """Internal only: a required entity is missing from storage."""

    kind = "not_found"

    def __init__(self, type_name: str):
        super().__init__(f"{type_name} not found")
        self.type_name = type_name


class SerializationError(ContractError):
    kind = "serialization_error"

    def __init__(self, type_name: str, detail: str = ""):
        message = f"Error serializing/deserializing {type_name}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.type_name = type_name


class Unauthorized(ContractError):
    """Generic authentication failure."""

    kind = "unauthorized"
    reason = "unauthorized"

    def __init__(self, detail: str = ""):
        super().__init__(UNAUTHORIZED_MESSAGE)
        self.detail = detail


class TokenMismatch(Unauthorized):
    reason = "token_mismatch"


class PermitRevoked(Unauthorized):
    reason = "permit_revoked"


class MalformedSignature(Unauthorized):
    reason = "malformed_signature"


class MalformedPubkey(Unauthorized):
    reason = "malformed_pubkey"


class SignatureVerificationFailed(Unauthorized):
    reason = "signature_verification_failed"


class PermissionDenied(Unauthorized):
    reason = "permission_denied"


__all__ = [
    "UNAUTHORIZED_MESSAGE",
    "ContractError",
    "InvalidConfig",
    "InvalidInput",
    "MalformedPubkey",
    "MalformedSignature",
    "NotFound",
    "PermissionDenied",
    "PermitRevoked",
    "SerializationError",
    "SignatureVerificationFailed",
    "TokenMismatch",
    "Unauthorized",
]
