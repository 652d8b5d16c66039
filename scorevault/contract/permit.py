"""Query permits: off-chain signed, stateless bearer credentials.

A permit is a Cosmos ``StdSignDoc`` carrying one ``query_permit`` message,
signed with secp256k1 by the account that wants to be authenticated. The
contract stores nothing about permits except the revocation registry.

``permit_sign_bytes`` is the one serializer for the signed payload. The
wallet signs exactly these bytes and ``validate`` verifies exactly these
bytes; any divergence breaks every signature.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
from enum import Enum

import bittensor as bt
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, utils
from pydantic import BaseModel, Field, field_validator

from .address import HumanAddr, humanize, pubkey_to_canonical, short
from .errors import (
    MalformedPubkey,
    MalformedSignature,
    PermissionDenied,
    PermitRevoked,
    SignatureVerificationFailed,
    TokenMismatch,
)
from .storage import NamespacedStore, length_prefixed

PREFIX_REVOKED_PERMITS = b"revoked_permits"
PUBKEY_TYPE = "tendermint/PubKeySecp256k1"
COMPRESSED_PUBKEY_SIZE = 33
SIGNATURE_SIZE = 64


class Permission(str, Enum):
    """Capabilities this contract understands.

    Permits may carry others (e.g. ``history``, ``allowance``); they parse
    and sign fine but satisfy no query here.
    """

    BALANCE = "balance"
    OWNER = "owner"


class PermitQuery(str, Enum):
    """Reads that can be authorised by a permit."""

    BALANCE = "balance"


# Which granted permissions satisfy each query.
QUERY_PERMISSIONS: dict[PermitQuery, frozenset[Permission]] = {
    PermitQuery.BALANCE: frozenset({Permission.BALANCE, Permission.OWNER}),
}


def permission_names(permissions) -> list[str]:
    return [p.value if isinstance(p, Permission) else p for p in permissions]


class PermitParams(BaseModel):
    allowed_tokens: list[str]
    permit_name: str
    chain_id: str
    permissions: list[str]

    @field_validator("permissions", mode="before")
    @classmethod
    def _names(cls, value):
        if isinstance(value, list):
            return permission_names(value)
        return value


class PubKey(BaseModel):
    type: str = PUBKEY_TYPE
    value: str = Field(description="base64 compressed secp256k1 public key")


class PermitSignature(BaseModel):
    pub_key: PubKey
    signature: str = Field(description="base64 64-byte r||s signature")


class Permit(BaseModel):
    params: PermitParams
    signature: PermitSignature


# ---------------------------------------------------------------------------
# Signed payload
# ---------------------------------------------------------------------------


def permit_sign_doc(params: PermitParams) -> dict:
    """The amino ``StdSignDoc`` a wallet signs for a query permit."""
    return {
        "account_number": "0",
        "chain_id": params.chain_id,
        "fee": {"amount": [{"amount": "0", "denom": "uscrt"}], "gas": "1"},
        "memo": "",
        "msgs": [{
            "type": "query_permit",
            "value": {
                "allowed_tokens": list(params.allowed_tokens),
                "permissions": permission_names(params.permissions),
                "permit_name": params.permit_name,
            },
        }],
        "sequence": "0",
    }


def permit_sign_bytes(params: PermitParams) -> bytes:
    """Canonical bytes of the sign doc: sorted keys, no whitespace, UTF-8."""
    doc = permit_sign_doc(params)
    return json.dumps(doc, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _b64decode(value: str) -> bytes:
    return base64.b64decode(value, validate=True)


def decode_pubkey(permit: Permit) -> bytes:
    if permit.signature.pub_key.type != PUBKEY_TYPE:
        raise MalformedPubkey(f"unsupported pubkey type {permit.signature.pub_key.type!r}")
    try:
        raw = _b64decode(permit.signature.pub_key.value)
    except (binascii.Error, ValueError) as e:
        raise MalformedPubkey("pubkey is not valid base64") from e
    if len(raw) != COMPRESSED_PUBKEY_SIZE:
        raise MalformedPubkey(f"pubkey must be {COMPRESSED_PUBKEY_SIZE} bytes, got {len(raw)}")
    return raw


def verify_signature(params: PermitParams, pubkey: bytes, signature_b64: str) -> None:
    """Verify a compact secp256k1 signature over the permit sign doc."""
    try:
        sig = _b64decode(signature_b64)
    except (binascii.Error, ValueError) as e:
        raise MalformedSignature("signature is not valid base64") from e
    if len(sig) != SIGNATURE_SIZE:
        raise MalformedSignature(f"signature must be {SIGNATURE_SIZE} bytes, got {len(sig)}")

    try:
        key = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), pubkey)
    except ValueError as e:
        raise MalformedPubkey("pubkey is not a valid secp256k1 point") from e

    r = int.from_bytes(sig[:32], "big")
    s = int.from_bytes(sig[32:], "big")
    if r == 0 or s == 0:
        raise MalformedSignature("signature scalar is zero")
    digest = hashlib.sha256(permit_sign_bytes(params)).digest()
    try:
        key.verify(
            utils.encode_dss_signature(r, s),
            digest,
            ec.ECDSA(utils.Prehashed(hashes.SHA256())),
        )
    except InvalidSignature as e:
        raise SignatureVerificationFailed("signature does not match permit") from e


# ---------------------------------------------------------------------------
# Revocation registry
# ---------------------------------------------------------------------------


class RevokedPermits:
    """Set of (account, permit_name) markers inside one namespace."""

    def __init__(self, root: NamespacedStore, namespace: bytes = PREFIX_REVOKED_PERMITS):
        self.store = root.scope(namespace)

    @staticmethod
    def _key(account: HumanAddr, permit_name: str) -> bytes:
        return length_prefixed(account.encode("utf-8")) + permit_name.encode("utf-8")

    def revoke(self, account: HumanAddr, permit_name: str) -> None:
        self.store.set(self._key(account, permit_name), b"\x01")

    def is_revoked(self, account: HumanAddr, permit_name: str) -> bool:
        return self.store.has(self._key(account, permit_name))


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate(
    root: NamespacedStore,
    permit: Permit,
    expected_token_address: str,
    namespace: bytes = PREFIX_REVOKED_PERMITS,
) -> HumanAddr:
    """Authenticate a permit and return the signer's address.

    Order: token binding, identity recovery, revocation, signature. The
    permission check is left to the caller (``check_permission``).
    """
    params = permit.params

    def _reject(error):
        bt.logging.warning({"permit": {
            "event": "validate_failed",
            "permit_name": params.permit_name,
            "reason": error.reason,
            "detail": error.detail,
        }})
        return error

    if expected_token_address not in params.allowed_tokens:
        raise _reject(TokenMismatch(
            f"permit does not apply to {expected_token_address}, only {params.allowed_tokens}"
        ))

    try:
        pubkey = decode_pubkey(permit)
    except MalformedPubkey as e:
        raise _reject(e)
    account = humanize(pubkey_to_canonical(pubkey))

    if RevokedPermits(root, namespace).is_revoked(account, params.permit_name):
        raise _reject(PermitRevoked(
            f"permit {params.permit_name!r} was revoked by {short(account)}"
        ))

    try:
        verify_signature(params, pubkey, permit.signature.signature)
    except (MalformedSignature, MalformedPubkey, SignatureVerificationFailed) as e:
        raise _reject(e)

    bt.logging.debug({"permit": {"event": "validated", "account": short(account), "permit_name": params.permit_name}})
    return account


def check_permission(permit: Permit, query: PermitQuery) -> None:
    """Ensure the permit grants a permission covering ``query``."""
    granted = set(permission_names(permit.params.permissions))
    if not granted & set(permission_names(QUERY_PERMISSIONS[query])):
        bt.logging.warning({"permit": {
            "event": "permission_denied",
            "permit_name": permit.params.permit_name,
            "query": query.value,
        }})
        raise PermissionDenied(f"permit lacks a permission for {query.value}")


__all__ = [
    "PREFIX_REVOKED_PERMITS",
    "PUBKEY_TYPE",
    "Permission",
    "Permit",
    "PermitParams",
    "PermitQuery",
    "PermitSignature",
    "PubKey",
    "RevokedPermits",
    "check_permission",
    "decode_pubkey",
    "permission_names",
    "permit_sign_bytes",
    "permit_sign_doc",
    "validate",
    "verify_signature",
]
