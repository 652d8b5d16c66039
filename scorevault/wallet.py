"""Local secp256k1 wallet for signing query permits.

The key file is plain JSON at ``{path}/{name}.json``:
  {"private_key": "<hex>", "address": "secret1..."}

Signing uses ``permit_sign_bytes`` from the contract so that signer and
verifier hash the same payload.
"""

from __future__ import annotations

import base64
import hashlib
import json
import os
from pathlib import Path

import bittensor as bt
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, utils
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from scorevault.contract.address import HumanAddr, humanize, pubkey_to_canonical
from scorevault.contract.permit import (
    Permission,
    Permit,
    PermitParams,
    PermitSignature,
    PubKey,
    permit_sign_bytes,
)

# Order of the secp256k1 group.
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class Wallet:
    """A single secp256k1 keypair with permit signing."""

    def __init__(self, private_key: ec.EllipticCurvePrivateKey):
        if not isinstance(private_key.curve, ec.SECP256K1):
            raise ValueError("wallet keys must be on secp256k1")
        self.private_key = private_key

    @classmethod
    def generate(cls) -> Wallet:
        return cls(ec.generate_private_key(ec.SECP256K1()))

    @classmethod
    def from_hex(cls, private_hex: str) -> Wallet:
        return cls(ec.derive_private_key(int(private_hex, 16), ec.SECP256K1()))

    @classmethod
    def create_if_non_existent(cls, path: str, name: str = "default") -> Wallet:
        """Load ``{path}/{name}.json`` or create it with a fresh key."""
        key_file = Path(os.path.expanduser(path)) / f"{name}.json"
        if key_file.exists():
            with open(key_file) as f:
                data = json.load(f)
            return cls.from_hex(data["private_key"])

        wallet = cls.generate()
        key_file.parent.mkdir(parents=True, exist_ok=True)
        with open(key_file, "w") as f:
            json.dump({"private_key": wallet.private_hex, "address": wallet.address}, f, indent=2)
        os.chmod(key_file, 0o600)
        bt.logging.info({"wallet": {"event": "created", "path": str(key_file), "address": wallet.address}})
        return wallet

    @property
    def private_hex(self) -> str:
        return f"{self.private_key.private_numbers().private_value:064x}"

    @property
    def pubkey(self) -> bytes:
        """33-byte compressed public key."""
        return self.private_key.public_key().public_bytes(Encoding.X962, PublicFormat.CompressedPoint)

    @property
    def address(self) -> HumanAddr:
        return humanize(pubkey_to_canonical(self.pubkey))

    def sign(self, message: bytes) -> bytes:
        """Sign sha256(message); returns the 64-byte low-S ``r || s`` form."""
        digest = hashlib.sha256(message).digest()
        der = self.private_key.sign(digest, ec.ECDSA(utils.Prehashed(hashes.SHA256())))
        r, s = utils.decode_dss_signature(der)
        if s > SECP256K1_N // 2:
            s = SECP256K1_N - s
        return r.to_bytes(32, "big") + s.to_bytes(32, "big")

    def sign_permit(
        self,
        permit_name: str,
        allowed_tokens: list[str],
        chain_id: str,
        permissions: list[Permission | str] | None = None,
    ) -> Permit:
        params = PermitParams(
            allowed_tokens=allowed_tokens,
            permit_name=permit_name,
            chain_id=chain_id,
            permissions=[Permission.BALANCE] if permissions is None else permissions,
        )
        return sign_permit(params, self)


def sign_permit(params: PermitParams, wallet: Wallet) -> Permit:
    """Sign permit params with a wallet and assemble the Permit."""
    signature = wallet.sign(permit_sign_bytes(params))
    return Permit(
        params=params,
        signature=PermitSignature(
            pub_key=PubKey(value=base64.b64encode(wallet.pubkey).decode("ascii")),
            signature=base64.b64encode(signature).decode("ascii"),
        ),
    )


__all__ = ["Wallet", "sign_permit"]
