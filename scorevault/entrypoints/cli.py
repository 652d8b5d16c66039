"""Command line entrypoint.

Acts as the host for the contract: loads the file-backed storage, builds an
``Env`` from the local wallet and the clock, runs one call and prints the
JSON answer. Failures print ``{"error": ..., "message": ...}`` and exit 1.

  scorevault keypair
  scorevault init --max-size 1000 --prng-seed "some seed"
  scorevault record --score 300 --description "ok"
  scorevault create-viewing-key --entropy "dice roll"
  scorevault revoke-permit --permit-name p1
  scorevault score-permit --permit-name p1
  scorevault score-key --address secret1... --key api_key_...
  scorevault stats
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import time

import bittensor as bt
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

from scorevault.config import VaultSettings, add_args, resolve_settings
from scorevault.contract import contract
from scorevault.contract.errors import ContractError
from scorevault.contract.msg import (
    BlockInfo,
    ContractInfo,
    CreateViewingKey,
    Env,
    GetStats,
    HandleMsg,
    InitMsg,
    MessageInfo,
    QueryMsg,
    Record,
    RevokePermit,
    WithPermit,
    WithViewingKey,
)
from scorevault.contract.permit import PermitQuery
from scorevault.store.filesystem import FilesystemStorage
from scorevault.wallet import Wallet

# Approximate block interval used to derive a block height from the clock.
BLOCK_SECONDS = 6


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scorevault", description="Score vault contract host")
    add_args(parser)
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("keypair", help="Create the wallet if needed and print its address.")

    p = sub.add_parser("init", help="Initialize contract state.")
    p.add_argument("--max-size", type=int, required=True)
    p.add_argument("--prng-seed", type=str, required=True)

    p = sub.add_parser("record", help="Record the wallet's score.")
    p.add_argument("--score", type=int, required=True)
    p.add_argument("--description", type=str, default="")

    p = sub.add_parser("create-viewing-key", help="Create a new viewing key for the wallet.")
    p.add_argument("--entropy", type=str, required=True)

    p = sub.add_parser("revoke-permit", help="Revoke a permit name for the wallet.")
    p.add_argument("--permit-name", type=str, required=True)

    p = sub.add_parser("score-permit", help="Read the wallet's score with a freshly signed permit.")
    p.add_argument("--permit-name", type=str, required=True)

    p = sub.add_parser("score-key", help="Read a score with a viewing key.")
    p.add_argument("--address", type=str, required=True)
    p.add_argument("--key", type=str, required=True)

    sub.add_parser("stats", help="Show score_count and max_size.")
    return parser


def build_env(settings: VaultSettings, wallet: Wallet, now: float | None = None) -> Env:
    now = time.time() if now is None else now
    return Env(
        block=BlockInfo(height=int(now) // BLOCK_SECONDS, time=int(now), chain_id=settings.chain_id),
        message=MessageInfo(sender=wallet.address),
        contract=ContractInfo(address=settings.contract_address),
    )


def run(args: argparse.Namespace, settings: VaultSettings) -> BaseModel | dict:
    wallet = Wallet.create_if_non_existent(settings.wallet_path, settings.wallet_name)
    if args.command == "keypair":
        return {"address": wallet.address}

    env = build_env(settings, wallet)
    with FilesystemStorage(os.path.expanduser(settings.data_dir)) as storage:
        if args.command == "init":
            return contract.init(storage, env, InitMsg(max_size=args.max_size, prng_seed=args.prng_seed))
        if args.command == "record":
            msg = HandleMsg(record=Record(score=args.score, description=args.description))
            return contract.handle(storage, env, msg)
        if args.command == "create-viewing-key":
            msg = HandleMsg(create_viewing_key=CreateViewingKey(entropy=args.entropy))
            return contract.handle(storage, env, msg)
        if args.command == "revoke-permit":
            msg = HandleMsg(revoke_permit=RevokePermit(permit_name=args.permit_name))
            return contract.handle(storage, env, msg)
        if args.command == "score-permit":
            permit = wallet.sign_permit(
                permit_name=args.permit_name,
                allowed_tokens=[settings.contract_address],
                chain_id=settings.chain_id,
            )
            query = QueryMsg(with_permit=WithPermit(permit=permit, query=PermitQuery.BALANCE))
            return contract.query(storage, query)
        if args.command == "score-key":
            query = QueryMsg(with_viewing_key=WithViewingKey(address=args.address, key=args.key))
            return contract.query(storage, query)
        if args.command == "stats":
            return contract.query(storage, QueryMsg(get_stats=GetStats()))
    raise ValueError(f"unknown command {args.command!r}")


def main(argv: list[str] | None = None) -> int:
    # Load .env if not in test mode
    if os.environ.get("SCOREVAULT_TEST_MODE") != "true":
        load_dotenv()

    args = build_parser().parse_args(argv)
    settings = resolve_settings(args)
    bt.logging.setLevel(settings.log_level)

    try:
        answer = run(args, settings)
    except ContractError as e:
        print(json.dumps(e.to_dict()))
        return 1
    except ValidationError as e:
        print(json.dumps({"error": "invalid_input", "message": str(e)}))
        return 1

    data = answer.model_dump(mode="json") if isinstance(answer, BaseModel) else answer
    print(json.dumps(data))
    return 0


if __name__ == "__main__":
    sys.exit(main())
