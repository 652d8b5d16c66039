"""Contract entry points: init, handle and query.

The host passes the raw storage and an ``Env`` into every call and runs
calls one at a time. Each mutating call executes inside one storage
transaction, so any error leaves storage exactly as it was.
"""

from __future__ import annotations

import hashlib

import bittensor as bt

from scorevault.store.interface import Storage

from .address import HumanAddr, canonicalize, humanize, short
from .errors import ContractError, InvalidConfig, InvalidInput, Unauthorized
from .models import MAX_U16, Constants, GlobalState
from .msg import (
    CreateViewingKey,
    CreateViewingKeyAnswer,
    Env,
    HandleMsg,
    InitMsg,
    InitResponse,
    QueryMsg,
    Record,
    RecordAnswer,
    ResponseStatus,
    RevokePermit,
    RevokePermitAnswer,
    ScoreResponse,
    StatsResponse,
    WithPermit,
    WithViewingKey,
)
from .permit import RevokedPermits, check_permission, validate
from .state import Ledger
from .storage import NamespacedStore, transaction
from .viewing_key import ViewingKeys

STATUS_RECORDED = "Score recorded!"
STATUS_FOUND = "Score found."
STATUS_NOT_FOUND = "Score not found."
NOT_FOUND_DESCRIPTION = "N/A"
NOT_INITIALIZED = "contract not initialized"


def valid_max_size(value: int) -> int | None:
    """Limit max_size to 1..65535."""
    if 1 <= value <= MAX_U16:
        return value
    return None


def require_initialized(root: NamespacedStore) -> None:
    if not Ledger(root).is_initialized():
        raise InvalidConfig(NOT_INITIALIZED)


def init(storage: Storage, env: Env, msg: InitMsg) -> InitResponse:
    max_size = valid_max_size(msg.max_size)
    if max_size is None:
        bt.logging.warning({"contract": {"event": "init_rejected", "max_size": msg.max_size}})
        raise InvalidConfig("Invalid max_size. Must be in the range of 1..65535.")

    with transaction(storage) as txn:
        ledger = Ledger(NamespacedStore(txn))
        if ledger.is_initialized():
            bt.logging.warning({"contract": {"event": "init_rejected", "reason": "already_initialized"}})
            raise InvalidConfig("contract already initialized")
        ledger.set_constants(Constants(contract_address=env.contract.address))
        ledger.set_state(GlobalState(
            max_size=max_size,
            score_count=0,
            prng_seed=hashlib.sha256(msg.prng_seed.encode("utf-8")).digest(),
        ))

    bt.logging.info({"contract": {
        "event": "initialized",
        "contract_address": env.contract.address,
        "max_size": max_size,
    }})
    return InitResponse()


# -- Handle --


def try_record(root: NamespacedStore, env: Env, msg: Record) -> RecordAnswer:
    account = canonicalize(env.message.sender)
    Ledger(root).record(
        account,
        score=msg.score,
        description=msg.description.encode("utf-8"),
        timestamp=env.block.time,
    )
    return RecordAnswer(status=STATUS_RECORDED)


def try_create_viewing_key(root: NamespacedStore, env: Env, msg: CreateViewingKey) -> CreateViewingKeyAnswer:
    account = canonicalize(env.message.sender)
    seed = Ledger(root).state().prng_seed
    key = ViewingKeys(root).generate(
        account,
        seed=seed,
        entropy=msg.entropy,
        block_height=env.block.height,
        block_time=env.block.time,
    )
    return CreateViewingKeyAnswer(key=key)


def try_revoke_permit(root: NamespacedStore, env: Env, msg: RevokePermit) -> RevokePermitAnswer:
    account = humanize(canonicalize(env.message.sender))
    RevokedPermits(root).revoke(account, msg.permit_name)
    bt.logging.info({"contract": {"event": "permit_revoked", "account": short(account), "permit_name": msg.permit_name}})
    return RevokePermitAnswer(status=ResponseStatus.SUCCESS)


def handle(storage: Storage, env: Env, msg: HandleMsg):
    name, body = msg.variant
    bt.logging.debug({"contract": {"event": "handle", "msg": name, "sender": short(env.message.sender)}})

    handlers = {
        "record": try_record,
        "create_viewing_key": try_create_viewing_key,
        "revoke_permit": try_revoke_permit,
        "with_permit": lambda root, _env, body: permit_queries(root, body),
    }
    try:
        with transaction(storage) as txn:
            root = NamespacedStore(txn)
            require_initialized(root)
            return handlers[name](root, env, body)
    except ContractError as e:
        bt.logging.info({"contract": {"event": "handle_failed", "msg": name, "error": e.kind}})
        raise


# -- Query --


def query_score(ledger: Ledger, account: HumanAddr) -> ScoreResponse:
    record = ledger.read(canonicalize(account))
    if record is None:
        return ScoreResponse(status=STATUS_NOT_FOUND, description=NOT_FOUND_DESCRIPTION)
    return ScoreResponse(
        status=STATUS_FOUND,
        score=record.score,
        timestamp=record.timestamp,
        description=record.description.decode("utf-8", errors="replace"),
    )


def query_stats(ledger: Ledger) -> StatsResponse:
    score_count, max_size = ledger.stats()
    return StatsResponse(score_count=score_count, max_size=max_size)


def permit_queries(root: NamespacedStore, msg: WithPermit) -> ScoreResponse:
    ledger = Ledger(root)
    contract_address = ledger.constants().contract_address
    account = validate(root, msg.permit, contract_address)
    check_permission(msg.permit, msg.query)
    return query_score(ledger, account)


def viewing_key_queries(root: NamespacedStore, msg: WithViewingKey) -> ScoreResponse:
    try:
        account = canonicalize(msg.address)
    except InvalidInput:
        account = None
    if not ViewingKeys(root).verify(account, msg.key):
        bt.logging.warning({"viewing_key": {"event": "verify_failed", "account": short(msg.address)}})
        raise Unauthorized()
    return query_score(Ledger(root), humanize(account))


def query(storage: Storage, msg: QueryMsg):
    name, body = msg.variant
    root = NamespacedStore(storage)
    try:
        require_initialized(root)
        if name == "get_stats":
            return query_stats(Ledger(root))
        if name == "with_permit":
            return permit_queries(root, body)
        return viewing_key_queries(root, body)
    except ContractError as e:
        bt.logging.info({"contract": {"event": "query_failed", "msg": name, "error": e.kind}})
        raise


__all__ = [
    "NOT_FOUND_DESCRIPTION",
    "NOT_INITIALIZED",
    "STATUS_FOUND",
    "STATUS_NOT_FOUND",
    "STATUS_RECORDED",
    "handle",
    "init",
    "permit_queries",
    "query",
    "query_score",
    "query_stats",
    "require_initialized",
    "valid_max_size",
    "viewing_key_queries",
]
