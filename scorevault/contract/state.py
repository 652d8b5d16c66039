"""Ledger: global state and per-account score records.

Physical layout (every tag length-prefixed by NamespacedStore):
  config/constants          -> Constants
  config/state              -> GlobalState
  <canonical account id>    -> UserRecord   (root scope)
"""

from __future__ import annotations

from pydantic import BaseModel

import bittensor as bt

from .address import CanonicalAddr, humanize, short
from .codec import decode, encode
from .errors import InvalidInput, NotFound
from .models import Constants, GlobalState, UserRecord
from .storage import NamespacedStore

PREFIX_CONFIG = b"config"
KEY_CONSTANTS = b"constants"
KEY_STATE = b"state"


def save(store: NamespacedStore, key: bytes, value: BaseModel) -> None:
    store.set(key, encode(value))


def may_load(store: NamespacedStore, key: bytes, cls: type[BaseModel]):
    raw = store.get(key)
    if raw is None:
        return None
    return decode(cls, raw)


def load(store: NamespacedStore, key: bytes, cls: type[BaseModel]):
    value = may_load(store, key, cls)
    if value is None:
        raise NotFound(cls.__name__)
    return value


class Ledger:
    """Typed access to config and user records on top of a root store."""

    def __init__(self, root: NamespacedStore):
        self.root = root
        self.config = root.scope(PREFIX_CONFIG)

    # -- Config --

    def constants(self) -> Constants:
        return load(self.config, KEY_CONSTANTS, Constants)

    def set_constants(self, constants: Constants) -> None:
        save(self.config, KEY_CONSTANTS, constants)

    def state(self) -> GlobalState:
        return load(self.config, KEY_STATE, GlobalState)

    def set_state(self, state: GlobalState) -> None:
        save(self.config, KEY_STATE, state)

    def is_initialized(self) -> bool:
        return self.config.has(KEY_STATE)

    # -- Records --

    def read(self, account: CanonicalAddr) -> UserRecord | None:
        return may_load(self.root, bytes(account), UserRecord)

    def record(
        self,
        account: CanonicalAddr,
        score: int,
        description: bytes,
        timestamp: int,
    ) -> bool:
        """Overwrite the account's record. Returns True on its first record.

        The caller must run this inside one transaction: the existence check,
        the counter bump and the record write all come from a single read.
        """
        state = self.state()
        if len(description) > state.max_size:
            raise InvalidInput(
                f"description is {len(description)} bytes, max_size is {state.max_size}"
            )
        record = UserRecord(score=score, timestamp=timestamp, description=description)

        first = not self.root.has(bytes(account))
        if first:
            state.score_count += 1
            self.set_state(state)
        save(self.root, bytes(account), record)

        bt.logging.debug({"ledger": {
            "event": "recorded",
            "account": short(humanize(account)),
            "first": first,
            "score_count": state.score_count,
        }})
        return first

    def stats(self) -> tuple[int, int]:
        """Return ``(score_count, max_size)``."""
        state = self.state()
        return state.score_count, state.max_size


__all__ = ["KEY_CONSTANTS", "KEY_STATE", "PREFIX_CONFIG", "Ledger", "load", "may_load", "save"]
