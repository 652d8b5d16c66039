"""Shared fixtures: in-memory storage, wallets and an initialized contract."""

import pytest

from scorevault.config import DEFAULT_CONTRACT_ADDRESS
from scorevault.contract import contract
from scorevault.contract.msg import BlockInfo, ContractInfo, Env, InitMsg, MessageInfo
from scorevault.store.interface import MemoryStorage
from scorevault.wallet import Wallet

CONTRACT_ADDRESS = DEFAULT_CONTRACT_ADDRESS
CHAIN_ID = "secret-4"


def make_env(sender: str, height: int = 100, time: int = 1_700_000_000) -> Env:
    return Env(
        block=BlockInfo(height=height, time=time, chain_id=CHAIN_ID),
        message=MessageInfo(sender=sender),
        contract=ContractInfo(address=CONTRACT_ADDRESS),
    )


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def alice():
    return Wallet.from_hex("1" * 64)


@pytest.fixture
def bob():
    return Wallet.from_hex("2" * 64)


@pytest.fixture
def initialized(storage, alice):
    """Storage with the contract initialized at max_size=10000."""
    contract.init(storage, make_env(alice.address), InitMsg(max_size=10000, prng_seed="seed"))
    return storage


@pytest.fixture
def env_for():
    """Factory: ``env_for(wallet_or_address, height=..., time=...)``."""
    def _make(sender, **kwargs):
        address = sender if isinstance(sender, str) else sender.address
        return make_env(address, **kwargs)
    return _make
