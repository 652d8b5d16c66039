"""Settings for the score vault CLI.

Resolution order (highest wins): ``SCOREVAULT_<SECTION>__<KEY>`` environment
variables (a ``.env`` file is loaded first), then command line flags, then
defaults.
"""

from __future__ import annotations

import argparse
import hashlib
import os

from pydantic import BaseModel, Field

from scorevault.contract.address import CanonicalAddr, humanize

ENV_PREFIX = "SCOREVAULT_"

DEFAULT_CONTRACT_ADDRESS = humanize(CanonicalAddr(hashlib.sha256(b"scorevault").digest()[:20]))


class VaultSettings(BaseModel):
    """Resolved CLI configuration."""

    data_dir: str = "~/.scorevault/data"
    chain_id: str = "secret-4"
    contract_address: str = DEFAULT_CONTRACT_ADDRESS
    wallet_path: str = "~/.scorevault/wallets"
    wallet_name: str = "default"
    log_level: str = Field(default="WARNING", pattern=r"^(TRACE|DEBUG|INFO|WARNING|ERROR)$")


# (flag, env var, settings field, help)
_OPTIONS = [
    ("--vault.data_dir", "VAULT__DATA_DIR", "data_dir", "Directory holding contract state."),
    ("--vault.chain_id", "VAULT__CHAIN_ID", "chain_id", "Chain id signed into permits."),
    ("--vault.contract_address", "VAULT__CONTRACT_ADDRESS", "contract_address", "Address permits must name."),
    ("--wallet.path", "WALLET__PATH", "wallet_path", "Directory holding wallet key files."),
    ("--wallet.name", "WALLET__NAME", "wallet_name", "Wallet key file name (without .json)."),
    ("--logging.level", "LOGGING__LEVEL", "log_level", "Log level: TRACE, DEBUG, INFO, WARNING or ERROR."),
]


def add_args(parser: argparse.ArgumentParser) -> None:
    """Adds vault, wallet and logging arguments to the parser."""
    defaults = VaultSettings()
    for flag, _env, field, help_text in _OPTIONS:
        parser.add_argument(flag, type=str, default=None, help=f"{help_text} (default: {getattr(defaults, field)})")


def resolve_settings(args: argparse.Namespace, environ: dict | None = None) -> VaultSettings:
    """Merge defaults, CLI flags and environment into VaultSettings."""
    environ = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for flag, env, field, _help in _OPTIONS:
        cli_value = getattr(args, flag[2:], None)
        if cli_value is not None:
            values[field] = cli_value
        env_value = environ.get(ENV_PREFIX + env)
        if env_value:
            values[field] = env_value
    if "log_level" in values:
        values["log_level"] = values["log_level"].upper()
    return VaultSettings(**values)


__all__ = ["DEFAULT_CONTRACT_ADDRESS", "ENV_PREFIX", "VaultSettings", "add_args", "resolve_settings"]
