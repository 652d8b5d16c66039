"""Tests for the scorevault command line host."""

import json
import tempfile

import pytest

from scorevault.config import VaultSettings
from scorevault.contract.errors import UNAUTHORIZED_MESSAGE
from scorevault.entrypoints.cli import build_env, main


@pytest.fixture
def run_cli(monkeypatch, capsys):
    """Run the CLI against a throwaway data and wallet directory."""
    monkeypatch.setenv("SCOREVAULT_TEST_MODE", "true")
    for var in ("SCOREVAULT_VAULT__DATA_DIR", "SCOREVAULT_WALLET__PATH", "SCOREVAULT_WALLET__NAME"):
        monkeypatch.delenv(var, raising=False)

    with tempfile.TemporaryDirectory() as d:
        def _run(*argv, wallet="default"):
            code = main([
                "--vault.data_dir", f"{d}/data",
                "--wallet.path", f"{d}/wallets",
                "--wallet.name", wallet,
                *argv,
            ])
            lines = capsys.readouterr().out.strip().splitlines()
            # Log lines may be interleaved; the answer is the last JSON object.
            answer = next(line for line in reversed(lines) if line.startswith("{"))
            return code, json.loads(answer)
        yield _run


class TestCli:

    def test_keypair_is_stable(self, run_cli):
        code, first = run_cli("keypair")
        assert code == 0
        assert first["address"].startswith("secret1")
        _, second = run_cli("keypair")
        assert first == second

    def test_init_rejects_zero_max_size(self, run_cli):
        code, out = run_cli("init", "--max-size", "0", "--prng-seed", "s")
        assert code == 1
        assert out["error"] == "invalid_config"

    def test_init_twice_rejected(self, run_cli):
        assert run_cli("init", "--max-size", "100", "--prng-seed", "s")[0] == 0
        run_cli("record", "--score", "1")
        code, out = run_cli("init", "--max-size", "5", "--prng-seed", "t")
        assert code == 1
        assert out["error"] == "invalid_config"
        _, out = run_cli("stats")
        assert out == {"score_count": 1, "max_size": 100}

    def test_record_before_init(self, run_cli):
        code, out = run_cli("record", "--score", "1")
        assert code == 1
        assert out == {"error": "invalid_config", "message": "contract not initialized"}

    def test_record_and_read_flow(self, run_cli):
        assert run_cli("init", "--max-size", "10000", "--prng-seed", "s")[0] == 0

        code, out = run_cli("record", "--score", "300", "--description", "ok")
        assert code == 0
        assert out["status"] == "Score recorded!"

        _, out = run_cli("score-permit", "--permit-name", "cli")
        assert (out["status"], out["score"], out["description"]) == ("Score found.", 300, "ok")

        _, out = run_cli("stats")
        assert out == {"score_count": 1, "max_size": 10000}

        run_cli("record", "--score", "50", "--description", "x", wallet="other")
        _, out = run_cli("stats")
        assert out["score_count"] == 2

    def test_revoke_blocks_permit(self, run_cli):
        run_cli("init", "--max-size", "100", "--prng-seed", "s")
        _, out = run_cli("revoke-permit", "--permit-name", "old")
        assert out["status"] == "success"
        code, out = run_cli("score-permit", "--permit-name", "old")
        assert code == 1
        assert out == {"error": "unauthorized", "message": UNAUTHORIZED_MESSAGE}

    def test_viewing_key_flow(self, run_cli):
        run_cli("init", "--max-size", "100", "--prng-seed", "s")
        _, me = run_cli("keypair")
        run_cli("record", "--score", "7")
        _, out = run_cli("create-viewing-key", "--entropy", "dice")
        key = out["key"]

        code, out = run_cli("score-key", "--address", me["address"], "--key", key)
        assert code == 0
        assert out["score"] == 7

        code, out = run_cli("score-key", "--address", me["address"], "--key", "api_key_wrong")
        assert code == 1
        assert out["error"] == "unauthorized"

    def test_negative_score_is_invalid_input(self, run_cli):
        run_cli("init", "--max-size", "100", "--prng-seed", "s")
        code, out = run_cli("record", "--score", "-1")
        assert code == 1
        assert out["error"] == "invalid_input"


class TestBuildEnv:

    def test_env_from_clock_and_wallet(self, alice):
        settings = VaultSettings(chain_id="pulsar-3")
        env = build_env(settings, alice, now=600.5)
        assert env.block.time == 600
        assert env.block.height == 100
        assert env.block.chain_id == "pulsar-3"
        assert env.message.sender == alice.address
        assert env.contract.address == settings.contract_address
