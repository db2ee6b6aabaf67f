import json

import pytest
from click.testing import CliRunner

from nethermind.unbundle.cli import unbundle_cli
from nethermind.unbundle.cli.utils import resolve_json_rpc
from nethermind.unbundle.exceptions import RPCHostError
from nethermind.unbundle.types import TransactionData
from tests.utils import CREATION_CODE, USDC, make_address, transfer_call

TX_HASH = "0x" + "cd" * 32


@pytest.fixture(name="runner")
def fixture_runner(monkeypatch):
    monkeypatch.delenv("JSON_RPC", raising=False)
    monkeypatch.delenv("BASE_RPC_URL", raising=False)
    monkeypatch.setenv("COLUMNS", "200")
    return CliRunner()


@pytest.fixture(name="mock_fetch")
def fixture_mock_fetch(monkeypatch):
    tx = TransactionData(
        hash=TX_HASH,
        to=USDC,
        from_address=make_address(0xA11CE),
        input=transfer_call(make_address(0xB0B), 1000000),
        gas_used=45000,
        effective_gas_price=1000000000,
    )
    requests = []

    def _fetch_transaction(tx_hash, json_rpc):
        requests.append((tx_hash, json_rpc))
        return tx

    monkeypatch.setattr("nethermind.unbundle.analyzer.fetch_transaction", _fetch_transaction)
    return requests


def test_resolve_json_rpc(monkeypatch):
    monkeypatch.delenv("BASE_RPC_URL", raising=False)
    assert resolve_json_rpc("http://node:8545", 8453) == "http://node:8545"
    assert resolve_json_rpc(None, 8453) == "https://mainnet.base.org"

    monkeypatch.setenv("BASE_RPC_URL", "http://base-node")
    assert resolve_json_rpc(None, 8453) == "http://base-node"
    assert resolve_json_rpc(None, 1) == "https://eth.merkle.io"


def test_decode_json(runner, mock_fetch, empty_artifacts_dir):
    result = runner.invoke(
        unbundle_cli,
        ["decode", TX_HASH, "--chain", "0x2105", "--artifacts-dir", str(empty_artifacts_dir), "--json"],
    )

    assert result.exit_code == 0, result.output
    output = json.loads(result.output)
    assert output["success"] is True
    assert output["calls"][0]["function"] == "transfer"
    assert output["summary"]["amount"] == "1.0 USDC"
    assert output["gas_used"] == "45000"
    assert output["gas_price_gwei"] == "1.0"
    assert mock_fetch == [(TX_HASH, "https://mainnet.base.org")]


def test_decode_table_output(runner, mock_fetch, empty_artifacts_dir):
    result = runner.invoke(
        unbundle_cli,
        ["decode", TX_HASH, "-rpc", "http://node:8545", "--artifacts-dir", str(empty_artifacts_dir), "-v"],
    )

    assert result.exit_code == 0, result.output
    assert "1.0 USDC" in result.output
    assert "Gas used: 45000" in result.output
    assert mock_fetch == [(TX_HASH, "http://node:8545")]


def test_decode_failure_exit_code(runner, monkeypatch, empty_artifacts_dir):
    def _fetch_transaction(tx_hash, json_rpc):
        raise RPCHostError("Could not connect to RPC host")

    monkeypatch.setattr("nethermind.unbundle.analyzer.fetch_transaction", _fetch_transaction)

    result = runner.invoke(unbundle_cli, ["decode", TX_HASH, "--artifacts-dir", str(empty_artifacts_dir), "--json"])
    assert result.exit_code == 1


def test_decode_invalid_chain(runner, mock_fetch):
    result = runner.invoke(unbundle_cli, ["decode", TX_HASH, "--chain", "base"])

    assert result.exit_code == 2
    assert mock_fetch == []


def test_list_fallback_abis(runner, empty_artifacts_dir):
    result = runner.invoke(unbundle_cli, ["abis", "list", "--fallback", "--artifacts-dir", str(empty_artifacts_dir)])

    assert result.exit_code == 0, result.output
    assert "SimpleAccount" in result.output
    assert "7 functions" in result.output


def test_list_merged_abis(runner, artifacts_dir):
    result = runner.invoke(unbundle_cli, ["abis", "list", "--full-signatures", "--artifacts-dir", str(artifacts_dir)])

    assert result.exit_code == 0, result.output
    assert "KAMI721C" in result.output
    assert "setPrice(uint256)" in result.output
    assert "9 functions" in result.output


def test_verify_abis(runner, artifacts_dir):
    result = runner.invoke(
        unbundle_cli,
        ["abis", "verify", "--min-functions", "9", "--require", "setPrice", "--artifacts-dir", str(artifacts_dir)],
    )
    assert result.exit_code == 0, result.output
    assert "ABI verification passed" in result.output

    result = runner.invoke(unbundle_cli, ["abis", "verify", "--artifacts-dir", str(artifacts_dir)])
    assert result.exit_code == 1
    assert "Expected at least 100 functions" in result.output
    assert "setTokenURI" not in result.output
    assert "Missing required function in merged ABI: mintFor" not in result.output


def test_identify(runner, artifacts_dir):
    init_code = "0x" + CREATION_CODE.hex()
    result = runner.invoke(unbundle_cli, ["identify", init_code, "--artifacts-dir", str(artifacts_dir)])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "KAMI721C"

    result = runner.invoke(unbundle_cli, ["identify", "0x" + "00" * 100, "--artifacts-dir", str(artifacts_dir)])
    assert result.output.strip() == "unidentified"

    result = runner.invoke(unbundle_cli, ["identify", "0xzz", "--artifacts-dir", str(artifacts_dir)])
    assert result.exit_code == 2

    result = runner.invoke(unbundle_cli, ["identify", init_code + "0", "--artifacts-dir", str(artifacts_dir)])
    assert result.exit_code == 2
