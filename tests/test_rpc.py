import pytest

from nethermind.unbundle import rpc
from nethermind.unbundle.exceptions import RPCError, RPCHostError
from nethermind.unbundle.rpc import fetch_transaction, parse_transaction_response, rpc_request

TX_HASH = "0x5b5d1c5e3a1e1f1dbbd5cf9b3a8f4ef1c0b5e2a5f0a3b6a0a3c2d4e5f6a7b8c9"

TRANSACTION_RESPONSE = {
    "hash": TX_HASH,
    "from": "0x4337001fff419768e088ce247456c1b892888084",
    "to": "0x0000000071727de22e5e9d8baf0edac6f37da032",
    "input": "0x765e827f",
    "value": "0x0",
    "gasPrice": "0x1dcd6500",
    "nonce": "0x12",
    "blockNumber": "0x1559c40",
}

RECEIPT_RESPONSE = {
    "transactionHash": TX_HASH,
    "status": "0x1",
    "gasUsed": "0x2c3a1",
    "effectiveGasPrice": "0x3b9aca00",
}


def test_parse_transaction_with_receipt():
    tx = parse_transaction_response(TRANSACTION_RESPONSE, RECEIPT_RESPONSE)

    assert tx.hash == TX_HASH
    assert tx.to == "0x0000000071727de22e5e9d8baf0edac6f37da032"
    assert tx.from_address == "0x4337001fff419768e088ce247456c1b892888084"
    assert tx.input == bytes.fromhex("765e827f")
    assert tx.value == 0
    assert tx.gas_price == 500000000
    assert tx.gas_used == 181153
    assert tx.effective_gas_price == 1000000000


def test_parse_transaction_without_receipt():
    tx_json = dict(TRANSACTION_RESPONSE, to=None, input=None, data="0x6080", value="0xde0b6b3a7640000")
    tx = parse_transaction_response(tx_json)

    assert tx.to is None
    assert tx.input == bytes.fromhex("6080")
    assert tx.value == 10**18
    assert tx.gas_used is None
    assert tx.effective_gas_price is None


def test_parse_transaction_malformed_hex():
    with pytest.raises(RPCError, match="Malformed transaction response"):
        parse_transaction_response(dict(TRANSACTION_RESPONSE, input="0xa9059cbb0"))

    with pytest.raises(RPCError, match="Malformed transaction response"):
        parse_transaction_response(TRANSACTION_RESPONSE, dict(RECEIPT_RESPONSE, gasUsed="0xzz"))


def test_rpc_request():
    assert rpc_request("eth_getTransactionByHash", [TX_HASH], 3) == {
        "jsonrpc": "2.0",
        "method": "eth_getTransactionByHash",
        "params": [TX_HASH],
        "id": 3,
    }


def _mock_batch_response(monkeypatch, responses):
    async def _batch_post_request(request_objects, host_address, **kwargs):
        assert [request["method"] for request in request_objects] == [
            "eth_getTransactionByHash",
            "eth_getTransactionReceipt",
        ]
        return responses

    monkeypatch.setattr(rpc, "batch_post_request", _batch_post_request)


def test_fetch_transaction(monkeypatch):
    _mock_batch_response(monkeypatch, [TRANSACTION_RESPONSE, RECEIPT_RESPONSE])

    tx = fetch_transaction(TX_HASH, "http://localhost:8545")
    assert tx.gas_used == 181153


def test_fetch_transaction_receipt_failure(monkeypatch):
    _mock_batch_response(monkeypatch, [TRANSACTION_RESPONSE, RPCHostError("Internal Server Error")])

    tx = fetch_transaction(TX_HASH, "http://localhost:8545")
    assert tx.hash == TX_HASH
    assert tx.gas_used is None


def test_fetch_missing_transaction(monkeypatch):
    _mock_batch_response(monkeypatch, [None, None])

    with pytest.raises(RPCError, match="not found"):
        fetch_transaction(TX_HASH, "http://localhost:8545")


def test_fetch_transaction_errors(monkeypatch):
    _mock_batch_response(monkeypatch, [RPCHostError("Could not connect"), None])
    with pytest.raises(RPCHostError):
        fetch_transaction(TX_HASH, "http://localhost:8545")

    _mock_batch_response(monkeypatch, [ValueError("bad json"), None])
    with pytest.raises(RPCError, match="Unexpected Error Type"):
        fetch_transaction(TX_HASH, "http://localhost:8545")


def test_rpc_error_response():
    with pytest.raises(RPCError, match="execution reverted"):
        rpc._handle_rpc_error({"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "execution reverted"}})
