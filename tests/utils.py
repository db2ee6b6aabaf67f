import json
from pathlib import Path
from typing import Any

from eth_abi import encode
from eth_utils import to_checksum_address
from eth_utils.abi import function_signature_to_4byte_selector

USER_OPERATION_TYPE = "(address,uint256,bytes,bytes,bytes32,uint256,bytes32,bytes,bytes)"

USDC = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
WETH = "0x4200000000000000000000000000000000000006"

CREATION_CODE = bytes((i * 7 + 3) % 256 for i in range(300))
RUNTIME_CODE = bytes((i * 13 + 5) % 256 for i in range(200))

KAMI_ABI = [
    {
        "type": "function",
        "name": "setPrice",
        "inputs": [{"name": "newPrice", "type": "uint256"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "setTokenURI",
        "inputs": [{"name": "tokenId", "type": "uint256"}, {"name": "uri", "type": "string"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "transfer",
        "inputs": [{"name": "recipient", "type": "address"}, {"name": "value", "type": "uint256"}],
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "event",
        "name": "PriceUpdated",
        "inputs": [{"name": "price", "type": "uint256", "indexed": False}],
        "anonymous": False,
    },
]


def make_address(index: int) -> str:
    return to_checksum_address(index.to_bytes(20, "big"))


def encode_call(signature: str, types: list[str], values: list[Any]) -> bytes:
    return function_signature_to_4byte_selector(signature) + encode(types, values)


def transfer_call(to_address: str, amount: int) -> bytes:
    return encode_call("transfer(address,uint256)", ["address", "uint256"], [to_address, amount])


def transfer_from_call(from_address: str, to_address: str, amount: int) -> bytes:
    return encode_call(
        "transferFrom(address,address,uint256)",
        ["address", "address", "uint256"],
        [from_address, to_address, amount],
    )


def execute_call(dest: str, value: int, func: bytes) -> bytes:
    return encode_call("execute(address,uint256,bytes)", ["address", "uint256", "bytes"], [dest, value, func])


def execute_batch_call(dests: list[str], values: list[int], funcs: list[bytes]) -> bytes:
    return encode_call(
        "executeBatch(address[],uint256[],bytes[])",
        ["address[]", "uint256[]", "bytes[]"],
        [dests, values, funcs],
    )


def deploy_call(init_code: bytes) -> bytes:
    return encode_call("deploy(bytes)", ["bytes"], [init_code])


def user_operation(sender: str, call_data: bytes, nonce: int = 0, init_code: bytes = b"") -> tuple:
    return (sender, nonce, init_code, call_data, bytes(32), 21000, bytes(32), b"", b"\x01" * 65)


def handle_ops_call(operations: list[tuple], beneficiary: str) -> bytes:
    return encode_call(
        f"handleOps({USER_OPERATION_TYPE}[],address)",
        [f"{USER_OPERATION_TYPE}[]", "address"],
        [operations, beneficiary],
    )


def write_artifact(
    artifacts_dir: Path,
    name: str,
    abi: list[dict[str, Any]],
    bytecode: bytes | None = None,
    deployed_bytecode: bytes | None = None,
    method_identifiers: dict[str, str] | None = None,
) -> Path:
    """Writes a Hardhat style artifact to <artifacts_dir>/contracts/<name>.sol/<name>.json"""
    artifact: dict[str, Any] = {"contractName": name, "abi": abi}
    if bytecode is not None:
        artifact["bytecode"] = {"object": "0x" + bytecode.hex()}
    if deployed_bytecode is not None:
        artifact["deployedBytecode"] = {"object": "0x" + deployed_bytecode.hex()}
    if method_identifiers is not None:
        artifact["methodIdentifiers"] = method_identifiers

    artifact_path = artifacts_dir / "contracts" / f"{name}.sol" / f"{name}.json"
    artifact_path.parent.mkdir(parents=True, exist_ok=True)
    artifact_path.write_text(json.dumps(artifact), encoding="utf-8")
    return artifact_path
