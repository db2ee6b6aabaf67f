"""
Built-in ABIs.  These are embedded in the package so that the core smart-account, ERC-20, and deploy functions
can always be decoded, even when no schema sources are available on disk.
"""

from typing import Any

ENTRY_POINT_V07_ADDRESS = "0x0000000071727De22E5E9d8BAf0edAc6f37da032"

PACKED_USER_OPERATION_COMPONENTS: list[dict[str, Any]] = [
    {"name": "sender", "type": "address"},
    {"name": "nonce", "type": "uint256"},
    {"name": "initCode", "type": "bytes"},
    {"name": "callData", "type": "bytes"},
    {"name": "accountGasLimits", "type": "bytes32"},
    {"name": "preVerificationGas", "type": "uint256"},
    {"name": "gasFees", "type": "bytes32"},
    {"name": "paymasterAndData", "type": "bytes"},
    {"name": "signature", "type": "bytes"},
]

ENTRY_POINT_V07_ABI: list[dict[str, Any]] = [
    {
        "name": "handleOps",
        "type": "function",
        "inputs": [
            {"name": "ops", "type": "tuple[]", "components": PACKED_USER_OPERATION_COMPONENTS},
            {"name": "beneficiary", "type": "address"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
]

SIMPLE_ACCOUNT_EXECUTE_ABI: list[dict[str, Any]] = [
    {
        "name": "execute",
        "type": "function",
        "inputs": [
            {"name": "dest", "type": "address"},
            {"name": "value", "type": "uint256"},
            {"name": "func", "type": "bytes"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "name": "executeBatch",
        "type": "function",
        "inputs": [
            {"name": "dest", "type": "address[]"},
            {"name": "value", "type": "uint256[]"},
            {"name": "func", "type": "bytes[]"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
]

ERC20_ABI: list[dict[str, Any]] = [
    {
        "name": "transfer",
        "type": "function",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "name": "transferFrom",
        "type": "function",
        "inputs": [
            {"name": "from", "type": "address"},
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "name": "approve",
        "type": "function",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
]

# deploy(bytes) -> 0x00774360
COMMON_DEPLOY_ABI: list[dict[str, Any]] = [
    {
        "name": "deploy",
        "type": "function",
        "inputs": [{"name": "initCode", "type": "bytes"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
]

# KAMI721C mintFor -> 0x1169051d
KAMI_MINT_ABI: list[dict[str, Any]] = [
    {
        "name": "mintFor",
        "type": "function",
        "inputs": [
            {"name": "recipient", "type": "address"},
            {"name": "tokenPrice", "type": "uint256"},
            {"name": "uri", "type": "string"},
            {
                "name": "mintRoyalties",
                "type": "tuple[]",
                "components": [
                    {"name": "receiver", "type": "address"},
                    {"name": "feeNumerator", "type": "uint96"},
                ],
            },
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
]

FALLBACK_ABIS: dict[str, list[dict[str, Any]]] = {
    "SimpleAccount": SIMPLE_ACCOUNT_EXECUTE_ABI,
    "ERC20": ERC20_ABI,
    "Deployer": COMMON_DEPLOY_ABI,
    "KAMI721C": KAMI_MINT_ABI,
}
""" Fallback schema sources, in merge order """
