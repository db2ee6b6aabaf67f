from enum import Enum

# pylint: disable=invalid-name


class SupportedChain(Enum):
    """Chains with a known default RPC endpoint.  Values are EIP-155 chain IDs"""

    ethereum = 1
    optimism = 10
    polygon = 137
    soneium = 1868
    soneium_minato = 1946
    base = 8453
    arbitrum = 42161
    base_sepolia = 84532
    arbitrum_sepolia = 421614
    sepolia = 11155111


DEFAULT_RPCS: dict[SupportedChain, str] = {
    SupportedChain.ethereum: "https://eth.merkle.io",
    SupportedChain.optimism: "https://mainnet.optimism.io",
    SupportedChain.polygon: "https://polygon-rpc.com",
    SupportedChain.soneium: "https://rpc.soneium.org",
    SupportedChain.soneium_minato: "https://rpc.minato.soneium.org",
    SupportedChain.base: "https://mainnet.base.org",
    SupportedChain.arbitrum: "https://arb1.arbitrum.io/rpc",
    SupportedChain.base_sepolia: "https://sepolia.base.org",
    SupportedChain.arbitrum_sepolia: "https://sepolia-rollup.arbitrum.io/rpc",
    SupportedChain.sepolia: "https://sepolia.drpc.org",
}


def parse_chain_id(value: str | int) -> int:
    """
    Parses a chain ID from a decimal or 0x prefixed hex string

    >>> parse_chain_id("0x2105")
    8453
    >>> parse_chain_id("8453")
    8453

    :raises ValueError: if the value is not a positive integer
    """
    if isinstance(value, int):
        chain_id = value
    else:
        text = value.strip()
        try:
            chain_id = int(text, 16) if text[:2] in ("0x", "0X") else int(text, 10)
        except ValueError:
            raise ValueError(f"Invalid chain ID: {value}")  # pylint: disable=raise-missing-from

    if chain_id <= 0:
        raise ValueError(f"Invalid chain ID: {value}")
    return chain_id


def chain_name(chain_id: int) -> str:
    """Returns a display name for a chain ID"""
    try:
        return SupportedChain(chain_id).name
    except ValueError:
        return f"Chain {chain_id}"


def default_rpc(chain_id: int) -> str:
    """
    Returns the default RPC for a chain.

    .. warning::
        This function is not guaranteed to return a working or high capacity RPC.  It is only used as a fallback when
        no RPC is specified in the environment.

    :param chain_id:
    :return:
    """
    try:
        return DEFAULT_RPCS[SupportedChain(chain_id)]
    except ValueError:
        return f"https://{chain_id}.rpc.thirdweb.com"
