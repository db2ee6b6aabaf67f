from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from nethermind.unbundle.utils import format_units


class ERC20Token:
    """
    Class for representing ERC20 Tokens.  Used to convert raw token amounts into human-readable amounts.
    """

    symbol: str
    """
        Token Symbol from Contract
    """

    decimals: int
    """
        Number of decimals from Token Contract
    """

    address: ChecksumAddress
    """
        Checksum Address of the Token Contract
    """

    def __init__(self, symbol: str, decimals: int, address: ChecksumAddress | str) -> None:
        self.symbol = symbol
        self.decimals = decimals
        self.address = to_checksum_address(address)

    def to_dict(self) -> dict[str, str | int]:
        """
        Returns dictionary containing token parameters.  Typically used for JSON encoding ERC20 tokens

        :return:
        """
        return {
            "symbol": self.symbol,
            "decimals": self.decimals,
            "address": self.address,
        }

    def convert_decimals(self, raw_token_amount: int) -> str:
        """
        Divides raw token amounts by token decimals without losing precision.

        :param int raw_token_amount:
            Raw token amount
        :return:
            Token amount adjusted by decimals
        """
        return format_units(raw_token_amount, self.decimals)

    def human_readable(self, raw_token_amount: int) -> str:
        """
        Converts raw token amount to human-readable string containing the correct decimals and the token symbol.

        >>> USDC_BASE.human_readable(1000000)
        '1.0 USDC'

        :param raw_token_amount:
            raw token amount
        :return:
            Human-readable string containing token amount and symbol
        """

        return f"{self.convert_decimals(raw_token_amount)} {self.symbol}"


USDC_BASE = ERC20Token(symbol="USDC", decimals=6, address="0x833589fcd6edb6e08f4c7c32d4f71b54bda02913")
WETH_BASE = ERC20Token(symbol="WETH", decimals=18, address="0x4200000000000000000000000000000000000006")

KNOWN_TOKENS: dict[str, ERC20Token] = {token.address.lower(): token for token in (USDC_BASE, WETH_BASE)}
""" Lowercase token address -> token """


def get_known_token(token_address: str) -> ERC20Token | None:
    """Returns the known token at an address, if any"""
    return KNOWN_TOKENS.get(token_address.lower())


def format_token_amount(token_address: str, raw_amount: int) -> str:
    """
    Formats a raw token amount.  Known tokens are rendered with their decimals and symbol, unknown tokens as the
    raw integer with an ``(unknown token)`` marker.

    :param token_address: Address of the token contract
    :param raw_amount: Raw integer amount
    """
    token = get_known_token(token_address)
    if token is None:
        return f"{raw_amount} (unknown token)"
    return token.human_readable(raw_amount)
