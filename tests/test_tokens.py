from nethermind.unbundle.tokens import KNOWN_TOKENS, ERC20Token, format_token_amount, get_known_token
from tests.utils import USDC, WETH


def test_known_tokens():
    assert len(KNOWN_TOKENS) == 2
    assert get_known_token(USDC.lower()).symbol == "USDC"
    assert get_known_token(WETH).decimals == 18
    assert get_known_token("0x" + "00" * 20) is None


def test_format_token_amounts():
    assert format_token_amount(USDC, 1000000) == "1.0 USDC"
    assert format_token_amount(USDC, 1234567) == "1.234567 USDC"
    assert format_token_amount(WETH, 10**15) == "0.001 WETH"
    assert format_token_amount("0x" + "11" * 20, 42) == "42 (unknown token)"


def test_erc20_token():
    token = ERC20Token("DAI", 18, "0x50c5725949a6f0c72e6c4a641f24049a917db0cb")

    assert token.address == "0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb"
    assert token.to_dict() == {"symbol": "DAI", "decimals": 18, "address": token.address}
    assert token.convert_decimals(123 * 10**16) == "1.23"
    assert token.human_readable(0) == "0.0 DAI"
