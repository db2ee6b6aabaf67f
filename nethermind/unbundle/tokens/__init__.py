from .erc_20 import KNOWN_TOKENS, ERC20Token, format_token_amount, get_known_token
