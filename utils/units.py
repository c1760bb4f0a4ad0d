"""
Token Units
Conversion between human LIT amounts and on-chain fixed precision
"""

from decimal import Decimal
from typing import Union
from web3 import Web3

# LIT uses the same 18 decimal places as ether
LIT_DECIMALS = 18
LIT_UNIT = 'ether'

TokenAmount = Union[int, str, Decimal]


def tokens_to_lit_precision(tokens: TokenAmount) -> int:
    """
    Convert a human token amount to its on-chain integer form

    Args:
        tokens: Amount in whole LIT (floats go through str() first)

    Returns:
        Amount in the smallest LIT denomination
    """
    if isinstance(tokens, float):
        tokens = str(tokens)

    return int(Web3.to_wei(Decimal(tokens), LIT_UNIT))


def from_lit_precision_to_tokens(value: Union[int, str]) -> Decimal:
    """
    Convert an on-chain integer amount to whole LIT

    Args:
        value: Amount in the smallest LIT denomination

    Returns:
        Human amount as Decimal
    """
    return Decimal(Web3.from_wei(int(value), LIT_UNIT))
