"""
Utilities Package
Token unit conversion shared by the client and scripts
"""

from .units import tokens_to_lit_precision, from_lit_precision_to_tokens, LIT_DECIMALS

__all__ = [
    'tokens_to_lit_precision',
    'from_lit_precision_to_tokens',
    'LIT_DECIMALS'
]
