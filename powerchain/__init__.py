"""
PowerChain Client Package
Wallet login, LIT token and PowerChain registry interaction
"""

from .chain_client import ChainClient
from .exceptions import (
    PowerChainError,
    MissingClientError,
    NoAccountsError,
    InsufficientBalanceError
)
from .wallet_provider import NodeWalletProvider, WalletProvider

__all__ = [
    'ChainClient',
    'PowerChainError',
    'MissingClientError',
    'NoAccountsError',
    'InsufficientBalanceError',
    'NodeWalletProvider',
    'WalletProvider'
]
