"""
PowerChain Client Errors
Raised locally when a precondition fails; wallet and node errors pass through
"""

from decimal import Decimal


class PowerChainError(Exception):
    """Base class for errors raised by the PowerChain client"""


class MissingClientError(PowerChainError):
    """Wallet provider or network client absent or unusable"""


class NoAccountsError(PowerChainError):
    """Wallet authorization returned no accounts"""


class InsufficientBalanceError(PowerChainError):
    """Withdrawal request exceeds the tracked vesting or deposit balance"""

    def __init__(self, kind: str, available: Decimal, requested: Decimal):
        self.kind = kind
        self.available = available
        self.requested = requested
        super().__init__(
            f"You can withdraw maximum of {available} tokens from {kind}"
        )
