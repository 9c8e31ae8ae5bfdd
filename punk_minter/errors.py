"""Error taxonomy — every failure the UI layer can branch on."""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CONNECTION = "connection"
    WRONG_NETWORK = "wrong_network"
    TX_REJECTED = "tx_rejected"
    TX_REVERTED = "tx_reverted"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    TRANSIENT_READ = "transient_read"
    MINT_IN_PROGRESS = "mint_in_progress"


class MintDappError(Exception):
    """Base class for failures the session recovers from."""

    kind: ErrorKind


class WalletConnectionError(MintDappError):
    """No wallet answered, or the user rejected the connection prompt."""

    kind = ErrorKind.CONNECTION


class WrongNetworkError(MintDappError):
    kind = ErrorKind.WRONG_NETWORK

    def __init__(self, actual: int, expected: int) -> None:
        super().__init__(f"Connected to chain {actual}, expected {expected}")
        self.actual = actual
        self.expected = expected


class TransactionError(MintDappError):
    """A mint transaction did not go through."""


class TransactionRejectedError(TransactionError):
    kind = ErrorKind.TX_REJECTED


class TransactionRevertedError(TransactionError):
    kind = ErrorKind.TX_REVERTED


class InsufficientFundsError(TransactionError):
    kind = ErrorKind.INSUFFICIENT_FUNDS


class TransientReadError(MintDappError):
    kind = ErrorKind.TRANSIENT_READ
