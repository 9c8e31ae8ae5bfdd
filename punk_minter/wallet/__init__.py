"""Wallet connection and chain handles."""
from .connection import ConnectionProvider
from .handles import PendingTransaction, Provider, Signer

__all__ = ["ConnectionProvider", "PendingTransaction", "Provider", "Signer"]
