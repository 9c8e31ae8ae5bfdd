"""Protocol interfaces for the minting client."""
from .chain import WalletClient
from .notifier import Notifier

__all__ = ["WalletClient", "Notifier"]
