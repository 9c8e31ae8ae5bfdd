"""Wallet-connected minting client for the LW3Punks NFT collection."""

__version__ = "0.1.0"
