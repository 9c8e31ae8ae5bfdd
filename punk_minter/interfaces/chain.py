"""Wallet client protocol — EIP-1193 JSON-RPC abstraction."""
from typing import Any, Protocol


class WalletClient(Protocol):
    """Abstract interface for the wallet bridge the handles talk through."""

    async def request_accounts(self) -> list[str]: ...

    async def accounts(self) -> list[str]: ...

    async def chain_id(self) -> int: ...

    async def block_number(self) -> int: ...

    async def call(self, to: str, data: str) -> str: ...

    async def send_transaction(self, tx: dict[str, Any]) -> str: ...

    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None: ...
