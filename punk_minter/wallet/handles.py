"""Chain handles — read-only providers, write-capable signers, pending txs."""
from __future__ import annotations

import asyncio
import logging

from ..chains.evm.client import (
    CHAIN_DISCONNECTED,
    DISCONNECTED,
    UNAUTHORIZED,
    USER_REJECTED,
    RpcError,
)
from ..errors import (
    InsufficientFundsError,
    MintDappError,
    TransactionRejectedError,
    TransactionRevertedError,
    WalletConnectionError,
)
from ..interfaces.chain import WalletClient
from ..models import TxReceipt

logger = logging.getLogger(__name__)

# JSON-RPC code nodes use for "execution reverted"
EXECUTION_REVERTED = 3


def classify_send_error(err: RpcError) -> MintDappError:
    """Map a wallet error from eth_sendTransaction onto the error taxonomy."""
    message = (err.message or "").lower()
    if err.code == USER_REJECTED:
        return TransactionRejectedError("User rejected the transaction")
    if "insufficient funds" in message:
        return InsufficientFundsError(err.message)
    if err.code == EXECUTION_REVERTED or "revert" in message:
        return TransactionRevertedError(err.message)
    if err.code in (None, UNAUTHORIZED, DISCONNECTED, CHAIN_DISCONNECTED):
        return WalletConnectionError(err.message)
    return WalletConnectionError(f"Wallet failed to submit transaction: {err.message}")


class Provider:
    """Read-only access to the wallet's current network."""

    def __init__(self, client: WalletClient) -> None:
        self.client = client

    @property
    def can_sign(self) -> bool:
        return False

    async def get_chain_id(self) -> int:
        return await self.client.chain_id()

    async def call(self, to: str, data: str) -> str:
        return await self.client.call(to, data)


class Signer(Provider):
    """Write access on behalf of one wallet account."""

    def __init__(self, client: WalletClient, address: str) -> None:
        super().__init__(client)
        self.address = address

    @property
    def can_sign(self) -> bool:
        return True

    async def send_transaction(self, to: str, data: str, value: int = 0) -> PendingTransaction:
        tx = {"from": self.address, "to": to, "data": data, "value": hex(value)}
        try:
            tx_hash = await self.client.send_transaction(tx)
        except RpcError as e:
            raise classify_send_error(e) from e
        logger.info("Transaction %s submitted from %s", tx_hash, self.address)
        return PendingTransaction(self.client, tx_hash)


class PendingTransaction:
    """A submitted transaction whose inclusion has not been observed yet."""

    def __init__(self, client: WalletClient, tx_hash: str) -> None:
        self.client = client
        self.tx_hash = tx_hash

    async def wait(self, confirmations: int = 1, poll_interval: float = 2.0) -> TxReceipt:
        """Block until the transaction is ``confirmations`` blocks deep.

        Raises TransactionRevertedError if the receipt reports failure.
        """
        while True:
            try:
                receipt = await self.client.get_transaction_receipt(self.tx_hash)
                head = await self.client.block_number() if receipt else None
            except RpcError as e:
                raise WalletConnectionError(
                    f"Lost wallet connection while waiting for {self.tx_hash}"
                ) from e

            # wallets may hand back a receipt before the block is known
            if receipt and receipt.get("blockNumber") is not None:
                try:
                    block = int(receipt["blockNumber"], 16)
                    status = int(receipt.get("status") or "0x1", 16)
                except (TypeError, ValueError) as e:
                    raise WalletConnectionError(
                        f"Malformed receipt for {self.tx_hash}: {receipt!r}"
                    ) from e
                if status == 0:
                    raise TransactionRevertedError(
                        f"Transaction {self.tx_hash} reverted in block {block}"
                    )
                depth = head - block + 1
                if depth >= confirmations:
                    return TxReceipt(
                        tx_hash=self.tx_hash, block_number=block, confirmations=depth
                    )
                logger.debug(
                    "Transaction %s has %d/%d confirmations", self.tx_hash, depth, confirmations
                )

            await asyncio.sleep(poll_interval)
