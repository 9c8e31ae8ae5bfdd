"""Network precondition — every contract call runs on the required chain."""
from __future__ import annotations

import logging

from ..chains.evm.client import RpcError
from ..config import NetworkConfig
from ..errors import WalletConnectionError, WrongNetworkError
from ..notifications import NoticeDispatcher
from ..wallet.handles import Provider

logger = logging.getLogger(__name__)


class NetworkGuard:
    """Rejects handles connected to any chain but the configured one.

    Background checks tell the user to switch networks once per mismatch
    streak, re-armed after the next handle that passes. Checks made for a
    user action (``user_initiated=True``) always show the notice.
    """

    def __init__(self, config: NetworkConfig, notices: NoticeDispatcher) -> None:
        self.required_chain_id = config.chain_id
        self.network_name = config.name
        self._notices = notices
        self._notified = False

    async def validate(self, handle: Provider, user_initiated: bool = False) -> Provider:
        try:
            chain_id = await handle.get_chain_id()
        except RpcError as e:
            raise WalletConnectionError(f"Could not read network from wallet: {e}") from e

        if chain_id != self.required_chain_id:
            logger.warning(
                "Wrong network: chain %d, expected %d", chain_id, self.required_chain_id
            )
            if user_initiated or not self._notified:
                self._notified = True
                await self._notices.notify(
                    f"Change the network to {self.network_name.capitalize()}",
                    subject="Wrong network",
                )
            raise WrongNetworkError(chain_id, self.required_chain_id)

        self._notified = False
        return handle
