"""Obtaining chain handles from the wallet."""
from __future__ import annotations

import logging
from typing import Literal, overload

from ..chains.evm.client import USER_REJECTED, RpcError
from ..errors import WalletConnectionError
from ..interfaces.chain import WalletClient
from .handles import Provider, Signer

logger = logging.getLogger(__name__)


class ConnectionProvider:
    """Hands out fresh provider/signer handles for the wallet session.

    The first ``acquire`` prompts the wallet owner; later calls reuse the
    session silently. Handles are never cached because the wallet can switch
    account or network between calls.
    """

    def __init__(self, client: WalletClient) -> None:
        self._client = client
        self._session_open = False

    @property
    def session_open(self) -> bool:
        return self._session_open

    @overload
    async def acquire(self, needs_write_access: Literal[False] = ...) -> Provider: ...

    @overload
    async def acquire(self, needs_write_access: Literal[True]) -> Signer: ...

    async def acquire(self, needs_write_access: bool = False) -> Provider | Signer:
        accounts = await self._accounts()

        if not needs_write_access:
            return Provider(self._client)
        return Signer(self._client, accounts[0])

    async def _accounts(self) -> list[str]:
        try:
            accounts: list[str] = []
            if self._session_open:
                accounts = await self._client.accounts()
                if not accounts:
                    logger.info("Wallet session ended, prompting again")
            if not accounts:
                accounts = await self._client.request_accounts()
        except RpcError as e:
            self._session_open = False
            if e.code == USER_REJECTED:
                raise WalletConnectionError("User rejected the wallet connection") from e
            raise WalletConnectionError(f"No compatible wallet available: {e}") from e

        if not accounts:
            self._session_open = False
            raise WalletConnectionError("Wallet did not expose any account")

        if not self._session_open:
            logger.info("Wallet connected: %s", accounts[0])
        self._session_open = True
        return accounts
