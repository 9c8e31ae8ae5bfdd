"""Mint workflow — connect, check network, pay, wait for confirmation."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from ..config import MintConfig
from ..contracts.gateway import ContractGateway
from ..errors import (
    ErrorKind,
    InsufficientFundsError,
    MintDappError,
    TransactionRevertedError,
    WalletConnectionError,
)
from ..models import MintResult
from ..notifications import NoticeDispatcher
from ..wallet.connection import ConnectionProvider
from .network_guard import NetworkGuard

logger = logging.getLogger(__name__)


class MintState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    VALIDATING_NETWORK = "validating_network"
    SUBMITTING = "submitting"
    CONFIRMING = "confirming"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class MintWorkflow:
    """One paid ``mint()`` per ``run()``; never retries, never raises.

    Only one run can be in flight: the flag is taken before the first await,
    so a second trigger is refused even before the loading flag is visible.
    """

    def __init__(
        self,
        connection: ConnectionProvider,
        guard: NetworkGuard,
        gateway: ContractGateway,
        notices: NoticeDispatcher,
        config: MintConfig,
        collection_name: str = "LW3Punks",
        on_loading: Callable[[bool], None] | None = None,
    ) -> None:
        self._connection = connection
        self._guard = guard
        self._gateway = gateway
        self._notices = notices
        self._confirmations = config.confirmations
        self._poll_interval = config.receipt_poll_seconds
        self._collection_name = collection_name
        self._on_loading = on_loading
        self._state = MintState.IDLE
        self._in_flight = False

    @property
    def state(self) -> MintState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def _transition(self, state: MintState) -> None:
        logger.debug("Mint %s -> %s", self._state.value, state.value)
        self._state = state

    def _set_loading(self, loading: bool) -> None:
        if self._on_loading is not None:
            self._on_loading(loading)

    async def run(self) -> MintResult:
        if self._in_flight:
            logger.info("Mint already in progress, ignoring trigger")
            return MintResult(
                ok=False,
                error_kind=ErrorKind.MINT_IN_PROGRESS,
                message="A mint is already in progress",
            )

        self._in_flight = True
        loading = False
        try:
            self._transition(MintState.CONNECTING)
            signer = await self._connection.acquire(needs_write_access=True)

            self._transition(MintState.VALIDATING_NETWORK)
            await self._guard.validate(signer, user_initiated=True)

            self._transition(MintState.SUBMITTING)
            loading = True
            self._set_loading(True)
            proxy = self._gateway.bind(signer)
            pending = await self._gateway.mint(proxy)

            self._transition(MintState.CONFIRMING)
            receipt = await pending.wait(self._confirmations, self._poll_interval)
        except MintDappError as e:
            self._transition(MintState.FAILED)
            logger.error("Mint failed (%s): %s", e.kind.value, e)
            await self._notify_failure(e)
            return MintResult(ok=False, error_kind=e.kind, message=str(e))
        except Exception as e:
            # anything unexpected from the wallet counts as a lost connection
            self._transition(MintState.FAILED)
            logger.exception("Mint failed unexpectedly: %s", e)
            await self._notices.notify(f"Mint failed: {e}", subject="Mint failed")
            return MintResult(ok=False, error_kind=ErrorKind.CONNECTION, message=str(e))
        finally:
            self._in_flight = False
            if loading:
                self._set_loading(False)

        self._transition(MintState.SUCCEEDED)
        logger.info(
            "Mint %s confirmed in block %d", receipt.tx_hash, receipt.block_number
        )
        await self._notices.notify(
            f"You have successfully minted a {self._collection_name} token!", subject="Minted"
        )
        return MintResult(
            ok=True, tx_hash=receipt.tx_hash, block_number=receipt.block_number
        )

    async def _notify_failure(self, error: MintDappError) -> None:
        # wrong-network notices come from the guard; rejections need none
        if isinstance(error, WalletConnectionError):
            await self._notices.notify(f"Could not connect to wallet: {error}", subject="Wallet")
        elif isinstance(error, InsufficientFundsError):
            await self._notices.notify(
                "Not enough funds to pay for the mint", subject="Mint failed"
            )
        elif isinstance(error, TransactionRevertedError):
            await self._notices.notify(f"Mint was reverted: {error}", subject="Mint failed")
