"""Session state machine behind the single primary button."""
from __future__ import annotations

import dataclasses
import logging
from typing import Callable

from ..chains.evm import EvmRpcClient
from ..config import AppConfig
from ..contracts.gateway import ContractGateway
from ..errors import MintDappError, WalletConnectionError
from ..interfaces.chain import WalletClient
from ..interfaces.notifier import Notifier
from ..models import MintResult, SessionState, SupplySnapshot
from ..notifications import NoticeDispatcher
from ..wallet.connection import ConnectionProvider
from .mint_workflow import MintWorkflow
from .network_guard import NetworkGuard
from .supply_poller import SupplyPoller

logger = logging.getLogger(__name__)

StateListener = Callable[[SessionState], None]
SupplyListener = Callable[[SupplySnapshot], None]


class MintSession:
    """Owns {connected, loading, minted count} and routes the primary action."""

    def __init__(
        self,
        config: AppConfig,
        client: WalletClient | None = None,
        notifiers: list[Notifier] | None = None,
    ) -> None:
        self._config = config
        self._state = SessionState()
        self._listeners: list[StateListener] = []
        self._supply_listeners: list[SupplyListener] = []

        if notifiers is None:
            self._notices = NoticeDispatcher.from_config(config.notifications)
        else:
            self._notices = NoticeDispatcher(notifiers)

        self._connection = ConnectionProvider(client or EvmRpcClient(config.network))
        self._guard = NetworkGuard(config.network, self._notices)
        self._gateway = ContractGateway(config.contract)
        self._workflow = MintWorkflow(
            self._connection,
            self._guard,
            self._gateway,
            self._notices,
            config.mint,
            collection_name=config.contract.name,
            on_loading=self._on_loading,
        )
        self._poller: SupplyPoller | None = None

    # ------------------------------------------------------------------
    # Display boundary
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def poller(self) -> SupplyPoller | None:
        return self._poller

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def on_supply(self, listener: SupplyListener) -> None:
        """Called with every successful poll, changed or not."""
        self._supply_listeners.append(listener)

    @property
    def primary_label(self) -> str:
        if not self._state.wallet_connected:
            return "Connect your wallet"
        if self._state.loading:
            return "Loading..."
        return "Public Mint 🚀"

    @property
    def supply_line(self) -> str:
        return f"{self._state.minted_count}/{self._config.contract.max_supply} have been minted"

    def render(self) -> str:
        return (
            f"Welcome to {self._config.contract.name}!\n"
            f"{self.supply_line}\n"
            f"[ {self.primary_label} ]"
        )

    def _update(self, **changes) -> None:
        new_state = dataclasses.replace(self._state, **changes)
        if new_state == self._state:
            return
        self._state = new_state
        for listener in self._listeners:
            try:
                listener(new_state)
            except Exception as e:
                logger.error("State listener failed: %s", e)

    def _on_loading(self, loading: bool) -> None:
        self._update(loading=loading)

    def _on_snapshot(self, snapshot: SupplySnapshot) -> None:
        self._update(minted_count=snapshot.minted)
        for listener in self._supply_listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error("Supply listener failed: %s", e)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def connect(self) -> bool:
        """Connect read-only on the required network; starts polling once."""
        if self._state.wallet_connected:
            return True

        try:
            handle = await self._connection.acquire(needs_write_access=False)
            await self._guard.validate(handle, user_initiated=True)
        except WalletConnectionError as e:
            logger.error("Wallet connection failed: %s", e)
            await self._notices.notify(f"Could not connect to wallet: {e}", subject="Wallet")
            return False
        except MintDappError as e:
            logger.error("Wallet connection failed (%s): %s", e.kind.value, e)
            return False

        self._update(wallet_connected=True)
        if self._poller is None:
            self._poller = SupplyPoller(
                handle, self._guard, self._gateway, self._config.poller.interval_seconds
            )
            self._poller.start(self._on_snapshot)
        return True

    async def refresh_supply(self) -> str:
        """Read the supply right now, outside the poll schedule."""
        if self._poller is None:
            raise RuntimeError("Not connected")
        minted = await self._poller.read_once()
        self._update(minted_count=minted)
        return minted

    async def mint(self) -> MintResult:
        return await self._workflow.run()

    async def on_primary_action(self) -> MintResult | None:
        """Connect, mint, or do nothing while a mint is pending."""
        if not self._state.wallet_connected:
            await self.connect()
            return None
        if self._state.loading or self._workflow.in_flight:
            logger.debug("Mint pending, primary action ignored")
            return None
        return await self.mint()

    async def close(self) -> None:
        if self._poller is not None:
            await self._poller.stop()
