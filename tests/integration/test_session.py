"""Integration tests for the session state machine — the four page scenarios."""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from punk_minter.chains.evm.client import RpcError
from punk_minter.config import AppConfig
from punk_minter.models import SessionState
from punk_minter.services.session import MintSession


@pytest.fixture()
def session(sample_app_config: AppConfig, wallet, notifier: AsyncMock) -> MintSession:
    return MintSession(sample_app_config, client=wallet, notifiers=[notifier])


class TestDisplay:
    def test_initial_state(self, session: MintSession) -> None:
        assert session.state == SessionState(wallet_connected=False, loading=False, minted_count="0")
        assert session.primary_label == "Connect your wallet"
        assert session.supply_line == "0/10 have been minted"

    def test_render(self, session: MintSession) -> None:
        page = session.render()
        assert "Welcome to LW3Punks!" in page
        assert "[ Connect your wallet ]" in page


class TestConnect:
    @pytest.mark.asyncio
    async def test_scenario_a_connect_then_count(
        self, session: MintSession, eventually
    ) -> None:
        result = await session.on_primary_action()

        assert result is None
        assert session.state.wallet_connected
        assert session.poller is not None and session.poller.running
        await eventually(lambda: session.state.minted_count == "3")
        assert session.supply_line == "3/10 have been minted"
        assert session.primary_label == "Public Mint 🚀"
        await session.close()

    @pytest.mark.asyncio
    async def test_connect_is_idempotent(self, session: MintSession, wallet) -> None:
        assert await session.connect()
        poller = session.poller

        assert await session.connect()

        assert session.poller is poller
        assert wallet.methods.count("eth_requestAccounts") == 1
        await session.close()

    @pytest.mark.asyncio
    async def test_rejected_prompt_stays_disconnected(
        self, session: MintSession, wallet, notifier
    ) -> None:
        wallet.connect_error = RpcError(4001, "User rejected the request.")

        assert not await session.connect()

        assert not session.state.wallet_connected
        assert session.poller is None
        notifier.send_notice.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_wrong_network_at_connect(self, session: MintSession, wallet) -> None:
        wallet.network_id = 1

        assert not await session.connect()

        assert not session.state.wallet_connected
        assert wallet.contract_calls() == []

    @pytest.mark.asyncio
    async def test_refresh_supply(self, session: MintSession) -> None:
        await session.connect()
        await session.poller.stop()

        assert await session.refresh_supply() == "3"
        assert session.state.minted_count == "3"


class TestPrimaryAction:
    @pytest.mark.asyncio
    async def test_scenario_b_wrong_network(self, session: MintSession, wallet, notifier) -> None:
        await session.connect()
        wallet.network_id = 1

        result = await session.on_primary_action()

        assert result is not None and not result.ok
        assert not session.state.loading
        assert wallet.methods.count("eth_sendTransaction") == 0
        assert any(
            "Change the network" in c.args[0] for c in notifier.send_notice.call_args_list
        )
        await session.close()

    @pytest.mark.asyncio
    async def test_scenario_c_successful_mint(
        self, session: MintSession, wallet, notifier, eventually
    ) -> None:
        loading_history: list[bool] = []
        session.subscribe(lambda s: loading_history.append(s.loading))
        await session.connect()
        await eventually(lambda: session.state.minted_count == "3")

        result = await session.on_primary_action()

        assert result is not None and result.ok
        assert int(wallet.sent[0]["value"], 16) == 10**16
        assert True in loading_history
        assert not session.state.loading
        assert "successfully minted" in notifier.send_notice.call_args[0][0]
        await eventually(lambda: session.state.minted_count == "4")
        await session.close()

    @pytest.mark.asyncio
    async def test_scenario_d_user_rejects(self, session: MintSession, wallet, notifier) -> None:
        await session.connect()
        await session.poller.stop()
        before = session.state
        wallet.send_error = RpcError(4001, "User denied transaction signature")

        result = await session.on_primary_action()

        assert result is not None and not result.ok
        assert session.state == before
        notifier.send_notice.assert_not_called()

    @pytest.mark.asyncio
    async def test_unexpected_wallet_error_keeps_button_usable(
        self, session: MintSession, wallet
    ) -> None:
        await session.connect()
        await session.poller.stop()
        wallet.get_transaction_receipt = AsyncMock(
            side_effect=TypeError("int() can't convert non-string with explicit base")
        )

        result = await session.on_primary_action()

        assert result is not None and not result.ok
        assert not session.state.loading
        assert session.primary_label == "Public Mint 🚀"

        del wallet.get_transaction_receipt
        retry = await session.on_primary_action()
        assert retry is not None and retry.ok

    @pytest.mark.asyncio
    async def test_pending_mint_makes_action_a_noop(self, session: MintSession, wallet) -> None:
        await session.connect()
        wallet.hold_send = asyncio.Event()

        first = asyncio.create_task(session.on_primary_action())
        await asyncio.sleep(0)
        assert session.state.loading
        assert session.primary_label == "Loading..."

        for _ in range(5):
            assert await session.on_primary_action() is None

        wallet.hold_send.set()
        assert (await first).ok
        assert wallet.methods.count("eth_sendTransaction") == 1
        assert wallet.methods.count("eth_requestAccounts") == 1
        await session.close()

    @pytest.mark.asyncio
    async def test_each_mint_raises_count_by_one(
        self, session: MintSession, wallet, eventually
    ) -> None:
        await session.connect()
        await eventually(lambda: session.state.minted_count == "3")

        for expected in ("4", "5"):
            assert (await session.on_primary_action()).ok
            await eventually(lambda: session.state.minted_count == expected)

        await session.close()


class TestListeners:
    @pytest.mark.asyncio
    async def test_broken_listener_does_not_break_session(self, session: MintSession) -> None:
        def broken(state: SessionState) -> None:
            raise RuntimeError("render failed")

        session.subscribe(broken)
        assert await session.connect()
        assert session.state.wallet_connected
        await session.close()

    @pytest.mark.asyncio
    async def test_supply_listener_sees_every_poll(
        self, session: MintSession, eventually
    ) -> None:
        ticks: list[int] = []
        session.on_supply(lambda s: ticks.append(s.tick))

        await session.connect()
        await eventually(lambda: len(ticks) >= 3)

        assert ticks[:3] == [1, 2, 3]
        await session.close()
