"""Shared test fixtures, sample data and an in-memory wallet bridge."""
from __future__ import annotations

import asyncio
import textwrap
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest
from eth_abi import encode
from eth_utils import encode_hex, function_abi_to_4byte_selector

from punk_minter.chains.evm.client import RpcError
from punk_minter.config import (
    AppConfig,
    ConsoleConfig,
    ContractConfig,
    MintConfig,
    NetworkConfig,
    NotificationsConfig,
    PollerConfig,
    TelegramConfig,
)
from punk_minter.contracts.gateway import ContractGateway
from punk_minter.notifications import NoticeDispatcher
from punk_minter.services.network_guard import NetworkGuard
from punk_minter.wallet.connection import ConnectionProvider

CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
ACCOUNT = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
MINT_PRICE_WEI = 10**16

TOKEN_IDS_CALLDATA = encode_hex(
    function_abi_to_4byte_selector({"type": "function", "name": "tokenIds", "inputs": []})
)
MINT_CALLDATA = encode_hex(
    function_abi_to_4byte_selector({"type": "function", "name": "mint", "inputs": []})
)


# ---------------------------------------------------------------------------
# Fake wallet bridge
# ---------------------------------------------------------------------------


class FakeWallet:
    """In-memory stand-in for an EIP-1193 wallet on top of the NFT contract."""

    def __init__(self, network_id: int = 80001, minted: int = 0, max_supply: int = 10) -> None:
        self.network_id = network_id
        self.minted = minted
        self.max_supply = max_supply
        self.block = 100
        self.exposed = False
        self.methods: list[str] = []
        self.sent: list[dict[str, Any]] = []
        self.receipts: dict[str, dict[str, Any]] = {}
        self.connect_error: RpcError | None = None
        self.send_error: RpcError | None = None
        self.call_errors: list[Exception | None] = []
        self.hold_send: asyncio.Event | None = None

    async def request_accounts(self) -> list[str]:
        self.methods.append("eth_requestAccounts")
        if self.connect_error is not None:
            raise self.connect_error
        self.exposed = True
        return [ACCOUNT]

    async def accounts(self) -> list[str]:
        self.methods.append("eth_accounts")
        return [ACCOUNT] if self.exposed else []

    async def chain_id(self) -> int:
        self.methods.append("eth_chainId")
        return self.network_id

    async def block_number(self) -> int:
        self.methods.append("eth_blockNumber")
        return self.block

    async def call(self, to: str, data: str) -> str:
        self.methods.append("eth_call")
        if self.call_errors:
            error = self.call_errors.pop(0)
            if error is not None:
                raise error
        assert to == CONTRACT_ADDRESS
        assert data == TOKEN_IDS_CALLDATA
        return encode_hex(encode(["uint256"], [self.minted]))

    async def send_transaction(self, tx: dict[str, Any]) -> str:
        self.methods.append("eth_sendTransaction")
        if self.hold_send is not None:
            await self.hold_send.wait()
        if self.send_error is not None:
            raise self.send_error

        self.sent.append(tx)
        tx_hash = "0x%064x" % len(self.sent)
        success = (
            tx["data"] == MINT_CALLDATA
            and int(tx["value"], 16) == MINT_PRICE_WEI
            and self.minted < self.max_supply
        )
        if success:
            self.minted += 1
        self.block += 1
        self.receipts[tx_hash] = {
            "transactionHash": tx_hash,
            "blockNumber": hex(self.block),
            "status": "0x1" if success else "0x0",
        }
        return tx_hash

    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        self.methods.append("eth_getTransactionReceipt")
        return self.receipts.get(tx_hash)

    def contract_calls(self) -> list[str]:
        return [m for m in self.methods if m in ("eth_call", "eth_sendTransaction")]


@pytest.fixture()
def wallet() -> FakeWallet:
    return FakeWallet(minted=3)


@pytest.fixture()
def eventually() -> Callable[..., Any]:
    """Await until ``predicate()`` is true, failing after ``timeout`` seconds."""

    async def _wait(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
        async def _poll() -> None:
            while not predicate():
                await asyncio.sleep(0.005)

        await asyncio.wait_for(_poll(), timeout)

    return _wait


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_network_config() -> NetworkConfig:
    return NetworkConfig(
        name="mumbai", chain_id=80001, rpc_url="http://wallet.example.com", rpc_timeout=5
    )


@pytest.fixture()
def sample_contract_config() -> ContractConfig:
    return ContractConfig(name="LW3Punks", address=CONTRACT_ADDRESS, mint_price="0.01", max_supply=10)


@pytest.fixture()
def sample_app_config(
    sample_network_config: NetworkConfig, sample_contract_config: ContractConfig
) -> AppConfig:
    return AppConfig(
        network=sample_network_config,
        contract=sample_contract_config,
        mint=MintConfig(confirmations=1, receipt_poll_seconds=0),
        poller=PollerConfig(interval_seconds=0.01),
        notifications=NotificationsConfig(
            console=ConsoleConfig(enabled=False),
            telegram=TelegramConfig(enabled=False),
        ),
    )


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def notifier() -> AsyncMock:
    return AsyncMock()


@pytest.fixture()
def notices(notifier: AsyncMock) -> NoticeDispatcher:
    return NoticeDispatcher([notifier])


@pytest.fixture()
def guard(sample_network_config: NetworkConfig, notices: NoticeDispatcher) -> NetworkGuard:
    return NetworkGuard(sample_network_config, notices)


@pytest.fixture()
def gateway(sample_contract_config: ContractConfig) -> ContractGateway:
    return ContractGateway(sample_contract_config)


@pytest.fixture()
def connection(wallet: FakeWallet) -> ConnectionProvider:
    return ConnectionProvider(wallet)


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent(f"""\
    network:
      name: mumbai
      chain_id: 80001
      rpc_url: "http://127.0.0.1:1248"
      rpc_timeout: 10
    contract:
      name: LW3Punks
      address: "{CONTRACT_ADDRESS}"
      mint_price: "0.01"
      max_supply: 10
    mint:
      confirmations: 1
      receipt_poll_seconds: 1
    poller:
      interval_seconds: 5
    notifications:
      console:
        enabled: true
      telegram:
        enabled: true
        bot_token: "tok"
        chat_id: "999"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
