"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from eth_utils import is_address

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NetworkConfig:
    name: str = "mumbai"
    chain_id: int = 80001
    rpc_url: str = "http://127.0.0.1:1248"
    rpc_timeout: int = 30


@dataclass(frozen=True)
class ContractConfig:
    name: str = "LW3Punks"
    address: str = ""
    abi_path: str = ""
    mint_price: str = "0.01"
    max_supply: int = 10


@dataclass(frozen=True)
class MintConfig:
    confirmations: int = 1
    receipt_poll_seconds: float = 2.0


@dataclass(frozen=True)
class PollerConfig:
    interval_seconds: float = 5.0


@dataclass(frozen=True)
class ConsoleConfig:
    enabled: bool = True


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    console: ConsoleConfig = field(default_factory=ConsoleConfig)
    telegram: TelegramConfig = field(default_factory=TelegramConfig)


@dataclass(frozen=True)
class AppConfig:
    network: NetworkConfig = field(default_factory=NetworkConfig)
    contract: ContractConfig = field(default_factory=ContractConfig)
    mint: MintConfig = field(default_factory=MintConfig)
    poller: PollerConfig = field(default_factory=PollerConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_network(raw: dict[str, Any]) -> NetworkConfig:
    return NetworkConfig(
        name=raw.get("name", "mumbai"),
        chain_id=int(raw.get("chain_id", 80001)),
        rpc_url=raw.get("rpc_url") or NetworkConfig.rpc_url,
        rpc_timeout=int(raw.get("rpc_timeout", 30)),
    )


def _build_contract(raw: dict[str, Any]) -> ContractConfig:
    return ContractConfig(
        name=raw.get("name", "LW3Punks"),
        address=raw.get("address", ""),
        abi_path=raw.get("abi_path", "") or "",
        mint_price=str(raw.get("mint_price", "0.01")),
        max_supply=int(raw.get("max_supply", 10)),
    )


def _build_mint(raw: dict[str, Any]) -> MintConfig:
    return MintConfig(
        confirmations=int(raw.get("confirmations", 1)),
        receipt_poll_seconds=float(raw.get("receipt_poll_seconds", 2.0)),
    )


def _build_poller(raw: dict[str, Any]) -> PollerConfig:
    return PollerConfig(interval_seconds=float(raw.get("interval_seconds", 5.0)))


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    console = raw.get("console", {})
    tg = raw.get("telegram", {})
    return NotificationsConfig(
        console=ConsoleConfig(enabled=bool(console.get("enabled", True))),
        telegram=TelegramConfig(
            enabled=bool(tg.get("enabled", False)),
            bot_token=tg.get("bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        network=_build_network(raw.get("network", {})),
        contract=_build_contract(raw.get("contract", {})),
        mint=_build_mint(raw.get("mint", {})),
        poller=_build_poller(raw.get("poller", {})),
        notifications=_build_notifications(raw.get("notifications", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if cfg.network.chain_id <= 0:
        raise ValueError("network.chain_id must be a positive integer")

    if not cfg.contract.address:
        raise ValueError("contract.address is not configured")
    if not is_address(cfg.contract.address):
        raise ValueError(f"contract.address '{cfg.contract.address}' is not a valid address")

    try:
        price = Decimal(cfg.contract.mint_price)
    except InvalidOperation:
        raise ValueError(
            f"contract.mint_price '{cfg.contract.mint_price}' is not a decimal amount"
        ) from None
    if price <= 0:
        raise ValueError("contract.mint_price must be positive")

    if cfg.contract.max_supply < 1:
        raise ValueError("contract.max_supply must be at least 1")
    if cfg.mint.confirmations < 1:
        raise ValueError("mint.confirmations must be at least 1")
    if cfg.poller.interval_seconds <= 0:
        raise ValueError("poller.interval_seconds must be positive")
