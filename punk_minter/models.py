"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .errors import ErrorKind


@dataclass(frozen=True)
class SessionState:
    """What the display layer renders."""

    wallet_connected: bool = False
    loading: bool = False
    minted_count: str = "0"


@dataclass(frozen=True)
class SupplySnapshot:
    """One successful supply read by the poller."""

    minted: str
    tick: int
    observed_at: datetime


@dataclass(frozen=True)
class TxReceipt:
    tx_hash: str
    block_number: int
    confirmations: int


@dataclass(frozen=True)
class MintResult:
    """Outcome of a single mint attempt."""

    ok: bool
    tx_hash: str | None = None
    block_number: int | None = None
    error_kind: ErrorKind | None = None
    message: str = ""
