"""Periodic read of the minted-token counter."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from typing import AsyncIterator, Callable

from ..contracts.gateway import ContractGateway
from ..errors import MintDappError
from ..models import SupplySnapshot
from ..wallet.handles import Provider
from .network_guard import NetworkGuard

logger = logging.getLogger(__name__)


class SupplyPoller:
    """Reads ``tokenIds()`` now and then every ``interval`` seconds.

    Ticks run on a fixed schedule; a failed tick is logged and skipped. The
    snapshot stream can be consumed once.
    """

    def __init__(
        self,
        handle: Provider,
        guard: NetworkGuard,
        gateway: ContractGateway,
        interval: float = 5.0,
    ) -> None:
        self._handle = handle
        self._guard = guard
        self._gateway = gateway
        self._interval = interval
        self._consumed = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def read_once(self) -> str:
        """One validated supply read; raises on failure."""
        await self._guard.validate(self._handle)
        proxy = self._gateway.bind(self._handle)
        return await self._gateway.read_supply(proxy)

    async def _tick(self, tick: int) -> SupplySnapshot | None:
        try:
            minted = await self.read_once()
        except MintDappError as e:
            logger.warning("Supply read failed on tick %d: %s", tick, e)
            return None
        except Exception as e:
            logger.error("Unexpected error on tick %d: %s", tick, e)
            return None

        logger.debug("Tick %d: %s minted", tick, minted)
        return SupplySnapshot(
            minted=minted, tick=tick, observed_at=datetime.now(timezone.utc)
        )

    def _next_slot(self, previous: float, now: float) -> float:
        """First slot after ``previous`` that is not already in the past.

        Slots missed by a slow tick are dropped rather than fired back to back.
        """
        next_tick = previous + self._interval
        if next_tick < now and self._interval > 0:
            missed = int((now - next_tick) // self._interval) + 1
            next_tick += missed * self._interval
        return next_tick

    async def snapshots(self) -> AsyncIterator[SupplySnapshot]:
        """Endless stream of successful reads."""
        if self._consumed:
            raise RuntimeError("SupplyPoller cannot be restarted")
        self._consumed = True

        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        tick = 0
        while True:
            tick += 1
            snapshot = await self._tick(tick)
            if snapshot is not None:
                yield snapshot
            next_tick = self._next_slot(next_tick, loop.time())
            await asyncio.sleep(max(0.0, next_tick - loop.time()))

    def start(self, on_snapshot: Callable[[SupplySnapshot], None]) -> asyncio.Task:
        """Run the stream in the background, feeding ``on_snapshot``."""
        if self._task is not None:
            return self._task

        async def _consume() -> None:
            async for snapshot in self.snapshots():
                on_snapshot(snapshot)

        logger.info("Starting supply polling (every %.1f seconds)", self._interval)
        self._task = asyncio.create_task(_consume())
        return self._task

    async def wait(self) -> None:
        """Wait until polling ends (it only ends when stopped)."""
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        logger.info("Supply polling stopped")
