"""Simulated real-time feed that perturbs the market store on a fixed cadence."""

from __future__ import annotations

import asyncio
import random
import weakref
from typing import Awaitable, Callable, Iterable, List, Optional, Protocol

from marketdash.core.config import settings
from marketdash.core.logging import get_logger
from marketdash.schemas.market import Asset, AssetPatch
from marketdash.services.market_store import MarketStore

log = get_logger("stream_simulator")

PRICE_JITTER = 0.005  # +/-0.5% per tick
PCT_POINT_JITTER = 0.2  # +/-0.2 percentage points per tick
VOLUME_JITTER = 0.01  # +/-1% per tick


class UniformSource(Protocol):
    def uniform(self, a: float, b: float) -> float: ...


def compute_patches(assets: Iterable[Asset], rng: UniformSource) -> List[AssetPatch]:
    """One bounded random step for every asset, in snapshot order."""
    patches: List[AssetPatch] = []
    for asset in assets:
        new_price = asset.current_price * (1 + rng.uniform(-PRICE_JITTER, PRICE_JITTER))
        patches.append(
            AssetPatch(
                id=asset.id,
                current_price=new_price,
                price_change_pct_1h=asset.price_change_pct_1h + rng.uniform(-PCT_POINT_JITTER, PCT_POINT_JITTER),
                price_change_pct_24h=asset.price_change_pct_24h + rng.uniform(-PCT_POINT_JITTER, PCT_POINT_JITTER),
                price_change_pct_7d=asset.price_change_pct_7d + rng.uniform(-PCT_POINT_JITTER, PCT_POINT_JITTER),
                total_volume=asset.total_volume * (1 + rng.uniform(-VOLUME_JITTER, VOLUME_JITTER)),
                sparkline_7d=asset.sparkline_7d[1:] + (new_price,),
            )
        )
    return patches


class StreamSimulator:
    """Start/cancel handle for the simulated feed.

    The store is held by weak reference: once it is garbage collected or
    closed, pending ticks do nothing. ``sleep`` is injectable so tests can
    drive ticks with a virtual clock.
    """

    def __init__(
        self,
        store: MarketStore,
        interval_ms: Optional[int] = None,
        rng: Optional[UniformSource] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._store_ref = weakref.ref(store)
        self.interval_ms = interval_ms if interval_ms is not None else settings.SIMULATOR_INTERVAL_MS
        self.rng = rng or random.Random()
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._cancelled

    def tick(self) -> int:
        """Apply one batch of updates; returns the number of assets patched."""
        store = self._store_ref()
        if self._cancelled or store is None or store.closed:
            return 0
        patches = compute_patches(store.snapshot(), self.rng)
        patched = store.patch_many(patches)
        self.ticks += 1
        log.debug(f"Tick {self.ticks}: patched {patched} assets")
        return patched

    def start(self) -> "StreamSimulator":
        """Schedule the tick loop on the running event loop."""
        if self._task is not None:
            log.warning("Stream simulator already running")
            return self
        self._task = asyncio.get_running_loop().create_task(self._run())
        log.info(f"Started stream simulator (interval: {self.interval_ms}ms)")
        return self

    def cancel(self) -> None:
        """Stop future ticks. Safe to call repeatedly and after store teardown."""
        if self._cancelled:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        log.info("Stopped stream simulator")

    async def stop(self) -> None:
        """Cancel and wait for the loop task to finish."""
        self.cancel()
        task = self._task
        if task is None or task.done():
            return
        await asyncio.wait({task})

    async def _run(self) -> None:
        interval_s = self.interval_ms / 1000
        while not self._cancelled:
            try:
                await self._sleep(interval_s)
                if self._cancelled:
                    break
                self.tick()
            except asyncio.CancelledError:
                log.info("Stream simulator loop cancelled")
                break
            except Exception as exc:
                log.exception(f"Stream simulator tick failed: {exc}")


def start_simulation(
    store: MarketStore,
    interval_ms: Optional[int] = None,
    rng: Optional[UniformSource] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Callable[[], None]:
    """Start a simulator for ``store`` and return its cancel function."""
    return StreamSimulator(store, interval_ms=interval_ms, rng=rng, sleep=sleep).start().cancel
