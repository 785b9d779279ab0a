"""Abstract market data source interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from marketdash.schemas.market import AssetDetail, AssetListResult, GlobalStats, MarketChartSeries


class MarketDataSource(ABC):
    """Market data operations that never raise for upstream failures.

    Implementations substitute synthetic data tagged ``is_synthetic`` when the
    upstream cannot deliver.
    """

    name: str

    @abstractmethod
    async def fetch_assets(self) -> AssetListResult:
        """Ranked asset list with 7d sparklines."""

    @abstractmethod
    async def fetch_assets_by_ids(self, ids: List[str]) -> AssetListResult:
        """Assets restricted to ``ids`` (watchlist)."""

    @abstractmethod
    async def fetch_asset_detail(self, asset_id: str) -> AssetDetail:
        """Single asset with description and tickers."""

    @abstractmethod
    async def fetch_market_chart(self, asset_id: str, days: int) -> MarketChartSeries:
        """Historical price series covering ``days``."""

    @abstractmethod
    async def fetch_global_stats(self) -> GlobalStats:
        """Aggregate market statistics."""
