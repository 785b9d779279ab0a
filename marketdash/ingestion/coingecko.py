"""CoinGecko source implementation."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, TypeVar

from marketdash.core.config import settings
from marketdash.core.errors import FetchExhausted, MalformedResponse
from marketdash.core.logging import get_logger
from marketdash.schemas.market import (
    Asset,
    AssetDetail,
    AssetListResult,
    GlobalStats,
    MarketChartSeries,
)
from .base import MarketDataSource
from .client import ResilientFetchClient
from .fallback import FallbackDataGenerator

log = get_logger("ingestion.coingecko")

T = TypeVar("T")

# Shape errors raised while reading an upstream payload
_SHAPE_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


def _default_headers() -> Dict[str, str]:
    if settings.COINGECKO_API_KEY:
        return {"x-cg-demo-api-key": settings.COINGECKO_API_KEY}
    return {}


class CoinGeckoSource(MarketDataSource):
    """Fetches market data from CoinGecko, degrading to synthetic data."""

    name = "coingecko"

    def __init__(
        self,
        client: Optional[ResilientFetchClient] = None,
        fallback: Optional[FallbackDataGenerator] = None,
        currency: Optional[str] = None,
        per_page: Optional[int] = None,
    ):
        self.client = client or ResilientFetchClient(headers=_default_headers())
        self.fallback = fallback or FallbackDataGenerator()
        self.currency = currency or settings.VS_CURRENCY
        self.per_page = per_page or settings.TOP_ASSETS_COUNT

    def _markets_params(self) -> Dict[str, Any]:
        return {
            "vs_currency": self.currency,
            "order": "market_cap_desc",
            "sparkline": "true",
            "price_change_percentage": "1h,24h,7d",
        }

    async def fetch_assets(self) -> AssetListResult:
        params = {**self._markets_params(), "per_page": self.per_page, "page": 1}
        try:
            data = await self.client.get_json("/coins/markets", params)
            assets = self._parse_assets(data)
        except (FetchExhausted, MalformedResponse) as exc:
            log.warning(f"Error fetching cryptocurrencies, using fallback data: {exc}")
            return AssetListResult(assets=self.fallback.synthetic_asset_list(), is_synthetic=True)

        log.info(f"Fetched {len(assets)} assets from CoinGecko")
        return AssetListResult(assets=assets)

    async def fetch_assets_by_ids(self, ids: List[str]) -> AssetListResult:
        if not ids:
            return AssetListResult()

        params = {**self._markets_params(), "ids": ",".join(ids)}
        try:
            data = await self.client.get_json("/coins/markets", params)
            assets = self._parse_assets(data)
        except (FetchExhausted, MalformedResponse) as exc:
            log.warning(f"Error fetching cryptocurrencies by ids, using fallback data: {exc}")
            wanted = set(ids)
            assets = [a for a in self.fallback.synthetic_asset_list() if a.id in wanted]
            return AssetListResult(assets=assets, is_synthetic=True)

        return AssetListResult(assets=assets)

    async def fetch_asset_detail(self, asset_id: str) -> AssetDetail:
        params = {
            "localization": "false",
            "tickers": "true",
            "market_data": "true",
            "community_data": "false",
            "developer_data": "false",
            "sparkline": "false",
        }
        try:
            data = await self.client.get_json(f"/coins/{asset_id}", params)
            detail = self._parse(lambda: AssetDetail.from_coingecko(data, self.currency), "asset detail")
        except (FetchExhausted, MalformedResponse) as exc:
            log.warning(f"Error fetching details for {asset_id}, using mock data: {exc}")
            return self.fallback.synthetic_asset_detail(asset_id)

        log.info(f"Successfully fetched details for {asset_id}")
        return detail

    async def fetch_market_chart(self, asset_id: str, days: int) -> MarketChartSeries:
        params = {"vs_currency": self.currency, "days": days}
        try:
            data = await self.client.get_json(f"/coins/{asset_id}/market_chart", params)
            series = self._parse(lambda: MarketChartSeries.from_coingecko(data), "market chart")
        except (FetchExhausted, MalformedResponse) as exc:
            log.warning(f"Error fetching market chart for {asset_id}, using mock chart data: {exc}")
            return self.fallback.synthetic_chart_series(days)

        log.info(f"Successfully fetched market chart for {asset_id} ({len(series.prices)} points)")
        return series

    async def fetch_global_stats(self) -> GlobalStats:
        try:
            data = await self.client.get_json("/global")
            stats = self._parse(lambda: GlobalStats.from_coingecko(data["data"], self.currency), "global data")
        except (FetchExhausted, MalformedResponse) as exc:
            log.warning(f"Error fetching global market data, using mock global data: {exc}")
            return self.fallback.synthetic_global_stats()

        log.info("Successfully fetched global market data")
        return stats

    @staticmethod
    def _parse(build: Callable[[], T], what: str) -> T:
        try:
            return build()
        except _SHAPE_ERRORS as exc:
            raise MalformedResponse(f"Unexpected {what} payload: {exc}") from exc

    @staticmethod
    def _parse_assets(data: Any) -> List[Asset]:
        if not isinstance(data, list):
            raise MalformedResponse(f"Expected a list of assets, got {type(data).__name__}")

        assets: List[Asset] = []
        for item in data:
            try:
                assets.append(Asset.from_coingecko(item))
            except _SHAPE_ERRORS as exc:
                log.debug(f"Skipping malformed asset row: {exc}")

        if data and not assets:
            raise MalformedResponse("No asset rows matched the expected shape")
        return assets
