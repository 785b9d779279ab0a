from typing import Literal, Optional

from pydantic import BaseModel

from marketdash.schemas.market import Asset, FilterConfig, SortBy

FALLBACK_NOTICE = "Showing fallback data"


class AssetsResponse(BaseModel):
    request_id: str
    api_latency_ms: int
    is_synthetic: bool
    notice: str | None = None
    filters: FilterConfig
    count: int
    data: list[Asset]


class ReloadResponse(BaseModel):
    success: bool
    assets_loaded: int
    is_synthetic: bool
    notice: str | None = None


class HealthResponse(BaseModel):
    status: str
    assets: int
    loading: bool
    simulator_running: bool


class FilterUpdate(BaseModel):
    sort_by: SortBy = SortBy.MARKET_CAP_DESC
    price_min: float = 0
    price_max: float = 100_000
    market_cap_min: float = 0
    market_cap_max: float = 1_000_000_000_000
    show_only_gainers: bool = False
    show_only_losers: bool = False
    # which toggle was switched on last, when both arrive enabled
    prefer: Literal["gainers", "losers"] = "gainers"


class WatchlistResponse(BaseModel):
    ids: list[str]
    is_synthetic: bool = False
    notice: str | None = None
    data: list[Asset] = []


class WatchlistToggleResponse(BaseModel):
    id: str
    added: bool
    ids: list[str]


class ChartPointOut(BaseModel):
    index: int
    x: float
    y: float
    value: float
    timestamp: Optional[int] = None


class GridlineOut(BaseModel):
    position: float
    label: str


class PriceChartResponse(BaseModel):
    asset_id: str
    timeframe: str
    is_synthetic: bool
    notice: str | None = None
    width: float
    height: float
    title: str
    current_price_label: str
    points: list[ChartPointOut]
    price_gridlines: list[GridlineOut]
    time_gridlines: list[GridlineOut]


class SparklineResponse(BaseModel):
    asset_id: str
    width: float
    height: float
    trend: Literal["up", "down"]
    points: list[ChartPointOut]


def notice_for(is_synthetic: bool) -> str | None:
    return FALLBACK_NOTICE if is_synthetic else None
