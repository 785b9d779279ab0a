"""Asset routes - Table rows, detail, price chart and sparkline layouts."""

import time
import uuid
from dataclasses import asdict
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from marketdash.api.deps import get_source, get_store
from marketdash.charts.layout import TIMEFRAME_DAYS, PriceChartLayout, SparklineLayout
from marketdash.ingestion.base import MarketDataSource
from marketdash.schemas.api import (
    AssetsResponse,
    PriceChartResponse,
    ReloadResponse,
    SparklineResponse,
    notice_for,
)
from marketdash.schemas.market import Asset, AssetDetail
from marketdash.services.loader import load_market
from marketdash.services.market_store import MarketStore
from marketdash.services.ordering import SortColumn, search_assets, sort_assets, sort_by_column

router = APIRouter(prefix="/assets", tags=["assets"])


@router.get("", response_model=AssetsResponse)
def list_assets(
    request: Request,
    search: Optional[str] = Query(None, description="Case-insensitive match on name or symbol"),
    column: Optional[SortColumn] = Query(None, description="Table column sort; overrides the filter preset"),
    direction: Literal["asc", "desc"] = Query("asc", description="Column sort direction"),
    limit: int = Query(100, ge=1, le=500, description="Number of rows to return"),
    store: MarketStore = Depends(get_store),
):
    """
    Visible assets under the active filters.

    Rows are ordered by the filter's sort preset unless a table column is
    given. ``is_synthetic`` is set when the last load fell back to
    generated data.
    """
    start = time.perf_counter()
    request_id = str(uuid.uuid4())

    filters = store.filters
    rows = search_assets(store.select_visible(), search or "")
    if column:
        rows = sort_by_column(rows, column, direction)
    else:
        rows = sort_assets(rows, filters.sort_by)
    rows = rows[:limit]

    is_synthetic = bool(getattr(request.app.state, "market_synthetic", False))
    latency_ms = int((time.perf_counter() - start) * 1000)

    return AssetsResponse(
        request_id=request_id,
        api_latency_ms=latency_ms,
        is_synthetic=is_synthetic,
        notice=notice_for(is_synthetic),
        filters=filters,
        count=len(rows),
        data=rows,
    )


@router.post("/reload", response_model=ReloadResponse)
async def reload_assets(
    request: Request,
    store: MarketStore = Depends(get_store),
    source: MarketDataSource = Depends(get_source),
):
    """Refetch the ranked list and replace the store contents."""
    result = await load_market(store, source)
    request.app.state.market_synthetic = result.is_synthetic
    return ReloadResponse(
        success=True,
        assets_loaded=len(result.assets),
        is_synthetic=result.is_synthetic,
        notice=notice_for(result.is_synthetic),
    )


@router.get("/{asset_id}", response_model=Asset)
def get_asset(asset_id: str, store: MarketStore = Depends(get_store)):
    """Current store entry for one asset."""
    asset = store.select_by_id(asset_id)
    if not asset:
        raise HTTPException(status_code=404, detail=f"Asset '{asset_id}' not found")
    return asset


@router.get("/{asset_id}/detail", response_model=AssetDetail)
async def get_asset_detail(asset_id: str, source: MarketDataSource = Depends(get_source)):
    """Description, market data and exchange tickers (synthetic when upstream fails)."""
    return await source.fetch_asset_detail(asset_id)


@router.get("/{asset_id}/chart", response_model=PriceChartResponse)
async def get_price_chart(
    asset_id: str,
    timeframe: Literal["24h", "7d", "30d", "1y"] = Query("7d"),
    width: float = Query(800, gt=80, le=4000, description="Canvas width in pixels"),
    height: float = Query(400, gt=60, le=2000, description="Canvas height in pixels"),
    source: MarketDataSource = Depends(get_source),
):
    """Price chart laid out in pixel coordinates for the requested canvas."""
    series = await source.fetch_market_chart(asset_id, TIMEFRAME_DAYS[timeframe])
    layout = PriceChartLayout.build(series, timeframe, width, height)
    return PriceChartResponse(
        asset_id=asset_id,
        is_synthetic=series.is_synthetic,
        notice=notice_for(series.is_synthetic),
        **asdict(layout),
    )


@router.get("/{asset_id}/sparkline", response_model=SparklineResponse)
def get_sparkline(
    asset_id: str,
    width: float = Query(100, gt=4, le=1000),
    height: float = Query(40, gt=4, le=500),
    store: MarketStore = Depends(get_store),
):
    """7-day sparkline of a tracked asset in pixel coordinates."""
    asset = store.select_by_id(asset_id)
    if not asset:
        raise HTTPException(status_code=404, detail=f"Asset '{asset_id}' not found")

    layout = SparklineLayout.build(asset.sparkline_7d, asset.price_change_pct_7d, width, height)
    return SparklineResponse(asset_id=asset_id, **asdict(layout))
