"""Market routes - Global aggregate statistics."""

from fastapi import APIRouter, Depends

from marketdash.api.deps import get_source
from marketdash.ingestion.base import MarketDataSource
from marketdash.schemas.market import GlobalStats

router = APIRouter(prefix="/global", tags=["market"])


@router.get("", response_model=GlobalStats)
async def get_global_stats(source: MarketDataSource = Depends(get_source)):
    """Total market cap, volume and dominance (synthetic when upstream fails)."""
    return await source.fetch_global_stats()
