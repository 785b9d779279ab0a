"""Watchlist routes - Membership stored in the preferences table."""

from fastapi import APIRouter, Depends

from marketdash.api.deps import get_source, get_watchlist
from marketdash.ingestion.base import MarketDataSource
from marketdash.schemas.api import WatchlistResponse, WatchlistToggleResponse, notice_for
from marketdash.services.watchlist import Watchlist

router = APIRouter(prefix="/watchlist", tags=["watchlist"])


@router.get("", response_model=WatchlistResponse)
async def get_watchlist_assets(
    watchlist: Watchlist = Depends(get_watchlist),
    source: MarketDataSource = Depends(get_source),
):
    """Watched ids with fresh market rows for each."""
    ids = watchlist.ids()
    result = await source.fetch_assets_by_ids(ids)
    return WatchlistResponse(
        ids=ids,
        is_synthetic=result.is_synthetic,
        notice=notice_for(result.is_synthetic),
        data=result.assets,
    )


@router.post("/{asset_id}", response_model=WatchlistToggleResponse)
def toggle_watchlist(asset_id: str, watchlist: Watchlist = Depends(get_watchlist)):
    """Add the asset if absent, remove it otherwise."""
    added = watchlist.toggle(asset_id)
    return WatchlistToggleResponse(id=asset_id, added=added, ids=watchlist.ids())


@router.delete("/{asset_id}", response_model=WatchlistToggleResponse)
def remove_from_watchlist(asset_id: str, watchlist: Watchlist = Depends(get_watchlist)):
    """Remove the asset; a missing id is not an error."""
    watchlist.remove(asset_id)
    return WatchlistToggleResponse(id=asset_id, added=False, ids=watchlist.ids())
