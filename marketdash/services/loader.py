"""Initial load and reload of the market store."""

from __future__ import annotations

from marketdash.core.logging import get_logger
from marketdash.ingestion.base import MarketDataSource
from marketdash.schemas.market import AssetListResult
from marketdash.services.market_store import MarketStore

log = get_logger("loader")


async def load_market(store: MarketStore, source: MarketDataSource) -> AssetListResult:
    """Fetch the ranked asset list and replace the store contents with it."""
    store.set_loading(True)
    try:
        result = await source.fetch_assets()
        store.replace_all(result.assets)
    finally:
        store.set_loading(False)

    if result.is_synthetic:
        log.warning(f"Market store loaded with {len(result.assets)} synthetic assets")
    return result
