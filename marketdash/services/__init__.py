# Services package
from marketdash.services.filters import FilterForm, build_filter_config
from marketdash.services.loader import load_market
from marketdash.services.market_store import MarketStore
from marketdash.services.stream_simulator import StreamSimulator, start_simulation
from marketdash.services.watchlist import InMemoryPreferences, SqlPreferencesStore, Watchlist

__all__ = [
    "FilterForm",
    "build_filter_config",
    "load_market",
    "MarketStore",
    "StreamSimulator",
    "start_simulation",
    "InMemoryPreferences",
    "SqlPreferencesStore",
    "Watchlist",
]
