from marketdash.api.routes.assets import router as assets_router
from marketdash.api.routes.filters import router as filters_router
from marketdash.api.routes.health import router as health_router
from marketdash.api.routes.market import router as market_router
from marketdash.api.routes.watchlist import router as watchlist_router

__all__ = ["assets_router", "filters_router", "health_router", "market_router", "watchlist_router"]
