from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from marketdash.api.routes import (
    assets_router,
    filters_router,
    health_router,
    market_router,
    watchlist_router,
)
from marketdash.core.config import settings
from marketdash.core.db import SessionLocal, engine
from marketdash.core.logging import get_logger
from marketdash.ingestion.base import MarketDataSource
from marketdash.ingestion.coingecko import CoinGeckoSource
from marketdash.models import Base
from marketdash.services.loader import load_market
from marketdash.services.market_store import MarketStore
from marketdash.services.stream_simulator import StreamSimulator
from marketdash.services.watchlist import SqlPreferencesStore, Watchlist

log = get_logger("marketdash")


def init_preferences_schema() -> None:
    """Create the preferences table if it does not exist yet."""
    Base.metadata.create_all(bind=engine)
    log.info("Preferences schema ready")


def create_app(
    source: Optional[MarketDataSource] = None,
    watchlist: Optional[Watchlist] = None,
    simulator_enabled: Optional[bool] = None,
) -> FastAPI:
    """Build the API. Collaborators default to the production ones."""
    run_simulator = settings.SIMULATOR_ENABLED if simulator_enabled is None else simulator_enabled

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info(f"Starting application in {settings.ENV.upper()} mode")

        if watchlist is None:
            init_preferences_schema()
        app.state.watchlist = watchlist or Watchlist(SqlPreferencesStore(SessionLocal))
        app.state.source = source or CoinGeckoSource()
        app.state.store = MarketStore()
        app.state.simulator = None

        # Initial load never raises for upstream failures; it degrades to synthetic data
        result = await load_market(app.state.store, app.state.source)
        app.state.market_synthetic = result.is_synthetic
        log.info(f"Loaded {len(result.assets)} assets (synthetic={result.is_synthetic})")

        if run_simulator:
            app.state.simulator = StreamSimulator(app.state.store).start()
        else:
            log.info("Stream simulator is disabled (SIMULATOR_ENABLED=false)")

        yield

        # Shutdown
        log.info("Shutting down services...")
        if app.state.simulator:
            await app.state.simulator.stop()
        app.state.store.close()
        log.info("Application shutdown complete")

    application = FastAPI(
        title="Market Dashboard Backend",
        description="Live cryptocurrency market data with synthetic fallback and simulated streaming",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.docs_enabled else None,
        redoc_url="/redoc" if settings.docs_enabled else None,
        openapi_url="/openapi.json" if settings.docs_enabled else None,
        debug=settings.debug_enabled,
    )

    application.include_router(assets_router)
    application.include_router(filters_router)
    application.include_router(watchlist_router)
    application.include_router(market_router)
    application.include_router(health_router)
    return application


app = create_app()
