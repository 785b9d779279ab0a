"""API dependencies backed by objects created in the app lifespan."""

from fastapi import Request

from marketdash.ingestion.base import MarketDataSource
from marketdash.services.market_store import MarketStore
from marketdash.services.watchlist import Watchlist


def get_store(request: Request) -> MarketStore:
    return request.app.state.store


def get_source(request: Request) -> MarketDataSource:
    return request.app.state.source


def get_watchlist(request: Request) -> Watchlist:
    return request.app.state.watchlist
