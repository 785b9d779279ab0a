"""Filter routes - Read, apply and reset the store's filter state."""

from fastapi import APIRouter, Depends, HTTPException

from marketdash.api.deps import get_store
from marketdash.core.errors import InvalidFilterRange
from marketdash.core.logging import get_logger
from marketdash.schemas.api import FilterUpdate
from marketdash.schemas.market import FilterConfig
from marketdash.services.filters import DEFAULT_FILTERS, build_filter_config
from marketdash.services.market_store import MarketStore

log = get_logger("api.filters")

router = APIRouter(prefix="/filters", tags=["filters"])


@router.get("", response_model=FilterConfig)
def get_filters(store: MarketStore = Depends(get_store)):
    """Active filter and sort configuration."""
    return store.filters


@router.put("", response_model=FilterConfig)
def apply_filters(update: FilterUpdate, store: MarketStore = Depends(get_store)):
    """
    Replace the filter state.

    Ranges with min greater than max are rejected with 422. Gainers and
    losers are mutually exclusive; ``prefer`` decides when both are sent.
    """
    try:
        config = build_filter_config(**update.model_dump())
    except InvalidFilterRange as exc:
        log.warning(f"Rejected filter update: {exc}")
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    store.set_filters(config)
    return config


@router.post("/reset", response_model=FilterConfig)
def reset_filters(store: MarketStore = Depends(get_store)):
    """Restore the default filters."""
    store.set_filters(DEFAULT_FILTERS)
    return DEFAULT_FILTERS
