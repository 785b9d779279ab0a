"""Health routes - Liveness and store readiness."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response

from marketdash.api.deps import get_store
from marketdash.schemas.api import HealthResponse
from marketdash.services.market_store import MarketStore

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
def health(request: Request, store: MarketStore = Depends(get_store)):
    """Liveness check with store size and simulator state."""
    simulator = getattr(request.app.state, "simulator", None)
    return HealthResponse(
        status="healthy",
        assets=store.size,
        loading=store.is_loading,
        simulator_running=bool(simulator and simulator.running),
    )


@router.get("/ready")
def readiness(response: Response, store: MarketStore = Depends(get_store)):
    """
    Readiness probe - ready once the store holds a collection.

    Returns 503 while loading or before the first load completes.
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    if store.is_loading or store.size == 0:
        response.status_code = 503
        return {"status": "not_ready", "timestamp": timestamp}
    return {"status": "ready", "timestamp": timestamp}
