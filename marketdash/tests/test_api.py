"""API endpoint tests"""

from typing import List

import pytest
from fastapi.testclient import TestClient

from marketdash.ingestion.base import MarketDataSource
from marketdash.ingestion.fallback import FallbackDataGenerator
from marketdash.main import create_app
from marketdash.schemas.api import FALLBACK_NOTICE
from marketdash.schemas.market import AssetListResult
from marketdash.services.watchlist import InMemoryPreferences, Watchlist


class FakeSource(MarketDataSource):
    """Fixed asset list; detail, chart and global data come from the generator."""

    name = "fake"

    def __init__(self, assets, synthetic=False):
        self.assets = assets
        self.synthetic = synthetic
        self.generator = FallbackDataGenerator()
        self.loads = 0

    async def fetch_assets(self) -> AssetListResult:
        self.loads += 1
        return AssetListResult(assets=self.assets, is_synthetic=self.synthetic)

    async def fetch_assets_by_ids(self, ids: List[str]) -> AssetListResult:
        return AssetListResult(assets=[a for a in self.assets if a.id in ids])

    async def fetch_asset_detail(self, asset_id):
        return self.generator.synthetic_asset_detail(asset_id)

    async def fetch_market_chart(self, asset_id, days):
        return self.generator.synthetic_chart_series(days)

    async def fetch_global_stats(self):
        return self.generator.synthetic_global_stats()


@pytest.fixture
def source(make_asset):
    return FakeSource(
        [
            make_asset("bitcoin", symbol="btc", current_price=150.0, market_cap=3e6, price_change_pct_24h=2.0),
            make_asset("ethereum", symbol="eth", current_price=90.0, market_cap=2e6, price_change_pct_24h=-1.0,
                       market_cap_rank=2),
            make_asset("solana", symbol="sol", current_price=210.0, market_cap=1e6, price_change_pct_24h=0.5,
                       market_cap_rank=3),
        ]
    )


class TestAPI:
    """Test API endpoints"""

    @pytest.fixture
    def client(self, source):
        """Create test client with the lifespan running"""
        app = create_app(source=source, watchlist=Watchlist(InMemoryPreferences()), simulator_enabled=False)
        with TestClient(app) as client:
            yield client

    def test_health_check(self, client):
        """Test health check endpoint"""
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["assets"] == 3
        assert body["loading"] is False
        assert body["simulator_running"] is False

    def test_readiness(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_list_assets_default_order(self, client):
        """Test rows come back in market cap order with live data"""
        response = client.get("/assets")
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 3
        assert [row["id"] for row in body["data"]] == ["bitcoin", "ethereum", "solana"]
        assert body["is_synthetic"] is False
        assert body["notice"] is None
        assert body["filters"]["sort_by"] == "market_cap_desc"

    def test_list_assets_search_column_and_limit(self, client):
        """Test search, table column sort and limit"""
        search = client.get("/assets?search=SOL").json()
        assert [row["id"] for row in search["data"]] == ["solana"]

        by_price = client.get("/assets?column=price&direction=asc").json()
        assert [row["id"] for row in by_price["data"]] == ["ethereum", "bitcoin", "solana"]

        limited = client.get("/assets?limit=1").json()
        assert limited["count"] == 1

    def test_get_asset(self, client):
        response = client.get("/assets/bitcoin")
        assert response.status_code == 200
        assert len(response.json()["sparkline_7d"]) == 168

        assert client.get("/assets/ghost").status_code == 404

    def test_apply_filters(self, client):
        """Test applied filters narrow the asset list"""
        response = client.put("/filters", json={"show_only_losers": True, "sort_by": "price_asc"})
        assert response.status_code == 200
        assert response.json()["show_only_losers"] is True

        rows = client.get("/assets").json()["data"]
        assert [row["id"] for row in rows] == ["ethereum"]

    def test_filters_prefer_resolves_both_toggles(self, client):
        response = client.put(
            "/filters", json={"show_only_gainers": True, "show_only_losers": True, "prefer": "losers"}
        )
        body = response.json()
        assert (body["show_only_gainers"], body["show_only_losers"]) == (False, True)

    def test_invalid_filter_range(self, client):
        """Test an inverted range is rejected and the filters are unchanged"""
        response = client.put("/filters", json={"price_min": 500, "price_max": 100})
        assert response.status_code == 422
        assert client.get("/filters").json()["price_min"] == 0

    def test_reset_filters(self, client):
        client.put("/filters", json={"price_min": 100, "price_max": 200})
        assert client.get("/assets").json()["count"] == 1

        response = client.post("/filters/reset")
        assert response.status_code == 200
        assert response.json()["price_max"] == 100_000
        assert client.get("/assets").json()["count"] == 3

    def test_watchlist_toggle(self, client):
        """Test adding, reading and removing watchlist entries"""
        added = client.post("/watchlist/bitcoin").json()
        assert added == {"id": "bitcoin", "added": True, "ids": ["bitcoin"]}

        listing = client.get("/watchlist").json()
        assert listing["ids"] == ["bitcoin"]
        assert [row["id"] for row in listing["data"]] == ["bitcoin"]

        removed = client.post("/watchlist/bitcoin").json()
        assert removed["added"] is False
        assert removed["ids"] == []

        client.post("/watchlist/solana")
        assert client.delete("/watchlist/solana").json()["ids"] == []
        assert client.delete("/watchlist/solana").status_code == 200

    def test_price_chart(self, client):
        """Test chart layout for a synthetic series"""
        response = client.get("/assets/bitcoin/chart?timeframe=24h&width=800")
        assert response.status_code == 200
        body = response.json()
        assert body["is_synthetic"] is True
        assert body["notice"] == FALLBACK_NOTICE
        assert body["timeframe"] == "24h"
        assert len(body["points"]) == 100
        assert len(body["price_gridlines"]) == 6
        assert body["points"][0]["x"] == 60

    def test_price_chart_rejects_unknown_timeframe(self, client):
        assert client.get("/assets/bitcoin/chart?timeframe=5y").status_code == 422

    def test_sparkline(self, client):
        response = client.get("/assets/ethereum/sparkline")
        assert response.status_code == 200
        body = response.json()
        assert body["trend"] == "down"
        assert len(body["points"]) == 168

        assert client.get("/assets/ghost/sparkline").status_code == 404

    def test_detail_and_global(self, client):
        detail = client.get("/assets/dogecoin/detail").json()
        assert detail["is_synthetic"] is True
        assert detail["name"] == "Dogecoin"

        stats = client.get("/global").json()
        assert stats["is_synthetic"] is True
        assert stats["markets"] == 600

    def test_reload(self, client, source):
        response = client.post("/assets/reload")
        assert response.status_code == 200
        assert response.json()["assets_loaded"] == 3
        assert source.loads == 2

    def test_invalid_endpoint(self, client):
        """Test invalid endpoint returns 404"""
        response = client.get("/invalid")
        assert response.status_code == 404


class TestSyntheticLoad:
    """Test the fallback notice when the initial load is synthetic"""

    def test_notice_on_synthetic_load(self, source):
        source.synthetic = True
        app = create_app(source=source, watchlist=Watchlist(InMemoryPreferences()), simulator_enabled=False)

        with TestClient(app) as client:
            body = client.get("/assets").json()

        assert body["is_synthetic"] is True
        assert body["notice"] == FALLBACK_NOTICE


class TestSimulatorLifecycle:
    def test_simulator_started_and_stopped(self, source):
        """Test the simulator runs while the app is up and is cancelled on shutdown"""
        app = create_app(source=source, watchlist=Watchlist(InMemoryPreferences()), simulator_enabled=True)

        with TestClient(app) as client:
            assert client.get("/health").json()["simulator_running"] is True
            simulator = app.state.simulator

        assert simulator.running is False
        assert simulator._task.done() is True
        assert app.state.store.closed is True
