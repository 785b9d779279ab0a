"""Shared fixtures"""

import os

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("SIMULATOR_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest  # noqa: E402

from marketdash.schemas.market import SPARKLINE_POINTS, Asset  # noqa: E402


class ScriptedRandom:
    """Random source replaying fixed fractions in [0, 1].

    ``uniform(a, b)`` maps the next fraction onto ``[a, b]`` so tests can
    predict every generated value.
    """

    def __init__(self, fractions=(0.5,)):
        self.fractions = list(fractions)
        self.calls = 0

    def _next(self) -> float:
        value = self.fractions[self.calls % len(self.fractions)]
        self.calls += 1
        return value

    def random(self) -> float:
        return self._next()

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self._next()


@pytest.fixture
def scripted_rng():
    """Factory for scripted random sources"""
    return ScriptedRandom


@pytest.fixture
def make_asset():
    """Factory for assets with a flat 168-sample sparkline"""

    def _make(asset_id: str = "bitcoin", **overrides) -> Asset:
        price = overrides.pop("current_price", 100.0)
        fields = {
            "id": asset_id,
            "symbol": asset_id[:3],
            "name": asset_id.capitalize(),
            "current_price": price,
            "market_cap": 1_000_000.0,
            "total_volume": 50_000.0,
            "price_change_pct_1h": 0.1,
            "price_change_pct_24h": 1.0,
            "price_change_pct_7d": -2.0,
            "circulating_supply": 10_000.0,
            "market_cap_rank": 1,
            "sparkline_7d": tuple(float(i) for i in range(SPARKLINE_POINTS)),
        }
        fields.update(overrides)
        return Asset(**fields)

    return _make
