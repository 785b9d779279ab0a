"""Synthetic market data used when the upstream API cannot be reached.

Payloads are produced in the upstream's own JSON shape and parsed through
the same model constructors as live data, so a degraded response is
indistinguishable from a live one apart from ``is_synthetic``.
"""

from __future__ import annotations

import random
import time
from typing import Any, Callable, Dict, List, Optional, Protocol

from marketdash.schemas.market import (
    SPARKLINE_POINTS,
    Asset,
    AssetDetail,
    GlobalStats,
    MarketChartSeries,
)

CHART_SAMPLES = 100
CHART_START_PRICE = 65_000.0
CHART_VOLATILITY = 0.02
CHART_SUPPLY = 19_200_000
DAY_MS = 24 * 60 * 60 * 1000
TICKERS_PER_ASSET = 10


class RandomSource(Protocol):
    def random(self) -> float: ...

    def uniform(self, a: float, b: float) -> float: ...


# id -> static market fields plus sparkline (base, spread), ticker spread/volume and description
_CATALOG: Dict[str, Dict[str, Any]] = {
    "bitcoin": {
        "symbol": "btc",
        "name": "Bitcoin",
        "image": "https://assets.coingecko.com/coins/images/1/large/bitcoin.png",
        "current_price": 65432.1,
        "market_cap": 1_258_000_000_000,
        "market_cap_rank": 1,
        "fully_diluted_valuation": 1_375_000_000_000,
        "total_volume": 32_500_000_000,
        "price_change_percentage_1h_in_currency": 0.5,
        "price_change_percentage_24h": 1.8,
        "price_change_percentage_7d_in_currency": -1.2,
        "circulating_supply": 19_200_000,
        "total_supply": 21_000_000,
        "max_supply": 21_000_000,
        "price_change_percentage_30d": 5.3,
        "sparkline": (64_000, 2_000),
        "ticker_spread": 100,
        "ticker_volume": 10_000_000,
        "description": (
            "Bitcoin is the first decentralized cryptocurrency. Bitcoin uses peer-to-peer technology "
            "to operate with no central authority: transaction management and money issuance are "
            "carried out collectively by the network."
        ),
    },
    "ethereum": {
        "symbol": "eth",
        "name": "Ethereum",
        "image": "https://assets.coingecko.com/coins/images/279/large/ethereum.png",
        "current_price": 3521.45,
        "market_cap": 423_000_000_000,
        "market_cap_rank": 2,
        "fully_diluted_valuation": 423_000_000_000,
        "total_volume": 18_700_000_000,
        "price_change_percentage_1h_in_currency": -0.2,
        "price_change_percentage_24h": 1.5,
        "price_change_percentage_7d_in_currency": 3.2,
        "circulating_supply": 120_000_000,
        "total_supply": 120_000_000,
        "max_supply": None,
        "price_change_percentage_30d": 8.7,
        "sparkline": (3_400, 200),
        "ticker_spread": 10,
        "ticker_volume": 5_000_000,
        "description": (
            "Ethereum is a decentralized platform that runs smart contracts: applications that run "
            "exactly as programmed without any possibility of downtime, censorship, fraud or "
            "third-party interference."
        ),
    },
    "tether": {
        "symbol": "usdt",
        "name": "Tether",
        "image": "https://assets.coingecko.com/coins/images/325/large/Tether.png",
        "current_price": 1.0,
        "market_cap": 95_800_000_000,
        "market_cap_rank": 3,
        "fully_diluted_valuation": 95_800_000_000,
        "total_volume": 58_700_000_000,
        "price_change_percentage_1h_in_currency": 0.01,
        "price_change_percentage_24h": 0.1,
        "price_change_percentage_7d_in_currency": 0.05,
        "circulating_supply": 95_800_000_000,
        "total_supply": 95_800_000_000,
        "max_supply": None,
        "price_change_percentage_30d": -0.02,
        "sparkline": (0.995, 0.01),
        "ticker_spread": 0.005,
        "ticker_volume": 20_000_000,
        "description": (
            "Tether (USDT) is a cryptocurrency with a value meant to mirror the value of the U.S. "
            "dollar. The idea was to create a stable cryptocurrency that can be used like digital dollars."
        ),
    },
    "binancecoin": {
        "symbol": "bnb",
        "name": "BNB",
        "image": "https://assets.coingecko.com/coins/images/825/large/bnb-icon2_2x.png",
        "current_price": 612.78,
        "market_cap": 94_500_000_000,
        "market_cap_rank": 4,
        "fully_diluted_valuation": 102_000_000_000,
        "total_volume": 2_100_000_000,
        "price_change_percentage_1h_in_currency": 0.3,
        "price_change_percentage_24h": -0.8,
        "price_change_percentage_7d_in_currency": 2.5,
        "circulating_supply": 154_000_000,
        "total_supply": 154_000_000,
        "max_supply": 200_000_000,
        "price_change_percentage_30d": -1.2,
        "sparkline": (600, 20),
        "ticker_spread": 5,
        "ticker_volume": 1_000_000,
        "description": (
            "Binance Coin (BNB) is an exchange-based token created and issued by the cryptocurrency "
            "exchange Binance. Initially created on the Ethereum blockchain as an ERC-20 token, BNB "
            "now runs on its own blockchain called Binance Chain."
        ),
    },
    "solana": {
        "symbol": "sol",
        "name": "Solana",
        "image": "https://assets.coingecko.com/coins/images/4128/large/solana.png",
        "current_price": 142.35,
        "market_cap": 61_500_000_000,
        "market_cap_rank": 5,
        "fully_diluted_valuation": 78_000_000_000,
        "total_volume": 3_500_000_000,
        "price_change_percentage_1h_in_currency": 0.8,
        "price_change_percentage_24h": 2.5,
        "price_change_percentage_7d_in_currency": 8.7,
        "circulating_supply": 432_000_000,
        "total_supply": 549_000_000,
        "max_supply": None,
        "price_change_percentage_30d": 15.3,
        "sparkline": (135, 15),
        "ticker_spread": 2.5,
        "ticker_volume": 2_000_000,
        "description": (
            "Solana is a high-performance blockchain supporting builders around the world creating "
            "crypto apps that scale today. Solana is known for its fast transaction times and low "
            "transaction fees."
        ),
    },
}

KNOWN_IDS = tuple(_CATALOG)

_MARKET_FIELDS = (
    "symbol",
    "name",
    "image",
    "current_price",
    "market_cap",
    "market_cap_rank",
    "fully_diluted_valuation",
    "total_volume",
    "price_change_percentage_1h_in_currency",
    "price_change_percentage_24h",
    "price_change_percentage_7d_in_currency",
    "circulating_supply",
    "total_supply",
    "max_supply",
)


def _now_ms() -> int:
    return int(time.time() * 1000)


class FallbackDataGenerator:
    """Fixed-schema, randomized-value datasets.

    ``rng`` only needs ``random()`` and ``uniform(a, b)``; tests pass a
    scripted source to get exact outputs.
    """

    def __init__(self, rng: Optional[RandomSource] = None, now_ms: Callable[[], int] = _now_ms):
        self.rng = rng or random.Random()
        self.now_ms = now_ms

    # -------------------------------------------------------------------------
    # Asset list
    # -------------------------------------------------------------------------
    def market_rows(self) -> List[Dict[str, Any]]:
        """Catalog rows in ``/coins/markets`` shape with fresh sparklines."""
        rows = []
        for asset_id, entry in _CATALOG.items():
            base, spread = entry["sparkline"]
            row = {"id": asset_id, **{field: entry[field] for field in _MARKET_FIELDS}}
            row["sparkline_in_7d"] = {
                "price": [base + self.rng.random() * spread for _ in range(SPARKLINE_POINTS)]
            }
            rows.append(row)
        return rows

    def synthetic_asset_list(self) -> List[Asset]:
        return [Asset.from_coingecko(row) for row in self.market_rows()]

    # -------------------------------------------------------------------------
    # Asset detail
    # -------------------------------------------------------------------------
    def synthetic_asset_detail(self, asset_id: str) -> AssetDetail:
        entry = _CATALOG.get(asset_id)
        payload = self._curated_detail(asset_id, entry) if entry else self._generic_detail(asset_id)
        detail = AssetDetail.from_coingecko(payload)
        return detail.model_copy(update={"is_synthetic": True})

    def _tickers(self, base: str, price: float, spread: float, volume: float) -> List[Dict[str, Any]]:
        return [
            {
                "market": {"name": f"Exchange {i + 1}"},
                "base": base,
                "target": "USD",
                "converted_last": {"usd": price + self.rng.uniform(-spread, spread)},
                "converted_volume": {"usd": self.rng.random() * volume},
            }
            for i in range(TICKERS_PER_ASSET)
        ]

    def _curated_detail(self, asset_id: str, entry: Dict[str, Any]) -> Dict[str, Any]:
        price = entry["current_price"]
        return {
            "id": asset_id,
            "symbol": entry["symbol"],
            "name": entry["name"],
            "description": {"en": entry["description"]},
            "image": {"large": entry["image"]},
            "market_cap_rank": entry["market_cap_rank"],
            "market_data": {
                "current_price": {"usd": price},
                "market_cap": {"usd": entry["market_cap"]},
                "total_volume": {"usd": entry["total_volume"]},
                "fully_diluted_valuation": {"usd": entry["fully_diluted_valuation"]},
                "circulating_supply": entry["circulating_supply"],
                "total_supply": entry["total_supply"],
                "max_supply": entry["max_supply"],
                "price_change_percentage_1h_in_currency": {"usd": entry["price_change_percentage_1h_in_currency"]},
                "price_change_percentage_24h": entry["price_change_percentage_24h"],
                "price_change_percentage_7d": entry["price_change_percentage_7d_in_currency"],
                "price_change_percentage_30d": entry["price_change_percentage_30d"],
            },
            "tickers": self._tickers(
                entry["symbol"].upper(), price, entry["ticker_spread"], entry["ticker_volume"]
            ),
        }

    def _generic_detail(self, asset_id: str) -> Dict[str, Any]:
        u = self.rng.uniform
        base = asset_id[:3]
        return {
            "id": asset_id,
            "symbol": base,
            "name": asset_id[:1].upper() + asset_id[1:],
            "description": {"en": f"This is a mock description for {asset_id}."},
            "market_cap_rank": 999,
            "market_data": {
                "current_price": {"usd": u(100, 1_000)},
                "market_cap": {"usd": u(1_000_000_000, 10_000_000_000)},
                "total_volume": {"usd": u(100_000_000, 1_000_000_000)},
                "fully_diluted_valuation": {"usd": u(2_000_000_000, 10_000_000_000)},
                "circulating_supply": u(10_000_000, 100_000_000),
                "total_supply": 100_000_000,
                "max_supply": 100_000_000,
                "price_change_percentage_1h_in_currency": {"usd": u(-1, 1)},
                "price_change_percentage_24h": u(-5, 5),
                "price_change_percentage_7d": u(-10, 10),
                "price_change_percentage_30d": u(-20, 20),
            },
            "tickers": [
                {
                    "market": {"name": f"Exchange {i + 1}"},
                    "base": base.upper(),
                    "target": "USD",
                    "converted_last": {"usd": u(100, 1_000)},
                    "converted_volume": {"usd": self.rng.random() * 1_000_000},
                }
                for i in range(TICKERS_PER_ASSET)
            ],
        }

    # -------------------------------------------------------------------------
    # Chart series
    # -------------------------------------------------------------------------
    def synthetic_chart_series(self, days: float) -> MarketChartSeries:
        """Multiplicative random walk of 100 samples ending now."""
        if days <= 0:
            raise ValueError(f"days must be positive, got {days}")
        now = self.now_ms()
        interval = days * DAY_MS / CHART_SAMPLES
        price = CHART_START_PRICE
        prices: List[List[float]] = []
        for i in range(CHART_SAMPLES):
            if i > 0:
                price *= 1 + self.rng.uniform(-CHART_VOLATILITY, CHART_VOLATILITY)
            prices.append([int(now - (CHART_SAMPLES - 1 - i) * interval), price])

        payload = {
            "prices": prices,
            "market_caps": [[ts, p * CHART_SUPPLY] for ts, p in prices],
            "total_volumes": [[ts, self.rng.random() * 30_000_000_000] for ts, _ in prices],
        }
        series = MarketChartSeries.from_coingecko(payload)
        return series.model_copy(update={"is_synthetic": True})

    # -------------------------------------------------------------------------
    # Global aggregates
    # -------------------------------------------------------------------------
    def synthetic_global_stats(self) -> GlobalStats:
        data = {
            "total_market_cap": {"usd": 2_500_000_000_000},
            "total_volume": {"usd": 150_000_000_000},
            "market_cap_percentage": {"btc": 45, "eth": 18},
            "market_cap_change_percentage_24h_usd": 2.5,
            "active_cryptocurrencies": 10_000,
            "markets": 600,
        }
        return GlobalStats.from_coingecko(data).model_copy(update={"is_synthetic": True})
