"""Market data models shared by the fetch layer, the store and the charts."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# 7 days x 24 hourly samples
SPARKLINE_POINTS = 168


class SortBy(str, Enum):
    MARKET_CAP_DESC = "market_cap_desc"
    MARKET_CAP_ASC = "market_cap_asc"
    PRICE_DESC = "price_desc"
    PRICE_ASC = "price_asc"
    VOLUME_DESC = "volume_desc"
    PCT_CHANGE_24H_DESC = "percent_change_24h_desc"
    PCT_CHANGE_24H_ASC = "percent_change_24h_asc"


def _number(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    return float(value)


def _usd(block: Any, currency: str = "usd") -> Optional[float]:
    """CoinGecko nests per-currency values as ``{"usd": 1.0}``."""
    if isinstance(block, dict):
        value = block.get(currency)
        return None if value is None else float(value)
    if block is None:
        return None
    return float(block)


def normalize_sparkline(prices: List[float], fallback_price: float) -> Tuple[float, ...]:
    """Force an upstream sparkline to exactly ``SPARKLINE_POINTS`` samples.

    Keeps the most recent samples, left-pads a short series with its first
    value and fills an empty one with ``fallback_price``.
    """
    values = [float(p) for p in prices if p is not None]
    if not values:
        return (float(fallback_price),) * SPARKLINE_POINTS
    if len(values) >= SPARKLINE_POINTS:
        return tuple(values[-SPARKLINE_POINTS:])
    return (values[0],) * (SPARKLINE_POINTS - len(values)) + tuple(values)


class Asset(BaseModel):
    """One tracked instrument. Instances are immutable; updates produce copies."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    symbol: str
    name: str
    image_url: str = ""
    current_price: float = Field(ge=0)
    market_cap: float = 0.0
    fully_diluted_valuation: Optional[float] = None
    total_volume: float = 0.0
    price_change_pct_1h: float = 0.0
    price_change_pct_24h: float = 0.0
    price_change_pct_7d: float = 0.0
    circulating_supply: float = 0.0
    total_supply: Optional[float] = None
    max_supply: Optional[float] = None
    market_cap_rank: int = Field(ge=1)
    sparkline_7d: Tuple[float, ...]

    @field_validator("sparkline_7d")
    @classmethod
    def _fixed_window(cls, value: Tuple[float, ...]) -> Tuple[float, ...]:
        if len(value) != SPARKLINE_POINTS:
            raise ValueError(f"sparkline_7d must have {SPARKLINE_POINTS} samples, got {len(value)}")
        return value

    @classmethod
    def from_coingecko(cls, item: Dict[str, Any]) -> "Asset":
        """Build an asset from one ``/coins/markets`` row."""
        price = _number(item.get("current_price"))
        change_24h = item.get("price_change_percentage_24h_in_currency")
        if change_24h is None:
            change_24h = item.get("price_change_percentage_24h")
        sparkline = (item.get("sparkline_in_7d") or {}).get("price") or []
        return cls(
            id=item["id"],
            symbol=item.get("symbol") or "",
            name=item.get("name") or item["id"],
            image_url=item.get("image") or "",
            current_price=price,
            market_cap=_number(item.get("market_cap")),
            fully_diluted_valuation=item.get("fully_diluted_valuation"),
            total_volume=_number(item.get("total_volume")),
            price_change_pct_1h=_number(item.get("price_change_percentage_1h_in_currency")),
            price_change_pct_24h=_number(change_24h),
            price_change_pct_7d=_number(item.get("price_change_percentage_7d_in_currency")),
            circulating_supply=_number(item.get("circulating_supply")),
            total_supply=item.get("total_supply"),
            max_supply=item.get("max_supply"),
            market_cap_rank=item["market_cap_rank"],
            sparkline_7d=normalize_sparkline(sparkline, price),
        )


# Asset fields that may legitimately hold None
NULLABLE_ASSET_FIELDS = frozenset({"fully_diluted_valuation", "total_supply", "max_supply"})


class AssetPatch(BaseModel):
    """Partial update for one asset.

    Only fields explicitly set are merged. ``sparkline_7d`` is replaced
    wholesale and must keep the fixed window width.
    """

    model_config = ConfigDict(extra="forbid")

    id: str
    symbol: Optional[str] = None
    name: Optional[str] = None
    image_url: Optional[str] = None
    current_price: Optional[float] = Field(default=None, ge=0)
    market_cap: Optional[float] = None
    fully_diluted_valuation: Optional[float] = None
    total_volume: Optional[float] = None
    price_change_pct_1h: Optional[float] = None
    price_change_pct_24h: Optional[float] = None
    price_change_pct_7d: Optional[float] = None
    circulating_supply: Optional[float] = None
    total_supply: Optional[float] = None
    max_supply: Optional[float] = None
    market_cap_rank: Optional[int] = Field(default=None, ge=1)
    sparkline_7d: Optional[Tuple[float, ...]] = None

    @field_validator("sparkline_7d")
    @classmethod
    def _fixed_window(cls, value: Optional[Tuple[float, ...]]) -> Optional[Tuple[float, ...]]:
        if value is not None and len(value) != SPARKLINE_POINTS:
            raise ValueError(f"sparkline_7d must have {SPARKLINE_POINTS} samples, got {len(value)}")
        return value

    @model_validator(mode="after")
    def _no_null_required_fields(self) -> "AssetPatch":
        nulled = sorted(
            name for name in self.model_fields_set - NULLABLE_ASSET_FIELDS if getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"fields cannot be set to null: {', '.join(nulled)}")
        return self

    def changes(self) -> Dict[str, Any]:
        """Fields to merge, never including ``id``."""
        return self.model_dump(exclude_unset=True, exclude={"id"})


class FilterConfig(BaseModel):
    """Active filter/sort state. Ranges are validated by the filter-apply edge."""

    model_config = ConfigDict(frozen=True)

    sort_by: SortBy = SortBy.MARKET_CAP_DESC
    price_min: float = 0
    price_max: float = 100_000
    market_cap_min: float = 0
    market_cap_max: float = 1_000_000_000_000
    show_only_gainers: bool = False
    show_only_losers: bool = False


class AssetListResult(BaseModel):
    assets: List[Asset] = Field(default_factory=list)
    is_synthetic: bool = False


class Ticker(BaseModel):
    market_name: str
    base: str
    target: str
    last_price_usd: Optional[float] = None
    volume_usd: Optional[float] = None


class AssetDetail(BaseModel):
    id: str
    symbol: str
    name: str
    description: str = ""
    image_url: str = ""
    market_cap_rank: Optional[int] = None
    current_price: Optional[float] = None
    market_cap: Optional[float] = None
    total_volume: Optional[float] = None
    fully_diluted_valuation: Optional[float] = None
    circulating_supply: Optional[float] = None
    total_supply: Optional[float] = None
    max_supply: Optional[float] = None
    price_change_pct_1h: Optional[float] = None
    price_change_pct_24h: Optional[float] = None
    price_change_pct_7d: Optional[float] = None
    price_change_pct_30d: Optional[float] = None
    tickers: List[Ticker] = Field(default_factory=list)
    is_synthetic: bool = False

    @classmethod
    def from_coingecko(cls, payload: Dict[str, Any], currency: str = "usd") -> "AssetDetail":
        """Build a detail record from a ``/coins/{id}`` payload."""
        market = payload.get("market_data") or {}
        image = payload.get("image")
        if isinstance(image, dict):
            image = image.get("large") or image.get("small") or ""
        tickers = [
            Ticker(
                market_name=(t.get("market") or {}).get("name") or "",
                base=t.get("base") or "",
                target=t.get("target") or "",
                last_price_usd=_usd(t.get("converted_last"), currency),
                volume_usd=_usd(t.get("converted_volume"), currency),
            )
            for t in payload.get("tickers") or []
        ]
        return cls(
            id=payload["id"],
            symbol=payload.get("symbol") or "",
            name=payload.get("name") or payload["id"],
            description=(payload.get("description") or {}).get("en") or "",
            image_url=image or "",
            market_cap_rank=payload.get("market_cap_rank"),
            current_price=_usd(market.get("current_price"), currency),
            market_cap=_usd(market.get("market_cap"), currency),
            total_volume=_usd(market.get("total_volume"), currency),
            fully_diluted_valuation=_usd(market.get("fully_diluted_valuation"), currency),
            circulating_supply=market.get("circulating_supply"),
            total_supply=market.get("total_supply"),
            max_supply=market.get("max_supply"),
            price_change_pct_1h=_usd(market.get("price_change_percentage_1h_in_currency"), currency),
            price_change_pct_24h=market.get("price_change_percentage_24h"),
            price_change_pct_7d=market.get("price_change_percentage_7d"),
            price_change_pct_30d=market.get("price_change_percentage_30d"),
            tickers=tickers,
        )


class MarketChartSeries(BaseModel):
    """``(timestamp_ms, value)`` pairs, strictly increasing in timestamp."""

    prices: List[Tuple[int, float]] = Field(default_factory=list)
    market_caps: List[Tuple[int, float]] = Field(default_factory=list)
    total_volumes: List[Tuple[int, float]] = Field(default_factory=list)
    is_synthetic: bool = False

    @field_validator("prices")
    @classmethod
    def _increasing(cls, value: List[Tuple[int, float]]) -> List[Tuple[int, float]]:
        for (prev, _), (curr, _) in zip(value, value[1:]):
            if curr <= prev:
                raise ValueError("price timestamps must be strictly increasing")
        return value

    @property
    def timestamps(self) -> List[int]:
        return [ts for ts, _ in self.prices]

    @property
    def values(self) -> List[float]:
        return [price for _, price in self.prices]

    @classmethod
    def from_coingecko(cls, payload: Dict[str, Any]) -> "MarketChartSeries":
        def pairs(key: str) -> List[Tuple[int, float]]:
            return [(int(ts), float(v)) for ts, v in payload.get(key) or [] if v is not None]

        return cls(
            prices=pairs("prices"),
            market_caps=pairs("market_caps"),
            total_volumes=pairs("total_volumes"),
        )


class GlobalStats(BaseModel):
    total_market_cap: float
    total_volume: float
    market_cap_percentage: Dict[str, float] = Field(default_factory=dict)
    market_cap_change_pct_24h: float = 0.0
    active_cryptocurrencies: int = 0
    markets: int = 0
    is_synthetic: bool = False

    @classmethod
    def from_coingecko(cls, data: Dict[str, Any], currency: str = "usd") -> "GlobalStats":
        """Build from the ``data`` object of ``/global``."""
        return cls(
            total_market_cap=_usd(data["total_market_cap"], currency),
            total_volume=_usd(data["total_volume"], currency),
            market_cap_percentage=data.get("market_cap_percentage") or {},
            market_cap_change_pct_24h=_number(data.get(f"market_cap_change_percentage_24h_{currency}")),
            active_cryptocurrencies=int(data.get("active_cryptocurrencies") or 0),
            markets=int(data.get("markets") or 0),
        )
