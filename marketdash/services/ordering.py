"""Presentation ordering and text search over store selections."""

from __future__ import annotations

from typing import Callable, Dict, List, Literal, Sequence, Tuple

from marketdash.schemas.market import Asset, SortBy

SortColumn = Literal[
    "rank",
    "name",
    "price",
    "change_1h",
    "change_24h",
    "change_7d",
    "market_cap",
    "volume_24h",
    "circulating_supply",
]
SortDirection = Literal["asc", "desc"]

# preset -> (key, descending)
_PRESETS: Dict[SortBy, Tuple[Callable[[Asset], float], bool]] = {
    SortBy.MARKET_CAP_DESC: (lambda a: a.market_cap, True),
    SortBy.MARKET_CAP_ASC: (lambda a: a.market_cap, False),
    SortBy.PRICE_DESC: (lambda a: a.current_price, True),
    SortBy.PRICE_ASC: (lambda a: a.current_price, False),
    SortBy.VOLUME_DESC: (lambda a: a.total_volume, True),
    SortBy.PCT_CHANGE_24H_DESC: (lambda a: a.price_change_pct_24h, True),
    SortBy.PCT_CHANGE_24H_ASC: (lambda a: a.price_change_pct_24h, False),
}

_COLUMNS: Dict[str, Callable[[Asset], object]] = {
    "rank": lambda a: a.market_cap_rank,
    "name": lambda a: a.name.lower(),
    "price": lambda a: a.current_price,
    "change_1h": lambda a: a.price_change_pct_1h,
    "change_24h": lambda a: a.price_change_pct_24h,
    "change_7d": lambda a: a.price_change_pct_7d,
    "market_cap": lambda a: a.market_cap,
    "volume_24h": lambda a: a.total_volume,
    "circulating_supply": lambda a: a.circulating_supply,
}


def sort_assets(assets: Sequence[Asset], sort_by: SortBy) -> List[Asset]:
    key, descending = _PRESETS[SortBy(sort_by)]
    return sorted(assets, key=key, reverse=descending)


def sort_by_column(assets: Sequence[Asset], column: SortColumn, direction: SortDirection = "asc") -> List[Asset]:
    if column not in _COLUMNS:
        raise ValueError(f"Unknown sort column: {column}")
    return sorted(assets, key=_COLUMNS[column], reverse=direction == "desc")


def next_sort_state(
    current: Tuple[SortColumn, SortDirection], clicked: SortColumn
) -> Tuple[SortColumn, SortDirection]:
    """Header click: same column flips direction, a new column starts ascending."""
    column, direction = current
    if clicked == column:
        return column, "desc" if direction == "asc" else "asc"
    return clicked, "asc"


def search_assets(assets: Sequence[Asset], term: str) -> List[Asset]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(assets)
    return [a for a in assets if needle in a.name.lower() or needle in a.symbol.lower()]
