"""Filter-apply edge: validates ranges and keeps gainers/losers exclusive."""

from __future__ import annotations

from typing import Literal, Optional

from marketdash.core.errors import InvalidFilterRange
from marketdash.core.logging import get_logger
from marketdash.schemas.market import FilterConfig, SortBy
from marketdash.services.market_store import MarketStore

log = get_logger("filters")

DEFAULT_FILTERS = FilterConfig()


def _check_range(field: str, minimum: float, maximum: float) -> None:
    if minimum > maximum:
        raise InvalidFilterRange(field, minimum, maximum)


def build_filter_config(
    sort_by: SortBy = DEFAULT_FILTERS.sort_by,
    price_min: float = DEFAULT_FILTERS.price_min,
    price_max: float = DEFAULT_FILTERS.price_max,
    market_cap_min: float = DEFAULT_FILTERS.market_cap_min,
    market_cap_max: float = DEFAULT_FILTERS.market_cap_max,
    show_only_gainers: bool = False,
    show_only_losers: bool = False,
    prefer: Literal["gainers", "losers"] = "gainers",
) -> FilterConfig:
    """Validated ``FilterConfig``.

    When both toggles arrive enabled, ``prefer`` names the one that was
    switched on last; the other is cleared.
    """
    _check_range("price", price_min, price_max)
    _check_range("market_cap", market_cap_min, market_cap_max)

    if show_only_gainers and show_only_losers:
        show_only_gainers = prefer == "gainers"
        show_only_losers = not show_only_gainers

    return FilterConfig(
        sort_by=sort_by,
        price_min=price_min,
        price_max=price_max,
        market_cap_min=market_cap_min,
        market_cap_max=market_cap_max,
        show_only_gainers=show_only_gainers,
        show_only_losers=show_only_losers,
    )


class FilterForm:
    """Editable filter state as presented in the filter dialog."""

    def __init__(self, initial: Optional[FilterConfig] = None):
        self._load(initial or DEFAULT_FILTERS)

    def _load(self, config: FilterConfig) -> None:
        self.sort_by = config.sort_by
        self.price_range = (config.price_min, config.price_max)
        self.market_cap_range = (config.market_cap_min, config.market_cap_max)
        self.show_only_gainers = config.show_only_gainers
        self.show_only_losers = config.show_only_losers

    def set_show_only_gainers(self, enabled: bool) -> None:
        self.show_only_gainers = enabled
        if enabled:
            self.show_only_losers = False

    def set_show_only_losers(self, enabled: bool) -> None:
        self.show_only_losers = enabled
        if enabled:
            self.show_only_gainers = False

    def to_config(self) -> FilterConfig:
        return build_filter_config(
            sort_by=self.sort_by,
            price_min=self.price_range[0],
            price_max=self.price_range[1],
            market_cap_min=self.market_cap_range[0],
            market_cap_max=self.market_cap_range[1],
            show_only_gainers=self.show_only_gainers,
            show_only_losers=self.show_only_losers,
        )

    def apply(self, store: MarketStore) -> FilterConfig:
        config = self.to_config()
        store.set_filters(config)
        log.info(f"Applied filters: {config.model_dump(mode='json')}")
        return config

    def reset(self, store: MarketStore) -> FilterConfig:
        self._load(DEFAULT_FILTERS)
        store.set_filters(DEFAULT_FILTERS)
        return DEFAULT_FILTERS
