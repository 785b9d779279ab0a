"""Filter form, ordering and search tests"""

import pytest

from marketdash.core.errors import InvalidFilterRange
from marketdash.schemas.market import FilterConfig, SortBy
from marketdash.services.filters import DEFAULT_FILTERS, FilterForm, build_filter_config
from marketdash.services.market_store import MarketStore
from marketdash.services.ordering import next_sort_state, search_assets, sort_assets, sort_by_column


@pytest.fixture
def assets(make_asset):
    return [
        make_asset("bitcoin", symbol="btc", current_price=65000.0, market_cap=1.2e12, total_volume=3e10,
                   price_change_pct_24h=1.5, market_cap_rank=1),
        make_asset("ethereum", symbol="eth", current_price=3500.0, market_cap=4.2e11, total_volume=1.8e10,
                   price_change_pct_24h=-0.5, market_cap_rank=2),
        make_asset("tether", symbol="usdt", current_price=1.0, market_cap=9.5e10, total_volume=5.8e10,
                   price_change_pct_24h=0.01, market_cap_rank=3),
    ]


class TestFilterForm:
    """Test the filter-apply edge"""

    def test_defaults(self):
        form = FilterForm()
        config = form.to_config()

        assert config == DEFAULT_FILTERS
        assert config.sort_by == SortBy.MARKET_CAP_DESC
        assert (config.price_min, config.price_max) == (0, 100_000)
        assert (config.market_cap_min, config.market_cap_max) == (0, 1_000_000_000_000)

    def test_gainers_and_losers_are_exclusive(self):
        """Test enabling one toggle clears the other"""
        form = FilterForm()

        form.set_show_only_gainers(True)
        form.set_show_only_losers(True)
        assert (form.show_only_gainers, form.show_only_losers) == (False, True)

        form.set_show_only_gainers(True)
        assert (form.show_only_gainers, form.show_only_losers) == (True, False)

        form.set_show_only_gainers(False)
        assert (form.show_only_gainers, form.show_only_losers) == (False, False)

    def test_apply_updates_store(self):
        store = MarketStore()
        form = FilterForm()
        form.price_range = (10, 20)
        form.sort_by = SortBy.PRICE_ASC

        config = form.apply(store)

        assert store.filters == config
        assert (store.filters.price_min, store.filters.price_max) == (10, 20)
        assert store.filters.sort_by == SortBy.PRICE_ASC

    def test_inverted_range_rejected(self):
        """Test min greater than max is rejected and the store keeps its filters"""
        store = MarketStore()
        form = FilterForm()
        form.market_cap_range = (5, 1)

        with pytest.raises(InvalidFilterRange) as info:
            form.apply(store)

        assert info.value.field == "market_cap"
        assert store.filters == DEFAULT_FILTERS

    def test_reset(self):
        store = MarketStore(FilterConfig(show_only_losers=True, price_max=5))
        form = FilterForm(store.filters)
        assert form.show_only_losers is True

        assert form.reset(store) == DEFAULT_FILTERS
        assert store.filters == DEFAULT_FILTERS
        assert form.show_only_losers is False
        assert form.price_range == (0, 100_000)


class TestBuildFilterConfig:
    def test_both_toggles_resolved_by_preference(self):
        """Test the toggle switched on last wins"""
        gainers = build_filter_config(show_only_gainers=True, show_only_losers=True)
        losers = build_filter_config(show_only_gainers=True, show_only_losers=True, prefer="losers")

        assert (gainers.show_only_gainers, gainers.show_only_losers) == (True, False)
        assert (losers.show_only_gainers, losers.show_only_losers) == (False, True)

    def test_price_range_checked(self):
        with pytest.raises(InvalidFilterRange):
            build_filter_config(price_min=200, price_max=100)

    def test_equal_bounds_allowed(self):
        config = build_filter_config(price_min=100, price_max=100)
        assert config.price_min == config.price_max == 100


class TestOrdering:
    """Test sort presets and table column sorting"""

    @pytest.mark.parametrize(
        "sort_by, expected",
        [
            (SortBy.MARKET_CAP_DESC, ["bitcoin", "ethereum", "tether"]),
            (SortBy.MARKET_CAP_ASC, ["tether", "ethereum", "bitcoin"]),
            (SortBy.PRICE_DESC, ["bitcoin", "ethereum", "tether"]),
            (SortBy.PRICE_ASC, ["tether", "ethereum", "bitcoin"]),
            (SortBy.VOLUME_DESC, ["tether", "bitcoin", "ethereum"]),
            (SortBy.PCT_CHANGE_24H_DESC, ["bitcoin", "tether", "ethereum"]),
            (SortBy.PCT_CHANGE_24H_ASC, ["ethereum", "tether", "bitcoin"]),
        ],
    )
    def test_presets(self, assets, sort_by, expected):
        assert [a.id for a in sort_assets(assets, sort_by)] == expected

    def test_preset_accepts_raw_value(self, assets):
        assert sort_assets(assets, "price_asc")[0].id == "tether"

    def test_column_sort(self, assets):
        assert [a.id for a in sort_by_column(assets, "name")] == ["bitcoin", "ethereum", "tether"]
        assert [a.id for a in sort_by_column(assets, "rank", "desc")] == ["tether", "ethereum", "bitcoin"]
        assert [a.id for a in sort_by_column(assets, "change_24h")] == ["ethereum", "tether", "bitcoin"]

    def test_unknown_column(self, assets):
        with pytest.raises(ValueError):
            sort_by_column(assets, "colour")

    def test_header_click_toggles(self):
        """Test same column flips direction and a new column starts ascending"""
        assert next_sort_state(("rank", "asc"), "rank") == ("rank", "desc")
        assert next_sort_state(("rank", "desc"), "rank") == ("rank", "asc")
        assert next_sort_state(("rank", "desc"), "price") == ("price", "asc")


class TestSearch:
    def test_matches_name_or_symbol(self, assets):
        assert [a.id for a in search_assets(assets, "EUM")] == ["ethereum"]
        assert [a.id for a in search_assets(assets, "usd")] == ["tether"]
        assert [a.id for a in search_assets(assets, "  bit ")] == ["bitcoin"]

    def test_blank_term_returns_all(self, assets):
        assert len(search_assets(assets, "")) == 3
        assert search_assets(assets, "zzz") == []
