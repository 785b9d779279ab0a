"""Watchlist tests over in-memory and SQL preferences"""

import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from marketdash.models import Base
from marketdash.services.watchlist import InMemoryPreferences, SqlPreferencesStore, Watchlist


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


class TestWatchlist:
    """Test membership operations"""

    def test_toggle_adds_then_removes(self):
        watchlist = Watchlist(InMemoryPreferences(), key="watchlist")

        assert watchlist.toggle("bitcoin") is True
        assert watchlist.contains("bitcoin")
        assert watchlist.toggle("bitcoin") is False
        assert watchlist.ids() == []

    def test_order_preserved_without_duplicates(self):
        watchlist = Watchlist(InMemoryPreferences(), key="watchlist")

        for asset_id in ("solana", "bitcoin", "solana", "ethereum"):
            watchlist.add(asset_id)

        assert watchlist.ids() == ["solana", "bitcoin", "ethereum"]

    def test_stored_as_json_array(self):
        prefs = InMemoryPreferences()
        watchlist = Watchlist(prefs, key="watchlist")

        watchlist.add("bitcoin")

        assert json.loads(prefs.get("watchlist")) == ["bitcoin"]

    def test_remove_missing_is_noop(self):
        prefs = InMemoryPreferences({"watchlist": '["bitcoin"]'})
        watchlist = Watchlist(prefs, key="watchlist")

        watchlist.remove("ethereum")

        assert watchlist.ids() == ["bitcoin"]

    @pytest.mark.parametrize("raw", ["not json", '{"a": 1}', "42", '[{"id": 1}]'])
    def test_corrupt_value_treated_as_empty(self, raw):
        """Test unreadable stored values never raise"""
        watchlist = Watchlist(InMemoryPreferences({"watchlist": raw}), key="watchlist")

        assert watchlist.ids() == []
        assert watchlist.toggle("bitcoin") is True
        assert watchlist.ids() == ["bitcoin"]

    def test_stored_duplicates_are_collapsed(self):
        watchlist = Watchlist(InMemoryPreferences({"watchlist": '["a", "b", "a"]'}), key="watchlist")

        assert watchlist.ids() == ["a", "b"]


class TestSqlPreferencesStore:
    """Test the preferences table adapter"""

    def test_missing_key(self, session_factory):
        assert SqlPreferencesStore(session_factory).get("watchlist") is None

    def test_last_write_wins(self, session_factory):
        prefs = SqlPreferencesStore(session_factory)

        prefs.set("watchlist", '["bitcoin"]')
        prefs.set("watchlist", '["ethereum"]')

        assert prefs.get("watchlist") == '["ethereum"]'

    def test_watchlist_persists_across_instances(self, session_factory):
        """Test membership survives a new watchlist over the same table"""
        Watchlist(SqlPreferencesStore(session_factory), key="watchlist").toggle("solana")

        reopened = Watchlist(SqlPreferencesStore(session_factory), key="watchlist")

        assert reopened.ids() == ["solana"]
