"""Watchlist membership over an injected preferences capability."""

from __future__ import annotations

import json
from typing import Callable, Dict, List, Optional, Protocol

from sqlalchemy.orm import Session

from marketdash.core.config import settings
from marketdash.core.logging import get_logger
from marketdash.models.preference import Preference

log = get_logger("watchlist")


class PreferencesStore(Protocol):
    """String-keyed get/set, last write wins."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryPreferences:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class SqlPreferencesStore:
    """Preferences persisted in the ``preferences`` table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            row = db.get(Preference, key)
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            db.merge(Preference(key=key, value=value))
            db.commit()


class Watchlist:
    """Ordered, duplicate-free set of asset ids stored as a JSON array."""

    def __init__(self, prefs: PreferencesStore, key: Optional[str] = None):
        self.prefs = prefs
        self.key = key or settings.WATCHLIST_KEY

    def ids(self) -> List[str]:
        raw = self.prefs.get(self.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            log.warning(f"Stored watchlist under '{self.key}' is not valid JSON; treating as empty")
            return []
        if not isinstance(data, list):
            log.warning(f"Stored watchlist under '{self.key}' is not a list; treating as empty")
            return []
        return list(dict.fromkeys(item for item in data if isinstance(item, str)))

    def _save(self, ids: List[str]) -> None:
        self.prefs.set(self.key, json.dumps(ids))

    def contains(self, asset_id: str) -> bool:
        return asset_id in self.ids()

    def add(self, asset_id: str) -> None:
        ids = self.ids()
        if asset_id not in ids:
            ids.append(asset_id)
            self._save(ids)

    def remove(self, asset_id: str) -> None:
        ids = self.ids()
        if asset_id in ids:
            ids.remove(asset_id)
            self._save(ids)

    def toggle(self, asset_id: str) -> bool:
        """Flip membership; True when the id was added."""
        if self.contains(asset_id):
            self.remove(asset_id)
            log.info(f"Removed {asset_id} from watchlist")
            return False
        self.add(asset_id)
        log.info(f"Added {asset_id} to watchlist")
        return True
