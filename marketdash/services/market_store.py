"""In-memory market store: tracked assets plus the active filter state.

All mutations run under a single writer lock and publish a new immutable
state by reference swap. Readers grab that reference once, so they always
see a whole batch or none of it.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple, Union

from marketdash.core.logging import get_logger
from marketdash.schemas.market import Asset, AssetPatch, FilterConfig

log = get_logger("market_store")

PatchLike = Union[AssetPatch, Mapping[str, Any]]


class _State(NamedTuple):
    assets: Tuple[Asset, ...]
    index: Dict[str, int]  # asset id -> position in ``assets``
    filters: FilterConfig
    version: int


def _build_index(assets: Tuple[Asset, ...]) -> Dict[str, int]:
    return {asset.id: pos for pos, asset in enumerate(assets)}


def _is_visible(asset: Asset, filters: FilterConfig) -> bool:
    if not filters.price_min <= asset.current_price <= filters.price_max:
        return False
    if not filters.market_cap_min <= asset.market_cap <= filters.market_cap_max:
        return False
    if filters.show_only_gainers and asset.price_change_pct_24h < 0:
        return False
    if filters.show_only_losers and asset.price_change_pct_24h >= 0:
        return False
    return True


class MarketStore:
    """Canonical collection of tracked assets.

    Usage:
        store = MarketStore()
        store.replace_all(result.assets)
        store.patch_many([AssetPatch(id="bitcoin", current_price=65000.0)])
        rows = store.select_visible()
    """

    def __init__(self, filters: Optional[FilterConfig] = None):
        self._lock = threading.Lock()
        self._state = _State((), {}, filters or FilterConfig(), 0)
        self._loading = False
        self._closed = False

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------
    def replace_all(self, assets: Iterable[Asset]) -> None:
        """Replace the whole collection. Later duplicates of an id are dropped."""
        unique: List[Asset] = []
        seen = set()
        for asset in assets:
            if asset.id in seen:
                log.warning(f"Dropping duplicate asset id {asset.id}")
                continue
            seen.add(asset.id)
            unique.append(asset)

        with self._lock:
            if self._closed:
                return
            frozen = tuple(unique)
            state = self._state
            self._state = _State(frozen, _build_index(frozen), state.filters, state.version + 1)
        log.info(f"Market store replaced with {len(unique)} assets")

    def patch_many(self, updates: Iterable[PatchLike]) -> int:
        """Shallow-merge a batch of partial updates, keyed by id.

        Updates for unknown ids are ignored. The batch is validated up front
        and published in one swap; returns the number of assets patched.
        """
        patches = [u if isinstance(u, AssetPatch) else AssetPatch.model_validate(u) for u in updates]

        with self._lock:
            if self._closed:
                return 0
            state = self._state
            assets = list(state.assets)
            patched = 0
            for patch in patches:
                pos = state.index.get(patch.id)
                if pos is None:
                    log.debug(f"Ignoring patch for unknown asset {patch.id}")
                    continue
                changes = patch.changes()
                if changes:
                    assets[pos] = assets[pos].model_copy(update=changes)
                patched += 1
            if patched:
                self._state = _State(tuple(assets), state.index, state.filters, state.version + 1)
        return patched

    def set_filters(self, filters: FilterConfig) -> None:
        """Replace the filter state. Ranges are not validated here."""
        with self._lock:
            if self._closed:
                return
            state = self._state
            self._state = state._replace(filters=filters, version=state.version + 1)

    def set_loading(self, loading: bool) -> None:
        self._loading = loading

    def close(self) -> None:
        """Tear the store down; later mutations become no-ops."""
        with self._lock:
            self._closed = True

    # -------------------------------------------------------------------------
    # Selectors
    # -------------------------------------------------------------------------
    def select_visible(self) -> List[Asset]:
        """Assets passing the active price, market cap and gainers/losers filters."""
        state = self._state
        return [asset for asset in state.assets if _is_visible(asset, state.filters)]

    def select_by_id(self, asset_id: str) -> Optional[Asset]:
        state = self._state
        pos = state.index.get(asset_id)
        return None if pos is None else state.assets[pos]

    def snapshot(self) -> Tuple[Asset, ...]:
        return self._state.assets

    @property
    def filters(self) -> FilterConfig:
        return self._state.filters

    @property
    def version(self) -> int:
        return self._state.version

    @property
    def size(self) -> int:
        return len(self._state.assets)

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def closed(self) -> bool:
        return self._closed
