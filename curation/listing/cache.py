from __future__ import annotations

import time
from typing import Any, Awaitable, Callable

from ..catalog.models import CuratedItem, Municipality, ScopeFilters
from ..signals import Invalidation
from .config import DEFAULT_LISTING_CONFIG


class SnapshotCache:
    """Fetched collections keyed by their scope filters.

    The list pipeline re-runs over a cached snapshot on every query; the
    gateway is only hit again after the TTL or an invalidation.
    """

    def __init__(self, ttl: float = DEFAULT_LISTING_CONFIG.snapshot_ttl) -> None:
        self._ttl = ttl
        self._entries: dict[ScopeFilters, dict[str, Any]] = {}
        self._municipalities: dict[str, Any] | None = None
        self._hits = 0
        self._misses = 0

    def get(self, filters: ScopeFilters) -> list[CuratedItem] | None:
        entry = self._entries.get(filters)
        if entry and time.time() - entry["created_at"] < self._ttl:
            self._hits += 1
            return list(entry["value"])
        if entry:
            del self._entries[filters]
        self._misses += 1
        return None

    def set(self, filters: ScopeFilters, items: list[CuratedItem]) -> None:
        self._entries[filters] = {"value": list(items), "created_at": time.time()}

    async def get_or_fetch(
        self,
        filters: ScopeFilters,
        fetch: Callable[[ScopeFilters], Awaitable[list[CuratedItem]]],
    ) -> list[CuratedItem]:
        cached = self.get(filters)
        if cached is not None:
            return cached
        items = await fetch(filters)
        self.set(filters, items)
        return list(items)

    async def get_or_fetch_municipalities(
        self, fetch: Callable[[], Awaitable[list[Municipality]]],
    ) -> list[Municipality]:
        """Municipalities are read-only here, so only the TTL expires them."""
        entry = self._municipalities
        if entry and time.time() - entry["created_at"] < self._ttl:
            self._hits += 1
            return list(entry["value"])
        self._misses += 1
        rows = await fetch()
        self._municipalities = {"value": list(rows), "created_at": time.time()}
        return list(rows)

    def invalidate(self, event: Invalidation) -> None:
        """Drop every snapshot the event could have made stale."""
        stale = [
            key for key in self._entries
            if key.item_type == event.item_type
            and (
                event.municipality_id is None
                or key.municipality_id is None
                or key.municipality_id == event.municipality_id
            )
        ]
        for key in stale:
            del self._entries[key]

    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }

    def clear(self) -> None:
        self._entries.clear()
        self._municipalities = None
        self._hits = 0
        self._misses = 0
