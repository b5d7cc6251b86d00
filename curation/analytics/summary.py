from __future__ import annotations

from collections import Counter
from typing import Any, Iterable

from ..catalog.models import CuratedItem, Municipality

TOP_LIMIT = 5


def _featured_order(item: CuratedItem) -> tuple:
    # Flagged items first, ranked before unranked, then rank ascending
    return (not item.flag, item.rank is None, item.rank or 0, item.name.casefold())


def top_featured(items: Iterable[CuratedItem], limit: int = TOP_LIMIT) -> list[dict[str, Any]]:
    featured = sorted((i for i in items if i.flag or i.rank is not None), key=_featured_order)
    return [
        {"id": i.id, "name": i.name, "municipality_id": i.municipality_id, "rank": i.rank}
        for i in featured[:limit]
    ]


def compute_summary(
    municipalities: list[Municipality],
    dishes: list[CuratedItem],
    restaurants: list[CuratedItem],
) -> dict[str, Any]:
    dish_counter: Counter[int | None] = Counter(d.municipality_id for d in dishes)
    restaurant_counter: Counter[int | None] = Counter(r.municipality_id for r in restaurants)

    per_municipality = [
        {
            "id": m.id,
            "name": m.name,
            "slug": m.slug,
            "dishes": dish_counter.get(m.id, 0),
            "restaurants": restaurant_counter.get(m.id, 0),
        }
        for m in sorted(municipalities, key=lambda m: (m.slug, m.id))
    ]

    return {
        "counts": {"dishes": len(dishes), "restaurants": len(restaurants)},
        "per_municipality": per_municipality,
        "top_dishes": top_featured(dishes),
        "top_restaurants": top_featured(restaurants),
    }
