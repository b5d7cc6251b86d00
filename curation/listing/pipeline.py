from __future__ import annotations

from typing import Iterable, Mapping, Sequence, TypeVar

import pandas as pd

from ..catalog.models import CuratedItem
from .models import ALL, ListQuery, PriceBucket, SearchFields, SortKey

T = TypeVar("T", bound=CuratedItem)

FRAME_COLUMNS = [
    "name",
    "description",
    "terms",
    "municipality",
    "category",
    "price",
    "dietary",
    "spice_level",
    "popularity",
    "rating",
    "rating_count",
]

BUDGET_CEILING = 100
PREMIUM_FLOOR = 300

# Primary key and tie-breaks per sort key as (column, ascending).
# Every chain is completed with name ascending, which makes the order total.
SORT_CHAINS: dict[SortKey, list[tuple[str, bool]]] = {
    SortKey.popularity: [("popularity", False), ("rating", False), ("rating_count", False)],
    SortKey.rating: [("rating", False), ("rating_count", False), ("popularity", False)],
    SortKey.name: [],
    SortKey.price_low: [("price", True)],
    SortKey.price_high: [("price", False)],
}


def to_frame(
    items: Sequence[CuratedItem],
    municipality_names: Mapping[int, str] | None = None,
) -> pd.DataFrame:
    """One row per item, indexed by position in ``items``. Missing numbers count as 0."""
    names = municipality_names or {}
    records = []
    for item in items:
        records.append({
            "name": item.name,
            "description": item.description or "",
            "terms": list(item.search_terms),
            "municipality": names.get(item.municipality_id, "") if item.municipality_id else "",
            "category": (item.category_key or "").lower(),
            "price": item.price or 0.0,
            "dietary": list(getattr(item, "dietary", [])),
            "spice_level": (getattr(item, "spice_level", None) or "").lower(),
            "popularity": item.popularity or 0.0,
            "rating": item.rating or 0.0,
            "rating_count": item.rating_count,
        })
    return pd.DataFrame.from_records(records, columns=FRAME_COLUMNS)


def search_stage(frame: pd.DataFrame, q: str, fields: SearchFields) -> pd.DataFrame:
    """Case-insensitive substring match in any enabled field. Empty query keeps all."""
    needle = q.strip().casefold()
    if not needle or frame.empty:
        return frame

    mask = frame["name"].str.casefold().str.contains(needle, regex=False)
    if fields.include_description:
        mask = mask | frame["description"].str.casefold().str.contains(needle, regex=False)
    if fields.include_ingredients:
        mask = mask | frame["terms"].map(
            lambda terms: any(needle in t.casefold() for t in terms)
        ).astype(bool)
    if fields.include_municipality:
        mask = mask | frame["municipality"].str.casefold().str.contains(needle, regex=False)
    return frame.loc[mask]


def filter_stage(frame: pd.DataFrame, query: ListQuery) -> pd.DataFrame:
    """AND of category, price bucket, dietary tags (all required) and spice level."""
    if frame.empty:
        return frame

    mask = pd.Series(True, index=frame.index)

    if query.category != ALL:
        mask = mask & (frame["category"] == query.category)

    price = frame["price"]
    if query.price == PriceBucket.budget:
        mask = mask & (price < BUDGET_CEILING)
    elif query.price == PriceBucket.mid:
        mask = mask & price.between(BUDGET_CEILING, PREMIUM_FLOOR, inclusive="both")
    elif query.price == PriceBucket.premium:
        mask = mask & (price > PREMIUM_FLOOR)

    if query.dietary:
        wanted = {tag.casefold() for tag in query.dietary}
        mask = mask & frame["dietary"].map(
            lambda tags: wanted.issubset({t.casefold() for t in tags})
        ).astype(bool)

    if query.spice_level != ALL:
        mask = mask & (frame["spice_level"] == query.spice_level)

    return frame.loc[mask]


def sort_stage(frame: pd.DataFrame, sort: SortKey) -> pd.DataFrame:
    if frame.empty:
        return frame
    chain = SORT_CHAINS[SortKey(sort)]
    frame = frame.assign(_name_key=frame["name"].str.casefold())
    by = [col for col, _ in chain] + ["_name_key", "name"]
    ascending = [asc for _, asc in chain] + [True, True]
    return frame.sort_values(by=by, ascending=ascending, kind="mergesort")


def run_pipeline(
    items: Iterable[T],
    query: ListQuery,
    municipality_names: Mapping[int, str] | None = None,
) -> list[T]:
    """
    Search, filter and sort an already-fetched snapshot.

    Pure: ``items`` is not mutated and the returned list holds the same
    objects, in display order.
    """
    items = list(items)
    if not items:
        return []

    frame = to_frame(items, municipality_names)
    frame = search_stage(frame, query.q, query.fields)
    frame = filter_stage(frame, query)
    frame = sort_stage(frame, query.sort)
    return [items[i] for i in frame.index]
