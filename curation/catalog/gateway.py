from __future__ import annotations

from typing import Any, Iterable, Protocol

from ..errors import RemoteError
from .models import (
    CuratedItem,
    Dish,
    DishRestaurantLink,
    ItemType,
    LinkMetadata,
    Municipality,
    Restaurant,
    ScopeFilters,
    build_item,
)


class RemoteDataGateway(Protocol):
    """The narrow read/write surface the curation core calls through.

    Every method either returns its payload or raises ``RemoteError``
    carrying an HTTP-style status and message. Nothing retries here.
    """

    async def fetch_municipalities(self) -> list[Municipality]: ...

    async def fetch_items(self, filters: ScopeFilters) -> list[CuratedItem]: ...

    async def update_item(
        self, item_type: ItemType, item_id: int, fields: dict[str, Any],
    ) -> CuratedItem: ...

    async def create_link(
        self, dish_id: int, restaurant_id: int, metadata: LinkMetadata,
    ) -> DishRestaurantLink: ...

    async def delete_link(self, dish_id: int, restaurant_id: int) -> None: ...

    async def fetch_associated_restaurants(self, dish_id: int) -> list[Restaurant]: ...

    async def fetch_associated_dishes(self, restaurant_id: int) -> list[Dish]: ...


def _by_name(item: CuratedItem) -> tuple[str, int]:
    return (item.name.casefold(), item.id)


class InMemoryGateway:
    """Dict-backed gateway.

    Returns copies only, so no caller ever holds a reference into the
    store. Link creation behaves like ``INSERT IGNORE``.
    """

    def __init__(
        self,
        municipalities: Iterable[Municipality] = (),
        items: Iterable[CuratedItem] = (),
        links: Iterable[DishRestaurantLink] = (),
    ) -> None:
        self._municipalities: dict[int, Municipality] = {}
        self._items: dict[tuple[ItemType, int], CuratedItem] = {}
        self._links: dict[tuple[int, int], DishRestaurantLink] = {}
        for m in municipalities:
            self.add_municipality(m)
        for item in items:
            self.add_item(item)
        for link in links:
            self.add_link(link)

    # ── Seeding ─────────────────────────────────────────────────────────

    def add_municipality(self, municipality: Municipality) -> None:
        self._municipalities[municipality.id] = municipality.model_copy()

    def add_item(self, item: CuratedItem) -> None:
        self._items[(item.item_type, item.id)] = item.model_copy(deep=True)

    def add_link(self, link: DishRestaurantLink) -> None:
        self._links[link.key] = link.model_copy()

    def links(self) -> list[DishRestaurantLink]:
        return [link.model_copy() for link in self._links.values()]

    # ── Reads ───────────────────────────────────────────────────────────

    async def fetch_municipalities(self) -> list[Municipality]:
        rows = sorted(self._municipalities.values(), key=lambda m: (m.name.casefold(), m.id))
        return [m.model_copy() for m in rows]

    async def fetch_items(self, filters: ScopeFilters) -> list[CuratedItem]:
        rows = [item for item in self._items.values() if filters.matches(item)]
        rows.sort(key=_by_name)
        return [item.model_copy(deep=True) for item in rows]

    async def fetch_associated_restaurants(self, dish_id: int) -> list[Restaurant]:
        rows = [
            self._items[(ItemType.restaurant, rid)]
            for (did, rid) in self._links
            if did == dish_id and (ItemType.restaurant, rid) in self._items
        ]
        rows.sort(key=_by_name)
        return [item.model_copy(deep=True) for item in rows]  # type: ignore[misc]

    async def fetch_associated_dishes(self, restaurant_id: int) -> list[Dish]:
        rows = [
            self._items[(ItemType.dish, did)]
            for (did, rid) in self._links
            if rid == restaurant_id and (ItemType.dish, did) in self._items
        ]
        rows.sort(key=_by_name)
        return [item.model_copy(deep=True) for item in rows]  # type: ignore[misc]

    # ── Writes ──────────────────────────────────────────────────────────

    async def update_item(
        self, item_type: ItemType, item_id: int, fields: dict[str, Any],
    ) -> CuratedItem:
        key = (ItemType(item_type), item_id)
        current = self._items.get(key)
        if current is None:
            raise RemoteError(404, f"{key[0].value} {item_id} not found")
        merged = {**current.model_dump(), **fields, "id": item_id}
        try:
            updated = build_item(key[0], merged)
        except ValueError as exc:
            raise RemoteError(400, str(exc)) from exc
        self._items[key] = updated
        return updated.model_copy(deep=True)

    async def create_link(
        self, dish_id: int, restaurant_id: int, metadata: LinkMetadata,
    ) -> DishRestaurantLink:
        if (ItemType.dish, dish_id) not in self._items:
            raise RemoteError(404, f"dish {dish_id} not found")
        if (ItemType.restaurant, restaurant_id) not in self._items:
            raise RemoteError(404, f"restaurant {restaurant_id} not found")
        key = (dish_id, restaurant_id)
        if key not in self._links:
            self._links[key] = DishRestaurantLink(
                dish_id=dish_id,
                restaurant_id=restaurant_id,
                price_note=metadata.price_note,
                availability=metadata.availability,
            )
        return self._links[key].model_copy()

    async def delete_link(self, dish_id: int, restaurant_id: int) -> None:
        self._links.pop((dish_id, restaurant_id), None)
