from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import RemoteError
from .config import DEFAULT_GATEWAY_CONFIG, GatewayConfig
from .models import (
    CuratedItem,
    Dish,
    DishRestaurantLink,
    ItemType,
    LinkMetadata,
    Municipality,
    Restaurant,
    ScopeFilters,
)
from .wire import fields_to_wire, item_from_wire

logger = logging.getLogger(__name__)

_LIST_LIMIT = 1000

_COLLECTION: dict[ItemType, str] = {
    ItemType.dish: "dishes",
    ItemType.restaurant: "restaurants",
}


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        parts = [str(body[k]) for k in ("error", "detail") if body.get(k)]
        if parts:
            return ": ".join(parts)
    return response.text


class HttpGateway:
    """Gateway over the REST API: public reads under ``/api``, writes under ``/admin``."""

    def __init__(
        self,
        config: GatewayConfig = DEFAULT_GATEWAY_CONFIG,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._client = client
        self._public = config.public_base_url.rstrip("/")
        self._admin = (config.admin_base_url or config.public_base_url).rstrip("/")

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            if self._client is not None:
                response = await self._client.request(method, url, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self._config.timeout) as client:
                    response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise RemoteError(504, f"Timed out calling {method} {url}") from exc
        except httpx.HTTPError as exc:
            raise RemoteError(503, f"Could not reach {url}: {exc}") from exc

        if response.is_error:
            logger.warning("%s %s failed with HTTP %s", method, url, response.status_code)
            raise RemoteError(response.status_code, _error_message(response))
        if not response.content:
            return None
        return response.json()

    # ── Reads ───────────────────────────────────────────────────────────

    async def fetch_municipalities(self) -> list[Municipality]:
        rows = await self._request("GET", f"{self._public}/api/municipalities")
        return [Municipality.model_validate(row) for row in rows or []]

    async def _fetch_restaurant(self, restaurant_id: int) -> list[CuratedItem]:
        # The admin detail route returns r.*, municipality_id included
        try:
            row = await self._request("GET", f"{self._admin}/admin/restaurants/{restaurant_id}")
        except RemoteError as exc:
            if exc.status == 404:
                return []
            raise
        return [item_from_wire(ItemType.restaurant, row)] if row else []

    async def fetch_items(self, filters: ScopeFilters) -> list[CuratedItem]:
        if filters.item_type == ItemType.restaurant and filters.item_id is not None:
            rows = await self._fetch_restaurant(filters.item_id)
            return [item for item in rows if filters.matches(item)]

        params: dict[str, Any] = {"limit": _LIST_LIMIT}
        if filters.municipality_id is not None:
            params["municipalityId"] = filters.municipality_id
        if filters.category is not None:
            key = "category" if filters.item_type == ItemType.dish else "kind"
            params[key] = filters.category

        url = f"{self._public}/api/{_COLLECTION[filters.item_type]}"
        rows = await self._request("GET", url, params=params)

        items: list[CuratedItem] = []
        for row in rows or []:
            # The restaurant listing omits municipality_id; it is implied by the filter
            if row.get("municipality_id") is None and filters.municipality_id is not None:
                row = {**row, "municipality_id": filters.municipality_id}
            item = item_from_wire(filters.item_type, row)
            if filters.matches(item):
                items.append(item)
        return items

    async def fetch_associated_restaurants(self, dish_id: int) -> list[Restaurant]:
        rows = await self._request("GET", f"{self._admin}/admin/dishes/{dish_id}/restaurants")
        return [item_from_wire(ItemType.restaurant, row) for row in rows or []]  # type: ignore[misc]

    async def fetch_associated_dishes(self, restaurant_id: int) -> list[Dish]:
        rows = await self._request("GET", f"{self._admin}/admin/restaurants/{restaurant_id}/dishes")
        return [item_from_wire(ItemType.dish, row) for row in rows or []]  # type: ignore[misc]

    # ── Writes ──────────────────────────────────────────────────────────

    async def update_item(
        self, item_type: ItemType, item_id: int, fields: dict[str, Any],
    ) -> CuratedItem:
        item_type = ItemType(item_type)
        url = f"{self._admin}/admin/{_COLLECTION[item_type]}/{item_id}"
        await self._request("PATCH", url, json=fields_to_wire(item_type, fields))

        # The admin API answers {"ok": true}; read the row back
        rows = await self.fetch_items(ScopeFilters(item_type=item_type, item_id=item_id))
        if not rows:
            raise RemoteError(404, f"{item_type.value} {item_id} not found after update")
        return rows[0]

    async def create_link(
        self, dish_id: int, restaurant_id: int, metadata: LinkMetadata,
    ) -> DishRestaurantLink:
        payload = {
            "dish_id": dish_id,
            "restaurant_id": restaurant_id,
            "price_note": metadata.price_note,
            "availability": metadata.availability.value,
        }
        await self._request("POST", f"{self._admin}/admin/dish-restaurants", json=payload)
        return DishRestaurantLink(**payload)

    async def delete_link(self, dish_id: int, restaurant_id: int) -> None:
        await self._request(
            "DELETE",
            f"{self._admin}/admin/dish-restaurants",
            params={"dish_id": dish_id, "restaurant_id": restaurant_id},
        )
