from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable

from pydantic import BaseModel, Field

from ..catalog.gateway import RemoteDataGateway
from ..catalog.models import (
    Dish,
    DishRestaurantLink,
    ItemType,
    LinkMetadata,
    Restaurant,
)
from ..errors import CurationError, RemoteError, ValidationError
from ..inflight import InFlightGuard
from ..signals import Invalidation, InvalidationChannel

logger = logging.getLogger(__name__)


class LinkPair(BaseModel):
    dish_id: int
    restaurant_id: int


class PairFailure(LinkPair):
    status: int
    message: str


class BulkLinkResult(BaseModel):
    """Per-pair outcome of a bulk link. Partial failure is data, not an exception."""

    succeeded: list[LinkPair] = Field(default_factory=list)
    failed: list[PairFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def retry_pairs(self) -> list[tuple[int, int]]:
        return [(f.dish_id, f.restaurant_id) for f in self.failed]


def _require_id(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{label} must be a positive integer, got {value!r}")
    return value


class AssociationManager:
    """Dish <-> restaurant links. Holds no cache; re-fetch after any mutation."""

    def __init__(
        self,
        gateway: RemoteDataGateway,
        channel: InvalidationChannel | None = None,
        guard: InFlightGuard | None = None,
    ) -> None:
        self._gateway = gateway
        self._channel = channel
        self._guard = guard or InFlightGuard()

    async def link(
        self,
        dish_id: int,
        restaurant_id: int,
        metadata: LinkMetadata | None = None,
    ) -> DishRestaurantLink:
        """Create the pair; an existing pair is success and stays a single row.

        When the gateway reports the pair as a duplicate (409) the stored row
        is left as it was, and the returned link is built from the request:
        its metadata may differ from what is stored.
        """
        _require_id(dish_id, "dish_id")
        _require_id(restaurant_id, "restaurant_id")
        metadata = metadata or LinkMetadata()

        with self._guard.hold(("link", dish_id, restaurant_id)):
            try:
                link = await self._gateway.create_link(dish_id, restaurant_id, metadata)
            except RemoteError as exc:
                if exc.status != 409:
                    raise
                # Gateways with a unique constraint report the duplicate; the
                # stored metadata is not read back
                link = DishRestaurantLink(
                    dish_id=dish_id,
                    restaurant_id=restaurant_id,
                    price_note=metadata.price_note,
                    availability=metadata.availability,
                )
        self._publish("link")
        return link

    async def unlink(self, dish_id: int, restaurant_id: int) -> None:
        """Remove the pair; a missing pair is success."""
        _require_id(dish_id, "dish_id")
        _require_id(restaurant_id, "restaurant_id")

        with self._guard.hold(("unlink", dish_id, restaurant_id)):
            try:
                await self._gateway.delete_link(dish_id, restaurant_id)
            except RemoteError as exc:
                if exc.status != 404:
                    raise
                logger.info("Link %s/%s already absent", dish_id, restaurant_id)
        self._publish("unlink")

    async def bulk_link(
        self,
        dish_ids: Iterable[int],
        restaurant_ids: Iterable[int],
        metadata: LinkMetadata | None = None,
    ) -> BulkLinkResult:
        """Link every pair of ``dish_ids x restaurant_ids``.

        All pairs are submitted at once and awaited together; one failing
        pair never stops the others. The result lists both outcomes so the
        caller can retry only the failed pairs.
        """
        dishes = sorted({_require_id(d, "dish_id") for d in dish_ids})
        restaurants = sorted({_require_id(r, "restaurant_id") for r in restaurant_ids})
        pairs = [(d, r) for d in dishes for r in restaurants]
        if not pairs:
            return BulkLinkResult()

        outcomes = await asyncio.gather(
            *(self.link(d, r, metadata) for d, r in pairs),
            return_exceptions=True,
        )

        result = BulkLinkResult()
        for (d, r), outcome in zip(pairs, outcomes):
            if isinstance(outcome, RemoteError):
                result.failed.append(PairFailure(
                    dish_id=d, restaurant_id=r, status=outcome.status, message=outcome.message,
                ))
            elif isinstance(outcome, CurationError):
                result.failed.append(PairFailure(
                    dish_id=d, restaurant_id=r, status=outcome.http_status, message=outcome.message,
                ))
            elif isinstance(outcome, Exception):
                logger.warning("Unexpected failure linking %s/%s", d, r, exc_info=outcome)
                result.failed.append(PairFailure(
                    dish_id=d, restaurant_id=r, status=500, message=str(outcome),
                ))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.succeeded.append(LinkPair(dish_id=d, restaurant_id=r))

        if result.failed:
            logger.warning(
                "Bulk link finished with %d of %d pairs failed",
                len(result.failed), len(pairs),
            )
        return result

    # ── Projections ─────────────────────────────────────────────────────

    async def list_associated_restaurants(self, dish_id: int) -> list[Restaurant]:
        _require_id(dish_id, "dish_id")
        return await self._gateway.fetch_associated_restaurants(dish_id)

    async def list_associated_dishes(self, restaurant_id: int) -> list[Dish]:
        _require_id(restaurant_id, "restaurant_id")
        return await self._gateway.fetch_associated_dishes(restaurant_id)

    async def linked_restaurant_ids(self, dish_id: int) -> set[int]:
        return {r.id for r in await self.list_associated_restaurants(dish_id)}

    async def linked_dish_ids(self, restaurant_id: int) -> set[int]:
        return {d.id for d in await self.list_associated_dishes(restaurant_id)}

    def _publish(self, reason: str) -> None:
        if self._channel is None:
            return
        for item_type in (ItemType.dish, ItemType.restaurant):
            self._channel.publish(Invalidation(item_type=item_type, reason=reason))
