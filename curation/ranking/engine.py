from __future__ import annotations

import inspect
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Union

from pydantic import BaseModel, Field

from ..catalog.gateway import RemoteDataGateway
from ..catalog.models import AnyItem, CuratedItem, ItemType
from ..errors import ConflictRequiresConfirmation, InvalidRank, ValidationError
from ..inflight import InFlightGuard
from ..signals import Invalidation, InvalidationChannel

logger = logging.getLogger(__name__)

RANK_SLOTS = (1, 2, 3)

Decision = Callable[[CuratedItem], Union[bool, Awaitable[bool]]]


class RankStatus(str, Enum):
    applied = "applied"
    declined = "declined"


class RankOutcome(BaseModel):
    status: RankStatus
    rank: int | None = None
    item: AnyItem
    displaced: list[AnyItem] = Field(default_factory=list)


def validate_rank(rank: Any) -> int | None:
    """Accept 1, 2, 3 or None; anything else is ``InvalidRank``."""
    if rank is None:
        return None
    # bool is an int subclass; True is not rank 1
    if isinstance(rank, bool) or not isinstance(rank, int) or rank not in RANK_SLOTS:
        raise InvalidRank(rank)
    return rank


def validate_scope(item: CuratedItem) -> None:
    if item.municipality_id is None:
        raise ValidationError(f"{item.item_type.value} {item.id} has no municipality")
    if item.item_type == ItemType.dish and item.category_key is None:
        raise ValidationError(f"dish {item.id} has no category")


def effective_rank(current: int | None, desired: int | None) -> int | None:
    """Re-selecting the slot an item already holds clears it."""
    if desired is not None and current == desired:
        return None
    return desired


def find_conflicts(
    item: CuratedItem, rank: int | None, scope_items: Iterable[CuratedItem],
) -> list[CuratedItem]:
    """Other items in ``item``'s scope currently holding ``rank``.

    Entries from a different scope are ignored, so slightly stale caller-side
    filtering is harmless.
    """
    if rank is None:
        return []
    scope = item.scope_key()
    return [
        peer for peer in scope_items
        if peer.id != item.id and peer.scope_key() == scope and peer.rank == rank
    ]


def ranked_slots(items: Iterable[CuratedItem]) -> list[CuratedItem]:
    """Items holding a rank slot, slot 1 first."""
    ranked = [item for item in items if item.rank in RANK_SLOTS]
    return sorted(ranked, key=lambda i: (i.rank, i.name.casefold(), i.id))


class RankAssignmentEngine:
    """Assigns rank slots while keeping at most one holder per slot per scope.

    The engine never fetches: callers pass the items sharing the target's
    scope. Displacing a current holder needs an explicit decision, either
    through ``decide`` or by catching ``ConflictRequiresConfirmation`` and
    calling again with a ``decide`` that approves.

    The clear-then-set writes are two independent gateway calls. If the
    second fails the slot is left empty; calling again with the same
    arguments (after a re-fetch) converges.
    """

    def __init__(
        self,
        gateway: RemoteDataGateway,
        channel: InvalidationChannel | None = None,
        guard: InFlightGuard | None = None,
    ) -> None:
        self._gateway = gateway
        self._channel = channel
        self._guard = guard or InFlightGuard()

    async def set_rank(
        self,
        item: CuratedItem,
        desired_rank: Any,
        scope_items: Iterable[CuratedItem],
        *,
        decide: Decision | None = None,
    ) -> RankOutcome:
        rank = validate_rank(desired_rank)
        validate_scope(item)
        rank = effective_rank(item.rank, rank)

        with self._guard.hold(("rank", item.item_type, item.id)):
            conflicts = find_conflicts(item, rank, scope_items)
            if conflicts:
                if decide is None:
                    raise ConflictRequiresConfirmation(conflicts[0], rank)  # type: ignore[arg-type]
                approved = decide(conflicts[0])
                if inspect.isawaitable(approved):
                    approved = await approved
                if not approved:
                    logger.info(
                        "Declined displacing %s %s from rank %s",
                        conflicts[0].item_type.value, conflicts[0].id, rank,
                    )
                    return RankOutcome(status=RankStatus.declined, rank=item.rank, item=item)

            wrote = False
            try:
                displaced: list[CuratedItem] = []
                for holder in conflicts:
                    displaced.append(await self._gateway.update_item(
                        holder.item_type, holder.id, {"rank": None, "flag": False},
                    ))
                    wrote = True
                updated = await self._gateway.update_item(
                    item.item_type, item.id, {"rank": rank, "flag": rank is not None},
                )
                wrote = True
            finally:
                if wrote:
                    self._publish(item)

        logger.info(
            "Set %s %s rank %s -> %s (displaced %s)",
            item.item_type.value, item.id, item.rank, rank, [d.id for d in displaced],
        )
        return RankOutcome(
            status=RankStatus.applied, rank=rank, item=updated, displaced=displaced,
        )

    def _publish(self, item: CuratedItem) -> None:
        if self._channel is not None:
            self._channel.publish(Invalidation(
                item_type=item.item_type,
                municipality_id=item.municipality_id,
                reason="rank",
            ))
