from __future__ import annotations

import logging
from typing import Any, Sequence

from ..catalog.models import CuratedItem
from ..errors import CurationError
from .engine import (
    Decision,
    RankAssignmentEngine,
    RankOutcome,
    RankStatus,
    effective_rank,
    find_conflicts,
    validate_rank,
)

logger = logging.getLogger(__name__)


class OptimisticRankCommand:
    """A rank change shown on a caller-owned snapshot before the gateway confirms it.

    ``apply`` returns a speculative copy of the snapshot with the affected
    items listed in ``pending_ids``. ``commit`` swaps in the confirmed rows;
    ``undo`` is the compensating action and hands back the original snapshot.
    ``execute`` runs the whole cycle against the engine.
    """

    def __init__(
        self,
        engine: RankAssignmentEngine,
        item: CuratedItem,
        desired_rank: Any,
        snapshot: Sequence[CuratedItem],
    ) -> None:
        self._engine = engine
        self._item = item
        self._desired_rank = desired_rank
        self._before = list(snapshot)
        self._speculative: list[CuratedItem] = list(snapshot)
        self.pending_ids: set[int] = set()

    @property
    def is_pending(self) -> bool:
        return bool(self.pending_ids)

    def apply(self) -> list[CuratedItem]:
        rank = effective_rank(self._item.rank, validate_rank(self._desired_rank))
        holders = {h.id for h in find_conflicts(self._item, rank, self._before)}

        speculative: list[CuratedItem] = []
        for row in self._before:
            if row.id == self._item.id and row.item_type == self._item.item_type:
                row = row.model_copy(update={"rank": rank, "flag": rank is not None})
                self.pending_ids.add(row.id)
            elif row.id in holders and row.item_type == self._item.item_type:
                row = row.model_copy(update={"rank": None, "flag": False})
                self.pending_ids.add(row.id)
            speculative.append(row)

        self._speculative = speculative
        return list(speculative)

    def commit(self, outcome: RankOutcome) -> list[CuratedItem]:
        confirmed = {(row.item_type, row.id): row for row in [outcome.item, *outcome.displaced]}
        self._speculative = [
            confirmed.get((row.item_type, row.id), row) for row in self._speculative
        ]
        self.pending_ids.clear()
        return list(self._speculative)

    def undo(self) -> list[CuratedItem]:
        self._speculative = list(self._before)
        self.pending_ids.clear()
        return list(self._before)

    async def execute(self, decide: Decision | None = None) -> list[CuratedItem]:
        self.apply()
        try:
            outcome = await self._engine.set_rank(
                self._item, self._desired_rank, self._before, decide=decide,
            )
        except CurationError:
            logger.info("Rolling back optimistic rank change for %s", self._item.id)
            self.undo()
            raise
        if outcome.status == RankStatus.declined:
            return self.undo()
        return self.commit(outcome)
