from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from .catalog.models import ItemType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Invalidation:
    """Something changed for ``item_type`` in ``municipality_id`` (None = anywhere)."""

    item_type: ItemType
    municipality_id: int | None = None
    reason: str = ""


Subscriber = Callable[[Invalidation], None]


class InvalidationChannel:
    """Explicit publish/subscribe channel passed to the components that share it."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def publish(self, event: Invalidation) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                # One broken subscriber must not stop the others from refreshing
                logger.warning("Invalidation subscriber failed for %s", event, exc_info=True)
