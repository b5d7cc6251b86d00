"""Shared fixtures: a small two-municipality catalog on the in-memory gateway."""

from __future__ import annotations

import pytest

from curation.catalog.gateway import InMemoryGateway
from curation.catalog.models import Dish, ItemType, Municipality, Restaurant
from curation.errors import RemoteError


def make_catalog(cls: type[InMemoryGateway] = InMemoryGateway) -> InMemoryGateway:
    return cls(
        municipalities=[
            Municipality(id=1, name="Malolos", slug="malolos"),
            Municipality(id=2, name="Bulakan", slug="bulakan"),
        ],
        items=[
            # Malolos / food
            Dish(id=1, name="X Pancit", municipality_id=1, category="food", rank=1, flag=True),
            Dish(id=2, name="Y Kakanin", municipality_id=1, category="food"),
            Dish(id=3, name="Z Inihaw", municipality_id=1, category="food", rank=2, flag=True),
            # Malolos / delicacy: separate scope, also rank 1
            Dish(id=4, name="Ensaymada", municipality_id=1, category="delicacy", rank=1, flag=True),
            # Bulakan / food
            Dish(id=5, name="Bulakan Chicharon", municipality_id=2, category="food", rank=1, flag=True),
            Restaurant(id=10, name="Alpha Kitchen", municipality_id=1, kind="restaurant", rank=1, flag=True),
            Restaurant(id=11, name="Bravo Stall", municipality_id=1, kind="stall"),
            Restaurant(id=12, name="Carinderia Uno", municipality_id=1, kind="restaurant"),
            Restaurant(id=13, name="Delta Market", municipality_id=2, kind="market", rank=1, flag=True),
        ],
    )


@pytest.fixture
def gateway() -> InMemoryGateway:
    return make_catalog()


class RecordingGateway(InMemoryGateway):
    """Remembers every write and can be told to fail writes for given ids."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.updates: list[tuple[ItemType, int, dict]] = []
        self.fail_updates: dict[int, int] = {}  # item id -> remaining failures

    async def update_item(self, item_type, item_id, fields):
        self.updates.append((ItemType(item_type), item_id, dict(fields)))
        if self.fail_updates.get(item_id, 0) > 0:
            self.fail_updates[item_id] -= 1
            raise RemoteError(500, "update_dish_failed")
        return await super().update_item(item_type, item_id, fields)


@pytest.fixture
def recording_gateway() -> RecordingGateway:
    return make_catalog(RecordingGateway)  # type: ignore[return-value]


@pytest.fixture
def catalog_factory():
    """``make_catalog`` for tests that need a gateway subclass."""
    return make_catalog
