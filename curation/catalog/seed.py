from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List

import pandas as pd

from .gateway import InMemoryGateway
from .models import DishRestaurantLink, ItemType, Municipality
from .wire import item_from_wire

logger = logging.getLogger(__name__)

MUNICIPALITIES_CSV = "municipalities.csv"
DISHES_CSV = "dishes.csv"
RESTAURANTS_CSV = "restaurants.csv"
LINKS_CSV = "dish_restaurants.csv"

LINK_COLUMNS: List[str] = ["dish_id", "restaurant_id", "price_note", "availability"]


def _read_rows(path: Path) -> list[dict[str, Any]]:
    if not path.is_file():
        logger.info("Seed file %s not found, skipping", path.name)
        return []
    df = pd.read_csv(path)
    # NaN -> None so the models see missing values, not floats
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


def load_seed(seed_dir: Path, gateway: InMemoryGateway | None = None) -> InMemoryGateway:
    """
    Fill an in-memory gateway from CSV exports of the catalog tables.

    Expected files (each optional):
    - municipalities.csv: id, name, slug
    - dishes.csv / restaurants.csv: either domain column names or the
      remote table names (panel_rank, is_signature, featured_rank, ...)
    - dish_restaurants.csv: dish_id, restaurant_id[, price_note, availability]
    """
    seed_dir = Path(seed_dir)
    gateway = gateway or InMemoryGateway()

    for row in _read_rows(seed_dir / MUNICIPALITIES_CSV):
        gateway.add_municipality(Municipality.model_validate(row))

    for item_type, filename in ((ItemType.dish, DISHES_CSV), (ItemType.restaurant, RESTAURANTS_CSV)):
        for row in _read_rows(seed_dir / filename):
            gateway.add_item(item_from_wire(item_type, row))

    links: list[DishRestaurantLink] = []
    for row in _read_rows(seed_dir / LINKS_CSV):
        data = {k: row[k] for k in LINK_COLUMNS if row.get(k) is not None}
        links.append(DishRestaurantLink.model_validate(data))
    for link in links:
        gateway.add_link(link)

    logger.info(
        "Seeded catalog from %s: %d links", seed_dir, len(links),
    )
    return gateway
