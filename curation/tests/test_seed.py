from pathlib import Path

import pandas as pd
import pytest

from curation.catalog.models import Availability, ItemType, ScopeFilters
from curation.catalog.seed import DISHES_CSV, LINKS_CSV, MUNICIPALITIES_CSV, RESTAURANTS_CSV, load_seed


def _write_catalog(seed_dir: Path) -> None:
    seed_dir.mkdir()
    pd.DataFrame([
        {"id": 1, "name": "Malolos", "slug": "malolos"},
        {"id": 2, "name": "Bulakan", "slug": "bulakan"},
    ]).to_csv(seed_dir / MUNICIPALITIES_CSV, index=False)
    pd.DataFrame([
        {"id": 1, "name": "Pancit", "municipality_id": 1, "category": "food",
         "panel_rank": 1, "is_signature": 1, "dietary_info": '["halal"]', "price": 120},
        {"id": 2, "name": "Kakanin", "municipality_id": 1, "category": "delicacy",
         "panel_rank": None, "is_signature": 0, "dietary_info": None, "price": None},
    ]).to_csv(seed_dir / DISHES_CSV, index=False)
    pd.DataFrame([
        {"id": 10, "name": "Alpha", "municipality_id": 1, "kind": "restaurant",
         "featured_rank": 2, "featured": 1, "cuisine_types": "Filipino, Grill"},
    ]).to_csv(seed_dir / RESTAURANTS_CSV, index=False)
    pd.DataFrame([
        {"dish_id": 1, "restaurant_id": 10, "price_note": None, "availability": "seasonal"},
    ]).to_csv(seed_dir / LINKS_CSV, index=False)


@pytest.mark.asyncio
async def test_load_seed_maps_remote_columns(tmp_path: Path):
    seed_dir = tmp_path / "seed"
    _write_catalog(seed_dir)

    gateway = load_seed(seed_dir)

    municipalities = await gateway.fetch_municipalities()
    assert [m.slug for m in municipalities] == ["bulakan", "malolos"]

    dishes = await gateway.fetch_items(ScopeFilters(item_type=ItemType.dish))
    by_id = {d.id: d for d in dishes}
    assert by_id[1].rank == 1 and by_id[1].flag is True
    assert by_id[1].dietary == ["halal"]
    # Blank cells come through as missing values
    assert by_id[2].rank is None
    assert by_id[2].price is None
    assert by_id[2].dietary == []

    restaurant = (await gateway.fetch_items(ScopeFilters(item_type=ItemType.restaurant)))[0]
    assert restaurant.rank == 2
    assert restaurant.cuisine_types == ["Filipino", "Grill"]

    links = gateway.links()
    assert [link.key for link in links] == [(1, 10)]
    assert links[0].availability == Availability.seasonal
    assert links[0].price_note is None


def test_missing_files_are_skipped(tmp_path: Path):
    gateway = load_seed(tmp_path)
    assert gateway.links() == []
