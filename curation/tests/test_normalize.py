from __future__ import annotations

import math

import pytest

from curation.catalog.models import Dish, Restaurant
from curation.catalog.normalize import coerce_optional_float, coerce_string_list


@pytest.mark.parametrize(
    "raw, expected",
    [
        (["rice", " pork "], ["rice", "pork"]),
        ('["rice", "pork"]', ["rice", "pork"]),
        ("rice, pork", ["rice", "pork"]),
        ("rice", ["rice"]),
        (None, []),
        ("", []),
        ("  ", []),
        ([], []),
        (["", None, "egg"], ["egg"]),
        ("[spicy], sweet", ["[spicy]", "sweet"]),
    ],
)
def test_coerce_string_list(raw, expected):
    assert coerce_string_list(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [(None, None), ("4.5", 4.5), (3, 3.0), ("n/a", None), (True, None), (math.nan, None)],
)
def test_coerce_optional_float(raw, expected):
    assert coerce_optional_float(raw) == expected


def test_dish_list_fields_normalized_at_boundary():
    dish = Dish(
        id=1,
        name="Pancit",
        ingredients='["noodles", "pork"]',
        flavor_profile="savory, salty",
        dietary=None,
    )
    assert dish.ingredients == ["noodles", "pork"]
    assert dish.flavor_profile == ["savory", "salty"]
    assert dish.dietary == []


def test_legacy_rank_and_flag_values():
    dish = Dish(id=1, name="Pancit", rank=0, flag=1, category="")
    assert dish.rank is None
    assert dish.flag is True
    assert dish.category is None

    restaurant = Restaurant(id=2, name="Stall", rank="", flag=None, rating_count=None)
    assert restaurant.rank is None
    assert restaurant.flag is False
    assert restaurant.rating_count == 0
