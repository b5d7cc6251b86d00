from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..catalog.normalize import coerce_string_list

ALL = "all"


class SortKey(str, Enum):
    popularity = "popularity"
    rating = "rating"
    name = "name"
    price_low = "price_low"
    price_high = "price_high"


class PriceBucket(str, Enum):
    all = "all"
    budget = "budget"      # price < 100
    mid = "mid"            # 100 <= price <= 300
    premium = "premium"    # price > 300


class SearchFields(BaseModel):
    """Which fields the search stage looks at besides the name."""

    include_description: bool = True
    include_ingredients: bool = True
    include_municipality: bool = True


class ListQuery(BaseModel):
    q: str = ""
    fields: SearchFields = Field(default_factory=SearchFields)
    category: str = ALL
    price: PriceBucket = PriceBucket.all
    dietary: list[str] = Field(default_factory=list)
    spice_level: str = ALL
    sort: SortKey = SortKey.popularity

    @field_validator("dietary", mode="before")
    @classmethod
    def _dietary_list(cls, value: Any) -> list[str]:
        return coerce_string_list(value)

    @field_validator("category", "spice_level", mode="before")
    @classmethod
    def _blank_is_all(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return ALL
        return value.strip().lower() if isinstance(value, str) else value
