from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .normalize import coerce_optional_float, coerce_string_list


class ItemType(str, Enum):
    dish = "dish"
    restaurant = "restaurant"


class DishCategory(str, Enum):
    food = "food"
    delicacy = "delicacy"
    drink = "drink"


class Availability(str, Enum):
    regular = "regular"
    seasonal = "seasonal"
    preorder = "preorder"


class Municipality(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    slug: str = ""


class CuratedItem(BaseModel):
    """A dish or restaurant record eligible for ranking."""

    model_config = ConfigDict(extra="ignore")

    item_type: ItemType
    id: int
    name: str
    slug: str | None = None
    municipality_id: int | None = None
    description: str | None = None
    rank: int | None = None
    flag: bool = False
    rating: float | None = None
    rating_count: int = 0
    popularity: float | None = None
    price: float | None = None

    @field_validator("rank", mode="before")
    @classmethod
    def _zero_rank_is_unranked(cls, value: Any) -> Any:
        # Older rows store 0 or "" for "no rank"
        if value in (0, "0", ""):
            return None
        return value

    @field_validator("flag", mode="before")
    @classmethod
    def _numeric_flag(cls, value: Any) -> Any:
        # 0/1 columns, sometimes read back as floats
        if value is None:
            return False
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return bool(value)
        return value

    @field_validator("rating", "popularity", "price", mode="before")
    @classmethod
    def _loose_float(cls, value: Any) -> float | None:
        return coerce_optional_float(value)

    @field_validator("rating_count", mode="before")
    @classmethod
    def _loose_count(cls, value: Any) -> int:
        number = coerce_optional_float(value)
        return int(number) if number is not None else 0

    @property
    def category_key(self) -> str | None:
        """The field the list-view category filter matches against."""
        return None

    @property
    def search_terms(self) -> list[str]:
        """Extra terms the list-view search can match (ingredients, cuisines)."""
        return []

    def scope_key(self) -> tuple:
        """Grouping key within which rank slots are unique."""
        return (self.item_type.value, self.municipality_id)


class Dish(CuratedItem):
    item_type: ItemType = ItemType.dish
    category: DishCategory | None = None
    ingredients: list[str] = Field(default_factory=list)
    flavor_profile: list[str] = Field(default_factory=list)
    dietary: list[str] = Field(default_factory=list)
    spice_level: str | None = None

    @field_validator("ingredients", "flavor_profile", "dietary", mode="before")
    @classmethod
    def _string_list(cls, value: Any) -> list[str]:
        return coerce_string_list(value)

    @field_validator("category", "spice_level", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def category_key(self) -> str | None:
        return self.category.value if self.category else None

    @property
    def search_terms(self) -> list[str]:
        return self.ingredients

    def scope_key(self) -> tuple:
        return (self.item_type.value, self.municipality_id, self.category_key)


class Restaurant(CuratedItem):
    item_type: ItemType = ItemType.restaurant
    kind: str | None = None
    address: str | None = None
    cuisine_types: list[str] = Field(default_factory=list)
    price_range: str | None = None

    @field_validator("cuisine_types", mode="before")
    @classmethod
    def _string_list(cls, value: Any) -> list[str]:
        return coerce_string_list(value)

    @property
    def category_key(self) -> str | None:
        return self.kind

    @property
    def search_terms(self) -> list[str]:
        return self.cuisine_types


AnyItem = Union[Dish, Restaurant]

MODEL_BY_TYPE: dict[ItemType, type[CuratedItem]] = {
    ItemType.dish: Dish,
    ItemType.restaurant: Restaurant,
}


def build_item(item_type: ItemType, data: dict[str, Any]) -> CuratedItem:
    return MODEL_BY_TYPE[ItemType(item_type)].model_validate(data)


class LinkMetadata(BaseModel):
    price_note: str | None = None
    availability: Availability = Availability.regular


class DishRestaurantLink(BaseModel):
    dish_id: int
    restaurant_id: int
    price_note: str | None = None
    availability: Availability = Availability.regular

    @property
    def key(self) -> tuple[int, int]:
        return (self.dish_id, self.restaurant_id)


class ScopeFilters(BaseModel):
    """What to fetch from the gateway. Hashable so it can key the snapshot cache."""

    model_config = ConfigDict(frozen=True)

    item_type: ItemType
    municipality_id: int | None = None
    category: str | None = None
    item_id: int | None = None

    @classmethod
    def for_scope(cls, item: CuratedItem) -> ScopeFilters:
        return cls(
            item_type=item.item_type,
            municipality_id=item.municipality_id,
            category=item.category_key if item.item_type == ItemType.dish else None,
        )

    def matches(self, item: CuratedItem) -> bool:
        if item.item_type != self.item_type:
            return False
        if self.item_id is not None and item.id != self.item_id:
            return False
        if self.municipality_id is not None and item.municipality_id != self.municipality_id:
            return False
        if self.category is not None and item.category_key != self.category:
            return False
        return True
