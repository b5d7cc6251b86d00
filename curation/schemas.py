from __future__ import annotations

from pydantic import BaseModel, Field, StrictInt

from .catalog.models import Availability, LinkMetadata


class RankRequest(BaseModel):
    # Strict: JSON true or 1.0 is rejected rather than read as rank 1
    rank: StrictInt | None = Field(default=None, description="1, 2, 3, or null to clear")
    confirm: bool | None = Field(
        default=None,
        description="Decision on displacing the current holder: null asks, true displaces, false declines",
    )


class LinkRequest(BaseModel):
    dish_id: StrictInt
    restaurant_id: StrictInt
    price_note: str | None = None
    availability: Availability = Availability.regular

    def metadata(self) -> LinkMetadata:
        return LinkMetadata(price_note=self.price_note, availability=self.availability)


class BulkLinkRequest(BaseModel):
    dish_ids: list[StrictInt] = Field(default_factory=list)
    restaurant_ids: list[StrictInt] = Field(default_factory=list)
    price_note: str | None = None
    availability: Availability = Availability.regular

    def metadata(self) -> LinkMetadata:
        return LinkMetadata(price_note=self.price_note, availability=self.availability)
