from __future__ import annotations

from typing import Any

from .models import CuratedItem, ItemType, build_item

# Domain field -> column name on the remote tables
_WIRE_FIELDS: dict[ItemType, dict[str, str]] = {
    ItemType.dish: {
        "rank": "panel_rank",
        "flag": "is_signature",
        "rating_count": "total_ratings",
        "dietary": "dietary_info",
        "spice_level": "spicy_level",
    },
    ItemType.restaurant: {
        "rank": "featured_rank",
        "flag": "featured",
        "rating_count": "total_ratings",
    },
}


def item_from_wire(item_type: ItemType, row: dict[str, Any]) -> CuratedItem:
    """Map one remote row (or seed CSV row) onto the domain model.

    Rows already using the domain field names pass through unchanged.
    """
    item_type = ItemType(item_type)
    data = dict(row)
    for field, column in _WIRE_FIELDS[item_type].items():
        if column in data:
            data[field] = data.pop(column)
    if item_type == ItemType.dish and data.get("avg_rating") is not None:
        data["rating"] = data["avg_rating"]
    return build_item(item_type, data)


def fields_to_wire(item_type: ItemType, fields: dict[str, Any]) -> dict[str, Any]:
    mapping = _WIRE_FIELDS[ItemType(item_type)]
    wire: dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, bool):
            value = int(value)
        wire[mapping.get(key, key)] = value
    return wire
