from __future__ import annotations

import json
from typing import Any


def coerce_string_list(value: Any) -> list[str]:
    """Coerce a list-ish field into a list of trimmed, non-empty strings.

    Upstream rows store the same logical field as a real list, a
    JSON-encoded list (``'["rice", "pork"]'``) or a comma-separated string
    (``"rice, pork"``). All three come out as ``["rice", "pork"]``.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]

    raw = str(value).strip()
    if not raw:
        return []

    if raw.startswith("["):
        try:
            parsed = json.loads(raw)
        except ValueError:
            # Not JSON after all, e.g. "[spicy], sweet"
            parsed = None
        if isinstance(parsed, list):
            return coerce_string_list(parsed)

    return [part.strip() for part in raw.split(",") if part.strip()]


def coerce_optional_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    # NaN from pandas rows
    if result != result:
        return None
    return result
