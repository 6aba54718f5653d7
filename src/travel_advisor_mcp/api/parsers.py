"""Unwrap Travel Advisor response envelopes into lists of place records."""

from typing import Any, Optional


def _dig(payload: Any, *path: str) -> Any:
    current = payload
    for part in path:
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def extract_boundary_places(payload: Any) -> list[dict[str, Any]]:
    """Records from a list-in-boundary response (``{"data": [...]}``)."""
    records = _dig(payload, "data")
    return list(records) if isinstance(records, list) else []


def extract_v2_places(payload: Any) -> list[dict[str, Any]]:
    """Records from a v2 list response (``{"data": {"data": [...]}}``)."""
    records = _dig(payload, "data", "data")
    return list(records) if isinstance(records, list) else []


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def is_valid_place(place: Any) -> bool:
    """A displayable place has a name and at least one review.

    The boundary endpoints mix ads and placeholder rows into the results;
    those come without a name or with zero reviews.
    """
    if not isinstance(place, dict) or not place.get("name"):
        return False
    reviews = _to_float(place.get("num_reviews"))
    return reviews is not None and reviews > 0


def filter_places(
    places: list[Any], min_rating: Optional[float] = None
) -> list[dict[str, Any]]:
    """Keep valid places, optionally only those rated at least ``min_rating``."""
    results = [p for p in places if is_valid_place(p)]
    if min_rating:
        results = [
            p for p in results
            if (_to_float(p.get("rating")) or 0.0) >= min_rating
        ]
    return results
